"""Round-trip statistics derived from a finished run."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ._models import ProbeResult, round2


@dataclass(frozen=True)
class Statistics:
    min_ms: Optional[float]
    max_ms: Optional[float]
    avg_ms: Optional[float]
    std_dev_ms: Optional[float]
    packets_sent: int
    packets_received: int
    packets_lost: int
    packet_loss_percent: float

    @property
    def has_rtt(self) -> bool:
        return self.packets_received > 0


def successful_rtts(results: Iterable[ProbeResult]) -> list[float]:
    """Full-precision RTTs of the successful probes, in sequence order."""
    return [
        result.round_trip_ms
        for result in results
        if result.succeeded and result.round_trip_ms is not None
    ]


def calculate_statistics(rtts: Sequence[float], total: int) -> Statistics:
    """Summarise ``rtts`` out of ``total`` attempted probes.

    ``total`` must be at least 1 and no smaller than ``len(rtts)``. The
    standard deviation is the population one (divisor ``len(rtts)``). Every
    reported value is rounded to two decimals.
    """
    if total < 1:
        raise ValueError("total must be at least 1")
    received = len(rtts)
    if received > total:
        raise ValueError("more successful probes than attempted probes")
    lost = total - received

    if not rtts:
        return Statistics(
            min_ms=None,
            max_ms=None,
            avg_ms=None,
            std_dev_ms=None,
            packets_sent=total,
            packets_received=0,
            packets_lost=lost,
            packet_loss_percent=100.0,
        )

    avg = sum(rtts) / received
    variance = sum((rtt - avg) ** 2 for rtt in rtts) / received

    return Statistics(
        min_ms=round2(min(rtts)),
        max_ms=round2(max(rtts)),
        avg_ms=round2(avg),
        std_dev_ms=round2(math.sqrt(variance)),
        packets_sent=total,
        packets_received=received,
        packets_lost=lost,
        packet_loss_percent=round2(lost / total * 100),
    )


def statistics_for(results: Sequence[ProbeResult]) -> Statistics:
    return calculate_statistics(successful_rtts(results), len(results))
