from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ._stats import Statistics


def round2(value: float) -> float:
    """Round to two decimals, ties away from zero."""
    return math.copysign(math.floor(abs(value) * 100 + 0.5) / 100, value)


class ProbeOutcome(str, Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    SEND_FAILURE = "send_failure"
    RECEIVE_FAILURE = "receive_failure"


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of a single echo request, one per sequence number."""

    sequence: int
    round_trip_ms: Optional[float]
    succeeded: bool
    issued_at: Optional[datetime]
    outcome: ProbeOutcome
    reply_addr: Optional[str] = None
    error: Optional[str] = None

    @property
    def rtt_rounded(self) -> Optional[float]:
        if self.round_trip_ms is None:
            return None
        return round2(self.round_trip_ms)


@dataclass(frozen=True)
class Report:
    host: str
    ip_address: str
    started_at: datetime
    finished_at: datetime
    timeout_seconds: float
    results: tuple[ProbeResult, ...]
    statistics: "Statistics"
