"""Sequential probe loop."""

from __future__ import annotations

import time
from datetime import datetime
from typing import Callable, Iterator, Optional, Protocol

from ._console import logger
from ._exceptions import ReceiveError, SendError
from ._icmp import EchoReply, encode
from ._models import ProbeOutcome, ProbeResult


class Transport(Protocol):
    identifier: int

    def send(self, packet: bytes, destination: str) -> None: ...

    def receive(self, sequence: int, timeout: float) -> Optional[EchoReply]: ...


def iter_probes(
    transport: Transport,
    destination: str,
    count: int,
    *,
    timeout: float,
    interval: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.perf_counter,
) -> Iterator[ProbeResult]:
    """Send ``count`` echo requests one after another, yielding each result.

    Every sequence number from ``0`` to ``count - 1`` is attempted exactly
    once. Send and receive failures are recorded as lost probes and never
    stop the loop. ``clock`` must be the clock the transport stamps replies
    with.
    """
    logger.debug("Starting %d probes to %s", count, destination)
    for seq in range(count):
        wire_seq = seq & 0xFFFF
        packet = encode(wire_seq, transport.identifier)
        issued_at = datetime.now()
        started = clock()

        try:
            transport.send(packet, destination)
        except SendError as exc:
            logger.warning("Probe %d: %s", seq, exc)
            result = ProbeResult(
                sequence=seq,
                round_trip_ms=None,
                succeeded=False,
                issued_at=issued_at,
                outcome=ProbeOutcome.SEND_FAILURE,
                error=str(exc),
            )
        else:
            try:
                reply = transport.receive(wire_seq, timeout)
            except ReceiveError as exc:
                logger.warning("Probe %d: %s", seq, exc)
                result = ProbeResult(
                    sequence=seq,
                    round_trip_ms=None,
                    succeeded=False,
                    issued_at=issued_at,
                    outcome=ProbeOutcome.RECEIVE_FAILURE,
                    error=str(exc),
                )
            else:
                if reply is None:
                    logger.debug("Probe %d: timed out", seq)
                    result = ProbeResult(
                        sequence=seq,
                        round_trip_ms=None,
                        succeeded=False,
                        issued_at=issued_at,
                        outcome=ProbeOutcome.TIMEOUT,
                    )
                else:
                    rtt = (reply.received_at - started) * 1000
                    logger.debug(
                        "Probe %d: reply from %s in %.2f ms", seq, reply.addr, rtt
                    )
                    result = ProbeResult(
                        sequence=seq,
                        round_trip_ms=rtt,
                        succeeded=True,
                        issued_at=issued_at,
                        outcome=ProbeOutcome.SUCCESS,
                        reply_addr=reply.addr,
                    )

        yield result

        if interval > 0 and seq < count - 1:
            sleep(interval)
