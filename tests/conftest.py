"""Shared test doubles: an in-memory transport that replays scripted outcomes."""

from typing import Optional

from pinggraph._exceptions import ReceiveError, SendError
from pinggraph._icmp import EchoReply

TIMEOUT = object()


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeTransport:
    """Stands in for :class:`pinggraph.Icmp`.

    ``script`` holds one entry per probe: an RTT in milliseconds, ``TIMEOUT``,
    or an exception instance to raise from ``send``/``receive``.
    """

    def __init__(self, script, clock: Optional[FakeClock] = None, identifier=0x1234):
        self.script = list(script)
        self.clock = clock or FakeClock()
        self.identifier = identifier
        self.sent: list[tuple[bytes, str]] = []
        self.waits: list[tuple[int, float]] = []
        self.opened = False
        self.closed = False

    def __enter__(self):
        self.opened = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True

    def send(self, packet: bytes, destination: str) -> None:
        self.sent.append((packet, destination))
        step = self.script[len(self.sent) - 1]
        if isinstance(step, SendError):
            raise step

    def receive(self, sequence: int, timeout: float) -> Optional[EchoReply]:
        self.waits.append((sequence, timeout))
        step = self.script[len(self.sent) - 1]
        if isinstance(step, ReceiveError):
            raise step
        if step is TIMEOUT:
            return None
        return EchoReply(
            addr=self.sent[-1][1],
            sequence=sequence,
            received_at=self.clock.now + step / 1000,
        )

