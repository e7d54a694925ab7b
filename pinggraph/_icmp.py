"""ICMP echo packet codec and raw socket transport."""

from __future__ import annotations

import os
import select
import socket
import struct
import time
from dataclasses import dataclass
from typing import Optional

from ._console import logger
from ._exceptions import (
    RawSocketPermissionError,
    ReceiveError,
    ResolutionError,
    SendError,
    SocketOpenError,
)

ICMP_ECHO_REQUEST = 8
ICMP_ECHO_REPLY = 0

HEADER_SIZE = 8
PACKET_SIZE = 64
PAYLOAD = b"pinggraph!"


@dataclass
class IcmpPacket:
    type: int
    code: int
    checksum: int
    id: int
    sequence: int
    data: bytes


@dataclass
class IpHeader:
    version: int
    ihl: int
    total_length: int
    ttl: int
    protocol: int
    src_addr: str
    dest_addr: str


@dataclass
class ReceivedPacket:
    ip_header: IpHeader
    icmp_packet: IcmpPacket
    raw: bytes
    received_at: float


@dataclass(frozen=True)
class EchoReply:
    addr: str
    sequence: int
    received_at: float


def icmp_checksum(data: bytes) -> int:
    """Internet checksum: one's complement of the folded 16-bit word sum."""
    if len(data) % 2:
        data += b"\x00"
    total = sum(struct.unpack("!%dH" % (len(data) // 2), data))
    while total >> 16:
        total = (total & 0xFFFF) + (total >> 16)
    return (~total) & 0xFFFF


def verify_checksum(data: bytes) -> bool:
    """True when ``data`` already carries a valid checksum."""
    return icmp_checksum(data) == 0


def encode(sequence: int, identifier: int) -> bytes:
    """Build a fixed-size echo request carrying ``PAYLOAD``."""
    if not 0 <= sequence <= 0xFFFF:
        raise ValueError(f"sequence out of range: {sequence}")
    if not 0 <= identifier <= 0xFFFF:
        raise ValueError(f"identifier out of range: {identifier}")

    data = PAYLOAD.ljust(PACKET_SIZE - HEADER_SIZE, b"\x00")
    header = struct.pack("!BBHHH", ICMP_ECHO_REQUEST, 0, 0, identifier, sequence)
    checksum = icmp_checksum(header + data)
    header = struct.pack(
        "!BBHHH", ICMP_ECHO_REQUEST, 0, checksum, identifier, sequence
    )
    return header + data


def decode(pkt: bytes, received_at: float) -> ReceivedPacket:
    """Split a raw IPv4 datagram into its IP and ICMP headers."""
    if len(pkt) < 20:
        raise ValueError("Packet shorter than minimum IP header length (20 bytes).")

    iph = struct.unpack("!BBHHHBBH4s4s", pkt[:20])
    version_ihl = iph[0]
    ihl = version_ihl & 0xF
    iph_length = ihl * 4

    if iph_length < 20 or len(pkt) < iph_length + HEADER_SIZE:
        raise ValueError(
            "Packet shorter than IP header + ICMP header (IHL + 8 bytes)."
        )

    ip_hdr = IpHeader(
        version=version_ihl >> 4,
        ihl=ihl,
        total_length=iph[2],
        ttl=iph[5],
        protocol=iph[6],
        src_addr=socket.inet_ntoa(iph[8]),
        dest_addr=socket.inet_ntoa(iph[9]),
    )
    icmph = struct.unpack("!BBHHH", pkt[iph_length : iph_length + HEADER_SIZE])
    icmp_pkt = IcmpPacket(
        type=icmph[0],
        code=icmph[1],
        checksum=icmph[2],
        id=icmph[3],
        sequence=icmph[4],
        data=pkt[iph_length + HEADER_SIZE :],
    )
    return ReceivedPacket(
        ip_header=ip_hdr, icmp_packet=icmp_pkt, raw=pkt, received_at=received_at
    )


def _valid_ip(host: str) -> bool:
    try:
        socket.inet_aton(host)
        return True
    except OSError:
        return False


def resolve_host(host: str) -> str:
    """Return ``host`` unchanged if it is a literal IPv4 address, else resolve it."""
    if _valid_ip(host):
        return host
    try:
        return socket.gethostbyname(host)
    except (OSError, UnicodeError) as exc:
        raise ResolutionError(f"Could not resolve: {host} ({exc})") from exc


class Icmp:
    """Raw ICMP channel that sends echo requests and waits for their replies.

    Replies are matched on identifier and sequence number, so echo traffic
    belonging to other processes sharing the host is ignored.
    """

    def __init__(
        self,
        identifier: Optional[int] = None,
        sock: Optional[socket.socket] = None,
    ):
        if identifier is None:
            identifier = os.getpid()
        self.identifier = identifier & 0xFFFF
        self._sock = sock

    def open(self) -> "Icmp":
        if self._sock is None:
            try:
                self._sock = socket.socket(
                    socket.AF_INET,
                    socket.SOCK_RAW,
                    socket.IPPROTO_ICMP,
                )
            except PermissionError as exc:
                message = (
                    "Raw socket requires elevated privileges. Use sudo or grant "
                    "CAP_NET_RAW to the Python interpreter."
                )
                raise RawSocketPermissionError(message) from exc
            except OSError as exc:
                raise SocketOpenError(f"Cannot open raw ICMP socket: {exc}") from exc
            logger.debug("Opened raw ICMP socket (id=%d)", self.identifier)
        return self

    @property
    def sock(self) -> socket.socket:
        if self._sock is None:
            self.open()
        return self._sock

    def close(self) -> None:
        if self._sock is not None:
            try:
                self._sock.close()
            finally:
                self._sock = None

    def __enter__(self) -> "Icmp":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def send(self, packet: bytes, destination: str) -> None:
        sock = self.sock
        try:
            sock.sendto(packet, (destination, 1))
        except OSError as exc:
            raise SendError(f"Send error: {exc}") from exc

    def _matches(self, sequence: int, received: ReceivedPacket) -> bool:
        icmp_pkt = received.icmp_packet
        if icmp_pkt.type != ICMP_ECHO_REPLY:
            return False
        if icmp_pkt.id != self.identifier:
            logger.debug(
                "Ignoring reply for identifier %d from %s",
                icmp_pkt.id,
                received.ip_header.src_addr,
            )
            return False
        if icmp_pkt.sequence != sequence & 0xFFFF:
            logger.debug("Ignoring stale reply seq=%d", icmp_pkt.sequence)
            return False
        if not verify_checksum(received.raw[received.ip_header.ihl * 4 :]):
            logger.debug("Discarding reply seq=%d: bad checksum", icmp_pkt.sequence)
            return False
        return True

    def receive(self, sequence: int, timeout: float) -> Optional[EchoReply]:
        """Wait up to ``timeout`` seconds for the reply to ``sequence``.

        Returns ``None`` when the deadline passes without a matching reply.
        """
        sock = self.sock
        deadline = time.perf_counter() + timeout
        while True:
            remaining = deadline - time.perf_counter()
            if remaining <= 0:
                return None

            try:
                ready = select.select([sock], [], [], remaining)
                if not ready[0]:
                    return None
                recv_time = time.perf_counter()
                pkt, _ = sock.recvfrom(1024)
            except (OSError, ValueError) as exc:
                raise ReceiveError(f"Receive error: {exc}") from exc

            try:
                received = decode(pkt, recv_time)
            except ValueError as err:
                logger.debug(f"Discarding malformed packet: {err}")
                continue

            if not self._matches(sequence, received):
                continue

            return EchoReply(
                addr=received.ip_header.src_addr,
                sequence=received.icmp_packet.sequence,
                received_at=received.received_at,
            )
