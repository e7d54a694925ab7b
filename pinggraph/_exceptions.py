"""Exception types raised by pinggraph."""

from __future__ import annotations


class PingError(Exception):
    """Base class for every pinggraph failure."""


class ResolutionError(PingError):
    """Raised when the target host cannot be resolved to an IPv4 address."""


class RawSocketPermissionError(PingError, PermissionError):
    """Raised when raw socket creation fails due to missing privileges."""


class SocketOpenError(PingError):
    """Raised when the raw ICMP socket cannot be created for another reason."""


class SendError(PingError):
    """Raised when an echo request could not be transmitted."""


class ReceiveError(PingError):
    """Raised when waiting for or reading a reply fails."""


class ExportError(PingError):
    """Raised when a report cannot be written to its destination."""

    def __init__(self, path: str, cause: BaseException):
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write '{path}': {cause}")
