from ._config import PingConfig
from ._exceptions import (
    ExportError,
    PingError,
    RawSocketPermissionError,
    ReceiveError,
    ResolutionError,
    SendError,
    SocketOpenError,
)
from ._export import export_csv, export_json, report_to_dict
from ._icmp import EchoReply, Icmp, decode, encode, icmp_checksum, resolve_host
from ._models import ProbeOutcome, ProbeResult, Report
from ._probe import iter_probes
from ._stats import Statistics, calculate_statistics, statistics_for

__all__ = [
    "PingConfig",
    "Icmp",
    "EchoReply",
    "encode",
    "decode",
    "icmp_checksum",
    "resolve_host",
    "iter_probes",
    "ProbeOutcome",
    "ProbeResult",
    "Report",
    "Statistics",
    "calculate_statistics",
    "statistics_for",
    "export_json",
    "export_csv",
    "report_to_dict",
    "PingError",
    "ResolutionError",
    "RawSocketPermissionError",
    "SendError",
    "SocketOpenError",
    "ReceiveError",
    "ExportError",
]
