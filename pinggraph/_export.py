"""JSON and CSV report writers."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from typing import Any, Optional

from ._exceptions import ExportError
from ._models import ProbeResult, Report
from ._stats import Statistics

REPORT_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

CSV_COLUMNS = ("seq", "rtt_ms", "success", "timestamp")
CSV_STATS_COLUMNS = (
    "packets_sent",
    "packets_received",
    "packets_lost",
    "loss_percent",
    "min_ms",
    "avg_ms",
    "max_ms",
    "std_dev_ms",
)


def format_probe_time(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%Y-%m-%d %H:%M:%S.") + f"{value.microsecond // 1000:03d}"


def _result_to_dict(result: ProbeResult) -> dict[str, Any]:
    entry: dict[str, Any] = {"seq": result.sequence}
    if result.rtt_rounded is not None:
        entry["rtt_ms"] = result.rtt_rounded
    entry["success"] = result.succeeded
    timestamp = format_probe_time(result.issued_at)
    if timestamp is not None:
        entry["timestamp"] = timestamp
    return entry


def _statistics_to_dict(stats: Statistics) -> dict[str, Any]:
    return {
        "min_ms": stats.min_ms,
        "max_ms": stats.max_ms,
        "avg_ms": stats.avg_ms,
        "std_dev_ms": stats.std_dev_ms,
        "packets_sent": stats.packets_sent,
        "packets_received": stats.packets_received,
        "packets_lost": stats.packets_lost,
        "packet_loss_percent": stats.packet_loss_percent,
    }


def _whole_seconds(value: float) -> Any:
    if float(value).is_integer():
        return int(value)
    return value


def report_to_dict(report: Report) -> dict[str, Any]:
    return {
        "host": report.host,
        "ip_address": report.ip_address,
        "timestamp_start": report.started_at.strftime(REPORT_TIME_FORMAT),
        "timestamp_end": report.finished_at.strftime(REPORT_TIME_FORMAT),
        "timeout_seconds": _whole_seconds(report.timeout_seconds),
        "results": [_result_to_dict(result) for result in report.results],
        "statistics": _statistics_to_dict(report.statistics),
    }


def export_json(report: Report, path: str) -> None:
    try:
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(report_to_dict(report), handle, indent=2)
    except (OSError, TypeError, ValueError) as exc:
        raise ExportError(path, exc) from exc


def _optional_ms(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.2f}"


def export_csv(
    report: Report, path: str, generated_at: Optional[datetime] = None
) -> None:
    """Write ``report`` as commented CSV.

    Absent RTTs and timestamps become empty fields so every data row has the
    same number of columns.
    """
    if generated_at is None:
        generated_at = datetime.now()
    stats = report.statistics
    try:
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write("# Ping Report\n")
            handle.write(f"# Host: {report.host}\n")
            handle.write(f"# IP: {report.ip_address}\n")
            handle.write(f"# Generated: {generated_at.strftime(REPORT_TIME_FORMAT)}\n")
            handle.write("#\n")

            writer = csv.writer(handle, lineterminator="\n")
            writer.writerow(CSV_COLUMNS)
            for result in report.results:
                writer.writerow(
                    (
                        result.sequence,
                        _optional_ms(result.round_trip_ms),
                        "true" if result.succeeded else "false",
                        format_probe_time(result.issued_at) or "",
                    )
                )

            handle.write("\n# Statistics\n")
            handle.write("# " + ",".join(CSV_STATS_COLUMNS) + "\n")
            writer.writerow(
                (
                    stats.packets_sent,
                    stats.packets_received,
                    stats.packets_lost,
                    f"{stats.packet_loss_percent:.2f}",
                    _optional_ms(stats.min_ms),
                    _optional_ms(stats.avg_ms),
                    _optional_ms(stats.max_ms),
                    _optional_ms(stats.std_dev_ms),
                )
            )
    except (OSError, csv.Error) as exc:
        raise ExportError(path, exc) from exc
