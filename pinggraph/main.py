"""Command line front end for pinggraph."""

from __future__ import annotations

import argparse
import time
from datetime import datetime
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.text import Text

from ._config import PingConfig
from ._console import console, err_console, logger, setup_logging
from ._exceptions import (
    ExportError,
    RawSocketPermissionError,
    ResolutionError,
    SocketOpenError,
)
from ._export import export_csv, export_json
from ._icmp import Icmp, resolve_host
from ._models import ProbeResult, Report
from ._probe import iter_probes
from ._render import (
    BarScale,
    render_bar_line,
    render_export_header,
    render_exported,
    render_header,
    render_histogram,
    render_legend,
    render_line_graph,
    render_probe_line,
    render_statistics,
)
from ._stats import statistics_for, successful_rtts


def _print_error(err: Console, message: object) -> None:
    err.print(Text.assemble(("Error: ", "bold red"), str(message)))


def _export(report: Report, config: PingConfig, out: Console, err: Console) -> bool:
    """Write every requested export; returns ``False`` if any of them failed."""
    if not config.wants_export:
        return True

    out.print()
    out.print(render_export_header())
    ok = True
    for kind, path, writer in (
        ("JSON", config.json_path, export_json),
        ("CSV", config.csv_path, export_csv),
    ):
        if path is None:
            continue
        try:
            writer(report, path)
        except ExportError as exc:
            logger.debug("Export to %s failed", path, exc_info=exc.cause)
            _print_error(err, exc)
            ok = False
        else:
            out.print(render_exported(kind, path))
    return ok


def run(
    config: PingConfig,
    *,
    transport_factory: Callable[[], Icmp] = Icmp,
    resolver: Callable[[str], str] = resolve_host,
    sleep: Callable[[float], None] = time.sleep,
    out: Console = console,
    err: Console = err_console,
) -> int:
    """Probe ``config.host`` and render the results; returns the exit status."""
    try:
        addr = resolver(config.host)
    except ResolutionError as exc:
        _print_error(err, exc)
        return 1

    started_at = datetime.now()
    results: list[ProbeResult] = []
    try:
        with transport_factory() as transport:
            out.print(render_header(addr, config.count))
            if config.show_graph:
                out.print(render_legend())
                out.print()

            scale = BarScale()
            for result in iter_probes(
                transport,
                addr,
                config.count,
                timeout=config.timeout,
                interval=config.interval,
                sleep=sleep,
            ):
                results.append(result)
                if config.show_graph:
                    line, scale = render_bar_line(result, scale)
                else:
                    line = render_probe_line(result)
                out.print(line)
    except (RawSocketPermissionError, SocketOpenError) as exc:
        _print_error(err, exc)
        return 1
    finished_at = datetime.now()

    stats = statistics_for(results)
    out.print()
    out.print(render_statistics(stats, addr))

    if config.show_line:
        out.print()
        out.print(render_line_graph(results))

    rtts = successful_rtts(results)
    if (config.show_graph or config.show_line) and rtts:
        out.print()
        out.print(render_histogram(rtts))

    report = Report(
        host=config.host,
        ip_address=addr,
        started_at=started_at,
        finished_at=finished_at,
        timeout_seconds=config.timeout,
        results=tuple(results),
        statistics=stats,
    )
    return 0 if _export(report, config, out, err) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pinggraph",
        description="ICMP ping with terminal graphs and JSON/CSV export",
    )
    parser.add_argument("host", help="IP address or hostname to ping")
    parser.add_argument(
        "-c", "--count", type=int, default=10, help="number of pings to send"
    )
    parser.add_argument(
        "-t", "--timeout", type=float, default=2.0, help="timeout in seconds"
    )
    parser.add_argument(
        "-g", "--graph", action="store_true", help="show a bar per probe"
    )
    parser.add_argument(
        "-l",
        "--line-graph",
        action="store_true",
        help="show a line graph and histogram at the end",
    )
    parser.add_argument("--json", metavar="FILE", help="export results to JSON")
    parser.add_argument("--csv", metavar="FILE", help="export results to CSV")
    parser.add_argument(
        "-i",
        "--interval",
        type=float,
        default=1.0,
        help="delay between probes in seconds",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> PingConfig:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return PingConfig(
            host=args.host,
            count=args.count,
            timeout=args.timeout,
            show_graph=args.graph,
            show_line=args.line_graph,
            json_path=args.json,
            csv_path=args.csv,
            interval=args.interval,
            verbose=args.verbose,
        )
    except ValueError as exc:
        parser.error(str(exc))


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = parse_config(argv)
    setup_logging(config.verbose)
    return run(config)
