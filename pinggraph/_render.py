"""Terminal views over a sequence of probe results.

Every function here is a pure projection: it takes results (or statistics)
and returns a Rich renderable without touching probe state. The live bar
view keeps its growing scale in an explicit :class:`BarScale` value that the
caller threads from one probe to the next.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from ._models import ProbeResult
from ._stats import Statistics, successful_rtts

BAR_WIDTH = 40
INITIAL_BAR_MAX = 50.0
BAR_HEADROOM = 1.2
GRAPH_HEIGHT = 10
GRAPH_MAX_WIDTH = 60
HISTOGRAM_WIDTH = 50

HISTOGRAM_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (0.0, 10.0, "0-10ms"),
    (10.0, 20.0, "10-20ms"),
    (20.0, 50.0, "20-50ms"),
    (50.0, 100.0, "50-100ms"),
    (100.0, math.inf, ">100ms"),
)


def latency_style(rtt: float) -> str:
    if rtt < 20.0:
        return "green"
    if rtt < 50.0:
        return "yellow"
    if rtt < 100.0:
        return "orange1"
    return "red"


def format_latency(rtt: float) -> Text:
    return Text(f"{rtt:>7.2f}ms", style=latency_style(rtt))


def _banner(title: str, style: str) -> Panel:
    return Panel(
        Text(title, justify="center"),
        box=box.DOUBLE,
        border_style=style,
        width=GRAPH_MAX_WIDTH + 2,
    )


def render_header(addr: str, count: int) -> Panel:
    title = Text(justify="center")
    title.append("PING ")
    title.append(addr, style="bold yellow")
    title.append(" - ")
    title.append(str(count), style="green")
    title.append(" packets")
    return Panel(
        title, box=box.DOUBLE, border_style="cyan", width=GRAPH_MAX_WIDTH + 2
    )


def render_legend() -> Text:
    legend = Text("  ")
    legend.append("Legend: ", style="dim")
    for label, style in (("<20ms", "green"), ("20-50ms", "yellow"), (">50ms", "red")):
        legend.append("● ", style=style)
        legend.append(f"{label} ", style=style)
    return legend


# ------------- Per-probe lines


@dataclass(frozen=True)
class BarScale:
    """Upper bound of the bar view; only ever grows during a run."""

    maximum: float = INITIAL_BAR_MAX

    def observe(self, rtt: float) -> "BarScale":
        return BarScale(max(self.maximum, rtt * BAR_HEADROOM))


def bar_length(rtt: float, maximum: float, width: int = BAR_WIDTH) -> int:
    return int(min(rtt / maximum * width, width))


def render_probe_line(result: ProbeResult) -> Text:
    line = Text("  ")
    if result.succeeded and result.round_trip_ms is not None:
        line.append("✓", style="green")
        line.append(f" Reply from {result.reply_addr}: seq={result.sequence} time=")
        line.append_text(format_latency(result.round_trip_ms))
    elif result.error:
        line.append("✗", style="red")
        line.append(f" Error: {result.error}")
    else:
        line.append("✗", style="red")
        line.append(f" Timeout for seq={result.sequence}")
    return line


def render_bar_line(
    result: ProbeResult, scale: BarScale, width: int = BAR_WIDTH
) -> tuple[Text, BarScale]:
    """Render one probe as a proportional bar and return the updated scale."""
    line = Text(f"  seq={result.sequence:<3} ")
    if result.succeeded and result.round_trip_ms is not None:
        rtt = result.round_trip_ms
        scale = scale.observe(rtt)
        filled = bar_length(rtt, max(scale.maximum, 1.0), width)
        line.append("│")
        line.append("█" * filled, style=latency_style(rtt))
        line.append("░" * (width - filled), style="dim")
        line.append("│ ")
        line.append_text(format_latency(rtt))
        line.append(f"  <- {result.reply_addr}", style="dim")
    else:
        line.append("│")
        line.append("×" * width, style="red")
        line.append("│ ")
        label = "ERROR" if result.error else "TIMEOUT"
        line.append(label, style="bold red")
    return line, scale


# ------------- Line graph


def line_graph_grid(
    results: Sequence[ProbeResult],
    height: int = GRAPH_HEIGHT,
    max_width: int = GRAPH_MAX_WIDTH,
) -> list[list[str]]:
    """Character matrix of the latency graph, row 0 at the top.

    Returns an empty list when no probe succeeded.
    """
    times = successful_rtts(results)
    if not times:
        return []

    max_rtt = max(times)
    min_rtt = min(times)
    width = min(len(results), max_width)
    grid = [[" "] * width for _ in range(height)]

    for col, result in enumerate(results[:width]):
        if result.succeeded and result.round_trip_ms is not None:
            if max_rtt > min_rtt:
                normalized = int(
                    (result.round_trip_ms - min_rtt) / (max_rtt - min_rtt) * (height - 1)
                )
            else:
                normalized = height // 2
            row = height - 1 - min(normalized, height - 1)
            grid[row][col] = "●"
            for below in range(row + 1, height):
                if grid[below][col] == " ":
                    grid[below][col] = "│"
        else:
            grid[height - 1][col] = "✗"
    return grid


def render_line_graph(
    results: Sequence[ProbeResult], height: int = GRAPH_HEIGHT
) -> RenderableType:
    grid = line_graph_grid(results, height=height)
    if not grid:
        return Text("No data to graph", style="red")

    times = successful_rtts(results)
    max_rtt = max(times)
    min_rtt = min(times)
    width = len(grid[0])

    lines: list[RenderableType] = [_banner("📈 LATENCY GRAPH OVER TIME", "cyan")]
    for i, row in enumerate(grid):
        y_value = max_rtt - (i / (height - 1)) * (max_rtt - min_rtt)
        if i < height // 3:
            style = "red"
        elif i < 2 * height // 3:
            style = "yellow"
        else:
            style = "green"
        tick = "┤" if i in (0, height - 1) else "│"
        line = Text("  ")
        line.append(f"{y_value:>6.1f}ms", style="dim")
        line.append(f" {tick}")
        line.append("".join(row), style=style)
        lines.append(line)

    lines.append(Text("         └" + "─" * width))
    ruler = "".join(str(i % 10) if i % 5 == 0 else " " for i in range(width))
    lines.append(Text("          " + ruler, style="dim"))
    lines.append(Text("          seq ->", style="dim"))
    return Group(*lines)


# ------------- Histogram


@dataclass(frozen=True)
class HistogramBucket:
    label: str
    lower: float
    upper: float
    count: int
    percentage: float


def histogram_buckets(rtts: Sequence[float]) -> list[HistogramBucket]:
    total = len(rtts)
    buckets = []
    for lower, upper, label in HISTOGRAM_BUCKETS:
        count = sum(1 for rtt in rtts if lower <= rtt < upper)
        percentage = (count / total) * 100 if total else 0.0
        buckets.append(
            HistogramBucket(
                label=label,
                lower=lower,
                upper=upper,
                count=count,
                percentage=percentage,
            )
        )
    return buckets


def _bucket_style(bucket: HistogramBucket) -> str:
    if bucket.upper <= 20.0:
        return "green"
    if bucket.upper <= 50.0:
        return "yellow"
    return "red"


def render_histogram(rtts: Sequence[float]) -> Optional[RenderableType]:
    if not rtts:
        return None

    lines: list[RenderableType] = [_banner("📊 LATENCY DISTRIBUTION", "magenta")]
    for bucket in histogram_buckets(rtts):
        bar_len = min(int(bucket.percentage / 2), HISTOGRAM_WIDTH)
        line = Text("  ")
        line.append(f"{bucket.label:>8}", style="cyan")
        line.append(" │")
        line.append("█" * bar_len, style=_bucket_style(bucket))
        line.append(" " * (HISTOGRAM_WIDTH - bar_len))
        line.append(f" {bucket.count:>3} ({bucket.percentage:>5.1f}%)")
        lines.append(line)
    return Group(*lines)


# ------------- Summary


def render_statistics(stats: Statistics, addr: str) -> RenderableType:
    lines: list[RenderableType] = [_banner("📋 STATISTICS", "blue")]

    host = Text("  Host: ")
    host.append(addr, style="cyan")
    lines.append(host)

    packets = Text("  Packets: ")
    packets.append(str(stats.packets_sent))
    packets.append(" sent, ")
    packets.append(str(stats.packets_received), style="green")
    packets.append(" received, ")
    packets.append(str(stats.packets_lost), style="red")
    packets.append(f" lost ({stats.packet_loss_percent:.1f}%)")
    lines.append(packets)

    if stats.has_rtt:
        lines.append(Text("\n  RTT:"))
        for label, value, style in (
            ("Min", stats.min_ms, "green"),
            ("Avg", stats.avg_ms, "yellow"),
            ("Max", stats.max_ms, "red"),
            ("StdDev", stats.std_dev_ms, "cyan"),
        ):
            row = Text(f"    {label}: ")
            row.append(f"{value:.2f}ms", style=style)
            lines.append(row)
    return Group(*lines)


def render_export_header() -> Panel:
    return _banner("📁 EXPORT RESULTS", "yellow")


def render_exported(kind: str, path: str) -> Text:
    line = Text("  ")
    line.append("✓", style="green")
    line.append(f" Exported to {kind}: ")
    line.append(path, style="cyan")
    return line
