"""Tests for the terminal views."""

import io
from datetime import datetime

import pytest
from rich.console import Console

from pinggraph._models import ProbeOutcome, ProbeResult
from pinggraph._render import (
    BAR_WIDTH,
    INITIAL_BAR_MAX,
    BarScale,
    bar_length,
    histogram_buckets,
    latency_style,
    line_graph_grid,
    render_bar_line,
    render_histogram,
    render_line_graph,
    render_probe_line,
    render_statistics,
)
from pinggraph._stats import calculate_statistics


def _ok(seq, rtt):
    return ProbeResult(
        sequence=seq,
        round_trip_ms=rtt,
        succeeded=True,
        issued_at=datetime(2024, 5, 1, 12, 0, 0),
        outcome=ProbeOutcome.SUCCESS,
        reply_addr="192.0.2.1",
    )


def _lost(seq, error=None):
    return ProbeResult(
        sequence=seq,
        round_trip_ms=None,
        succeeded=False,
        issued_at=datetime(2024, 5, 1, 12, 0, 0),
        outcome=ProbeOutcome.SEND_FAILURE if error else ProbeOutcome.TIMEOUT,
        error=error,
    )


def _render(renderable) -> str:
    console = Console(file=io.StringIO(), record=True, width=120, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestLatencyStyle:
    def test_bands(self):
        assert latency_style(5.0) == "green"
        assert latency_style(20.0) == "yellow"
        assert latency_style(75.0) == "orange1"
        assert latency_style(100.0) == "red"


class TestBarView:
    def test_scale_starts_at_seed(self):
        assert BarScale().maximum == INITIAL_BAR_MAX

    def test_scale_only_grows(self):
        scale = BarScale().observe(100.0)
        assert scale.maximum == 120.0
        assert scale.observe(10.0).maximum == 120.0
        assert BarScale().observe(30.0).maximum == INITIAL_BAR_MAX

    def test_bar_length_is_proportional_and_capped(self):
        assert bar_length(25.0, 50.0) == 20
        assert bar_length(0.0, 50.0) == 0
        assert bar_length(500.0, 50.0) == BAR_WIDTH

    def test_success_bar(self):
        line, scale = render_bar_line(_ok(3, 25.0), BarScale())
        assert scale.maximum == INITIAL_BAR_MAX
        assert "seq=3" in line.plain
        assert "█" * 20 + "░" * 20 in line.plain
        assert "25.00ms" in line.plain
        assert "<- 192.0.2.1" in line.plain

    def test_scale_threaded_between_probes(self):
        scale = BarScale()
        _, scale = render_bar_line(_ok(0, 100.0), scale)
        assert scale.maximum == 120.0
        line, scale = render_bar_line(_ok(1, 60.0), scale)
        assert scale.maximum == 120.0
        assert "█" * 20 + "░" * 20 in line.plain

    def test_timeout_bar(self):
        line, scale = render_bar_line(_lost(4), BarScale(80.0))
        assert "×" * BAR_WIDTH in line.plain
        assert "TIMEOUT" in line.plain
        assert scale.maximum == 80.0

    def test_failure_bar(self):
        line, _ = render_bar_line(_lost(4, "Send error: down"), BarScale())
        assert "ERROR" in line.plain


class TestProbeLine:
    def test_reply(self):
        text = render_probe_line(_ok(2, 12.5)).plain
        assert text == "  ✓ Reply from 192.0.2.1: seq=2 time=  12.50ms"

    def test_timeout(self):
        assert render_probe_line(_lost(7)).plain == "  ✗ Timeout for seq=7"

    def test_error(self):
        text = render_probe_line(_lost(1, "Send error: unreachable")).plain
        assert text == "  ✗ Error: Send error: unreachable"


class TestLineGraph:
    def test_rows_follow_normalized_latency(self):
        results = [_ok(0, 10.0), _ok(1, 20.0), _lost(2), _ok(3, 30.0)]
        grid = line_graph_grid(results)
        assert len(grid) == 10
        assert all(len(row) == 4 for row in grid)
        # min sits on the bottom row, max on the top row
        assert grid[9][0] == "●"
        assert grid[0][3] == "●"
        assert [grid[r][3] for r in range(1, 10)] == ["│"] * 9
        # 20 ms normalises to bucket 4 of 9
        assert grid[5][1] == "●"
        assert [grid[r][1] for r in range(6, 10)] == ["│"] * 4
        assert [grid[r][1] for r in range(0, 5)] == [" "] * 5
        # timeout is marked at the bottom only
        assert grid[9][2] == "✗"
        assert [grid[r][2] for r in range(0, 9)] == [" "] * 9

    def test_flat_latency_uses_center_row(self):
        grid = line_graph_grid([_ok(0, 15.0), _ok(1, 15.0)])
        assert grid[4] == ["●", "●"]
        assert grid[3] == [" ", " "]

    def test_width_capped(self):
        results = [_ok(i, float(i + 1)) for i in range(75)]
        assert len(line_graph_grid(results)[0]) == 60

    def test_no_successes(self):
        assert line_graph_grid([_lost(0), _lost(1)]) == []
        assert "No data to graph" in _render(render_line_graph([_lost(0)]))

    def test_rendering_is_repeatable(self):
        results = [_ok(0, 10.0), _lost(1), _ok(2, 42.0)]
        first = _render(render_line_graph(results))
        assert first == _render(render_line_graph(results))
        assert "LATENCY GRAPH OVER TIME" in first
        assert "42.0ms" in first
        assert "10.0ms" in first
        assert "seq ->" in first


class TestHistogram:
    def test_bucket_counts_sum_to_successes(self):
        rtts = [5.0, 15.0, 25.0, 75.0, 150.0, 100.0, 10.0]
        buckets = histogram_buckets(rtts)
        assert [b.count for b in buckets] == [1, 2, 1, 1, 2]
        assert sum(b.count for b in buckets) == len(rtts)
        assert sum(b.percentage for b in buckets) == pytest.approx(100.0)

    def test_bar_proportional_to_percentage(self):
        text = _render(render_histogram([5.0, 5.0, 15.0, 15.0]))
        lines = [line for line in text.splitlines() if "│" in line]
        assert len(lines) == 5
        assert "█" * 25 in lines[0]
        assert "█" * 26 not in lines[0]
        assert "2 ( 50.0%)" in lines[0]
        assert "0 (  0.0%)" in lines[4]

    def test_empty(self):
        assert render_histogram([]) is None
        assert [b.count for b in histogram_buckets([])] == [0] * 5


class TestStatisticsView:
    def test_summary_with_rtt(self):
        stats = calculate_statistics([10.0, 20.0, 30.0, 15.0], 5)
        text = _render(render_statistics(stats, "192.0.2.1"))
        assert "Host: 192.0.2.1" in text
        assert "5 sent, 4 received, 1 lost (20.0%)" in text
        assert "Min: 10.00ms" in text
        assert "Max: 30.00ms" in text
        assert "StdDev:" in text

    def test_summary_without_rtt(self):
        stats = calculate_statistics([], 2)
        text = _render(render_statistics(stats, "192.0.2.1"))
        assert "2 sent, 0 received, 2 lost (100.0%)" in text
        assert "Min:" not in text
