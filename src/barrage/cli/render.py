"""Rich rendering of a finished RunReport."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from rich.console import Console

    from barrage.metrics.models import RunReport


def build_endpoint_table(report: RunReport) -> Table:
    """Build the per-endpoint table.

    Args:
        report: Finished run report.

    Returns:
        Rich Table with one row per node.
    """
    table = Table(
        title=escape(f"Benchmark [{report.title}]"),
        show_header=True,
        header_style="bold cyan",
        expand=True,
    )
    table.add_column("Node", style="bold")
    table.add_column("Amount", justify="right")
    table.add_column("Thread", justify="right")
    table.add_column("Success", justify="right")
    table.add_column("Failure", justify="right")
    table.add_column("Missing", justify="right")
    table.add_column("SuccCostAvg (ms)", justify="right")
    table.add_column("p95 (ms)", justify="right")

    for summary in report.endpoint_summaries():
        table.add_row(
            str(summary.node),
            str(summary.amount),
            str(summary.thread),
            str(summary.success),
            str(summary.failure),
            str(summary.missing),
            f"{summary.avg_success_ms:.6f}",
            f"{summary.p95_ms:.3f}",
        )
    return table


def build_totals_panel(report: RunReport) -> Panel:
    """Build the totals panel (cost, successes, throughput)."""
    return Panel(
        f"[bold]Total Cost :[/bold] {report.cost_ms:12.3f} ms\n"
        f"[bold]Total Succ :[/bold] {report.total_successes:12d} tx\n"
        f"[bold]    TPS    :[/bold] {report.throughput:12.3f} tx/s",
        border_style="green",
        expand=False,
    )


def print_report(report: RunReport, console: Console) -> None:
    """Print the endpoint table followed by the totals."""
    console.print(build_endpoint_table(report))
    console.print(build_totals_panel(report))
