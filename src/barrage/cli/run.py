"""``barrage run`` and ``barrage categories`` commands."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from barrage._internal.config import PROTOCOLS, BenchConfig, Node, load_settings
from barrage._internal.errors import BarrageError, EngineError
from barrage._internal.logging import setup_logging, verbosity_to_level
from barrage.cli.render import print_report
from barrage.engine.general import generate_report, interrupt_on_signals
from barrage.engine.mission import CancellationFlag
from barrage.units import RpcData, registry

if TYPE_CHECKING:
    from barrage.units import UnitDefinition

console = Console(stderr=True)


def _parse_nodes(values: list[str]) -> tuple[Node, ...]:
    """Parse repeated and comma-separated ``--node`` values.

    Args:
        values: Raw option values, each ``host:port[,host:port[...]]``.

    Returns:
        Parsed nodes in the order given.

    Raises:
        ConfigError: If any address is malformed.
    """
    return tuple(
        Node.parse(address)
        for value in values
        for address in value.split(",")
        if address.strip()
    )


def _build_config(
    node: list[str],
    protocol: str,
    thread: int,
    amount: int,
    interval: int,
    category: str,
    timeout: float | None,
) -> tuple[BenchConfig, UnitDefinition, int]:
    """Validate the CLI flags into a config, a work unit and a pool size.

    Raises:
        BarrageError: If any flag or environment setting is invalid.
    """
    settings = load_settings()
    config = BenchConfig(
        nodes=_parse_nodes(node),
        protocol=protocol,
        thread=thread,
        amount=amount,
        interval=interval,
        category=category,
        timeout=timeout if timeout is not None else settings.request_timeout,
    ).validate(registry.names())
    unit = registry.get(config.category)
    # One pooled connection per soldier at least.
    max_connections = max(settings.max_connections, len(config.nodes) * config.thread)
    return config, unit, max_connections


def run_cmd(
    node: list[str] = typer.Option(
        ...,
        "--node",
        "-N",
        help="Set the host:port[,host:port[...]] of nodes to send requests to.",
    ),
    protocol: str = typer.Option(
        "http",
        "--protocol",
        "-p",
        help=f"Set the protocol: {', '.join(PROTOCOLS)}.",
    ),
    thread: int = typer.Option(
        1,
        "--thread",
        "-t",
        help="Set the number of threads for each node.",
    ),
    amount: int = typer.Option(
        1,
        "--amount",
        "-a",
        help="Set the amount of requests for each thread. 0 means infinite.",
    ),
    interval: int = typer.Option(
        1000,
        "--interval",
        "-i",
        help="Wait interval in milliseconds between requests. 0 means no wait.",
    ),
    category: str = typer.Option(
        "peerCount",
        "--category",
        "-c",
        help="Set the category of requests to send (see `barrage categories`).",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Timeout of a single request in seconds (default: $BARRAGE_TIMEOUT or 30).",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log verbosity (-v warn, -vv info, -vvv debug, -vvvv trace).",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="No logs. Only print the result. Overrides --verbose.",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Print the report as JSON instead of a table.",
    ),
    log_json: bool = typer.Option(
        False,
        "--log-json",
        help="Write log lines to stderr as JSON objects.",
    ),
) -> None:
    """Benchmark the nodes and print the report."""
    setup_logging(level=verbosity_to_level(verbose, quiet=quiet), json_format=log_json)

    try:
        config, unit, max_connections = _build_config(
            node, protocol, thread, amount, interval, category, timeout
        )
    except BarrageError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2) from exc

    if not quiet and not json_output:
        console.print(
            Panel(
                f"[bold]Category:[/bold] {config.category}\n"
                f"[bold]Nodes:[/bold]    {', '.join(str(n) for n in config.nodes)}\n"
                f"[bold]Threads:[/bold]  {config.thread} per node\n"
                f"[bold]Amount:[/bold]   {config.amount or 'until interrupted'}\n"
                f"[bold]Interval:[/bold] {config.interval} ms",
                title="barrage",
                border_style="cyan",
            )
        )

    terminate = CancellationFlag()
    try:
        with (
            RpcData(
                config.protocol,
                timeout=config.timeout,
                max_connections=max_connections,
            ) as data,
            interrupt_on_signals(terminate),
        ):
            report = generate_report(config, unit.func, data, terminate)
    except EngineError as exc:
        cause = f" ({exc.__cause__})" if exc.__cause__ is not None else ""
        console.print(f"[red]Benchmark failed:[/red] {escape(f'{exc}{cause}')}")
        raise typer.Exit(code=1) from exc

    if json_output:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        print_report(report, Console())


def categories_cmd() -> None:
    """List the registered work units."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Category", style="bold")
    table.add_column("Description")
    for definition in registry.get_all():
        table.add_row(definition.name, definition.description)
    Console().print(table)
