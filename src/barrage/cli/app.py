"""The ``barrage`` command line: Typer app and command registration."""

from __future__ import annotations

import typer

from barrage import __version__
from barrage.cli.run import categories_cmd, run_cmd

app = typer.Typer(
    name="barrage",
    help="Benchmark JSON-RPC nodes from many synchronized threads.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("run", help="Run a benchmark against one or more nodes.")(run_cmd)
app.command("categories", help="List the available request categories.")(categories_cmd)


def _print_version(requested: bool) -> None:
    if not requested:
        return
    typer.echo(f"barrage {__version__}")
    raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Print the barrage version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Fire synchronized request volleys at a set of nodes."""
