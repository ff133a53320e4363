"""CLI interface for tagloop using Typer.

Developer tooling for inspecting how model output is parsed into
invocations and how those invocations render back into tag notation.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tagloop.parsing import parse_model_response
from tagloop.serialization import serialize_invocation

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = typer.Typer(help="tagloop - inspect model output in action tag notation")
console = Console()


def _read_input(file: Optional[Path]) -> str:
    """Read model text from file, or from stdin if no file is given."""
    if file is None:
        return sys.stdin.read()
    if not file.exists():
        console.print(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)
    return file.read_text()


@app.callback()
def main(
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """tagloop developer tools."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@app.command()
def parse(
    file: Optional[Path] = typer.Argument(
        None,
        help="File containing model output (defaults to stdin)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print invocations as a JSON list",
    ),
):
    """
    Parse model output and list the invocations found.

    Examples:
        tagloop parse response.txt
        cat response.txt | tagloop parse --json
    """
    invocations = parse_model_response(_read_input(file))

    if as_json:
        typer.echo(json.dumps([inv.model_dump() for inv in invocations], indent=2))
        return

    if not invocations:
        console.print("[yellow]No invocations found[/yellow]")
        return

    table = Table(title=f"Invocations ({len(invocations)})")
    table.add_column("#", style="dim")
    table.add_column("Action", style="bold")
    table.add_column("Attributes")
    table.add_column("Payload")

    for idx, inv in enumerate(invocations, start=1):
        attrs = ", ".join(f"{k}={v}" for k, v in (inv.attributes or {}).items())
        table.add_row(
            str(idx),
            escape(inv.action),
            escape(attrs) or "[dim]-[/dim]",
            escape(inv.payload) if inv.payload is not None else "[dim]-[/dim]",
        )

    console.print(table)


@app.command()
def roundtrip(
    file: Optional[Path] = typer.Argument(
        None,
        help="File containing model output (defaults to stdin)",
    ),
):
    """
    Parse model output and print each invocation re-serialized, one per line.
    """
    for inv in parse_model_response(_read_input(file)):
        typer.echo(serialize_invocation(inv))


if __name__ == "__main__":
    app()
