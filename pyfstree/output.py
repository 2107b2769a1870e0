"""Console output formatting for the CLI."""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormatter:
    """Routes CLI output to a rich console, as JSON, or nowhere (quiet).

    Informational messages respect ``quiet``; command results printed with
    ``print`` or ``output_json`` and errors are always shown.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
            console: Console for regular output (stdout by default)
            err_console: Console for warnings and errors (stderr by default)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(soft_wrap=True, highlight=False)
        self.err_console = err_console or Console(
            stderr=True, soft_wrap=True, highlight=False
        )

    def print(self, text: str = "") -> None:
        """Print rich markup to stdout regardless of quiet mode."""
        self.console.print(text)

    def info(self, message: str) -> None:
        if not self.quiet:
            self.console.print(escape(message))

    def success(self, message: str) -> None:
        if not self.quiet:
            self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON."""
        click.echo(json.dumps(data, indent=2))

    def print_summary(self, title: str, rows: list[tuple[str, str]]) -> None:
        """Print a two-column summary table."""
        if self.quiet:
            return
        table = Table(title=title, show_header=False)
        table.add_column("Item", style="cyan")
        table.add_column("Value")
        for label, value in rows:
            table.add_row(escape(label), escape(value))
        self.console.print(table)
