"""Console output formatting for pyfoldersync."""

import json
from typing import Any, Optional

import click
from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Formats user-facing output.

    Messages are written with click, tables with rich. In quiet mode only
    errors are shown; in JSON mode human-readable messages go to stderr so
    that stdout stays machine readable.
    """

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit results as JSON
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet

    def _echo(self, message: str, **style: Any) -> None:
        click.secho(message, err=self.json_output, **style)

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if self.quiet:
            return
        self._echo(message)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if self.quiet:
            return
        self._echo(message)

    def success(self, message: str) -> None:
        """Print a success message."""
        if self.quiet:
            return
        self._echo(message, fg="green")

    def warning(self, message: str) -> None:
        """Print a warning message."""
        if self.quiet:
            return
        self._echo(message, fg="yellow")

    def error(self, message: str) -> None:
        """Print an error message (always shown, on stderr)."""
        click.secho(message, fg="red", err=True)

    def output_json(self, data: Any) -> None:
        """Print data as JSON to stdout."""
        click.echo(json.dumps(data, indent=2, default=str))

    def output_table(
        self,
        columns: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Render a table.

        Args:
            columns: Column headers
            rows: Row cells, one list per row
            title: Optional table title
        """
        if self.quiet:
            return

        table = Table(title=title, show_lines=False)
        for column in columns:
            table.add_column(column, overflow="fold")
        for row in rows:
            table.add_row(*row)

        Console(stderr=self.json_output, highlight=False).print(table)

    def print_summary(self, title: str, items: list[tuple[str, Any]]) -> None:
        """Print a titled block of label/value pairs.

        Args:
            title: Block title
            items: (label, value) pairs
        """
        if self.quiet:
            return

        width = max((len(label) for label, _ in items), default=0)
        self._echo("")
        self._echo(title, bold=True)
        self._echo("=" * max(len(title), 40))
        for label, value in items:
            self._echo(f"  {label.ljust(width)} : {value}")
        self._echo("")
