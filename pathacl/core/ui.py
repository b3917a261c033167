"""Terminal rendering for the pathacl CLI."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from rich.console import Console
from rich.table import Table
from rich.text import Text

SafetyCheck = Tuple[str, str, bool]


class RichUI:
    """Render safety reports, audit events and status lines with Rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def print_header(self, title: str) -> None:
        self.console.rule(Text(title, style="bold cyan"))

    def info(self, message: str) -> None:
        self.console.print(Text(message, style="green"))

    def warn(self, message: str) -> None:
        self.console.print(Text(message, style="yellow"))

    def error(self, message: str) -> None:
        self.console.print(Text(message, style="bold red"))

    @staticmethod
    def verdict(safe: bool) -> Text:
        return Text("safe", style="green") if safe else Text("unsafe", style="bold red")

    def safety_report(self, checks: Iterable[SafetyCheck]) -> bool:
        """Print one row per ``(kind, value, safe)`` check.

        Returns ``True`` when every check passed.
        """

        table = Table(title="Embedding Safety")
        for column in ("Kind", "Value", "Result"):
            table.add_column(column)
        all_safe = True
        for kind, value, safe in checks:
            table.add_row(kind, Text(value), self.verdict(safe))
            all_safe = all_safe and safe
        self.console.print(table)
        return all_safe

    def table(self, title: str, columns: Sequence[str], rows: List[List[str]]) -> Table:
        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        return table


__all__ = ["RichUI", "SafetyCheck"]
