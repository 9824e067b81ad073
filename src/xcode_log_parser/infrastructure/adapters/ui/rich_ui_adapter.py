"""
Rich-based implementation of the UI service.
"""
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

from xcode_log_parser.domain.ports.ui_service import LogLevel, UIServicePort, TablePort

THEME = Theme({
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "critical": "red bold",
    "debug": "dim",
    "panel.border": "cyan",
    "panel.title": "cyan bold",
})


class RichTable(TablePort):
    """Rich implementation of a table."""

    def __init__(self, table: Table, console: Console):
        self.table = table
        self.console = console

    def add_row(self, *values, **kwargs) -> None:
        self.table.add_row(*values, **kwargs)

    def render(self, **kwargs) -> None:
        self.console.print(self.table, **kwargs)


class RichUIAdapter(UIServicePort):
    """Rich implementation of the UI service."""

    def __init__(self, console: Optional[Console] = None):
        """
        Initialize the Rich UI adapter.

        Args:
            console: Console to print to. A themed stdout console by default.
        """
        self.console = console or Console(theme=THEME)

    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
        style = level.value
        self.console.print(f"[{style}]{escape(message)}[/{style}]", **kwargs)

    def table(self, columns: List[str], **kwargs) -> RichTable:
        table = Table(**kwargs)
        for column in columns:
            table.add_column(column)
        return RichTable(table, self.console)

    def panel(self, content: str, title: str = "", **kwargs) -> None:
        self.console.print(Panel(content, title=title, **kwargs))


class RichLoggingHandler(RichHandler):
    """Rich logging handler writing to a themed stderr console, keeping stdout for reports."""

    def __init__(self, console: Optional[Console] = None, **kwargs):
        super().__init__(console=console or Console(theme=THEME, stderr=True), **kwargs)
