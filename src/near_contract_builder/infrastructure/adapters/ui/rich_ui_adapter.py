"""
Rich-based implementation of the UI service.
"""
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.theme import Theme

from near_contract_builder.domain.ports.ui_service import (
    LogLevel, UIServicePort, StatusPort, TablePort
)

THEME = Theme({
    "info": "cyan",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "critical": "red bold",
    "debug": "dim",
    "progress.description": "cyan",
    "progress.elapsed": "cyan",
    "panel.border": "cyan",
    "panel.title": "cyan bold",
})


class RichStatus(StatusPort):
    """Rich implementation of a status display."""

    def __init__(self, progress: Progress, task_id: int):
        """
        Initialize the status display.

        Args:
            progress: The Rich Progress object
            task_id: The task ID in the Progress object
        """
        self.progress = progress
        self.task_id = task_id

    def update(self, message: str, **kwargs) -> None:
        self.progress.update(self.task_id, description=message, **kwargs)

    def stop(self, **kwargs) -> None:
        self.progress.remove_task(self.task_id)


class RichTable(TablePort):
    """Rich implementation of a table."""

    def __init__(self, table: Table, console: Console):
        self.table = table
        self.console = console

    def add_row(self, *values, **kwargs) -> None:
        self.table.add_row(*(escape(str(value)) for value in values), **kwargs)

    def render(self, **kwargs) -> None:
        self.console.print(self.table, **kwargs)


class RichUIAdapter(UIServicePort):
    """Rich implementation of the UI service."""

    def __init__(self, config: Optional[dict] = None, console: Optional[Console] = None):
        """
        Initialize the Rich UI adapter.

        Args:
            config: The application configuration; reads `ui.show_elapsed`.
            console: Console to print to. A themed stdout console by default.
        """
        config = config or {}
        ui_config = config.get('ui', {}) or {}

        self.console = console or Console(theme=THEME)

        progress_columns = [
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
        ]
        if ui_config.get('show_elapsed', True):
            progress_columns.append(TimeElapsedColumn())

        self.progress = Progress(
            *progress_columns,
            console=self.console,
            transient=True,
        )
        self._started = False

    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
        """
        Log a message with the specified level.

        Args:
            message: The message to log; printed verbatim, markup is escaped
            level: The log level
            **kwargs: Additional arguments for Rich
        """
        style = level.value
        self.console.print(f"[{style}]{escape(message)}[/{style}]", **kwargs)

    def status(self, message: str, **kwargs) -> RichStatus:
        """Display a spinner with a message that can be updated."""
        if not self._started:
            self.progress.start()
            self._started = True
        task_id = self.progress.add_task(message, total=None, **kwargs)
        return RichStatus(self.progress, task_id)

    def table(self, columns: List[str], **kwargs) -> RichTable:
        table = Table(**kwargs)
        for column in columns:
            table.add_column(column)
        return RichTable(table, self.console)

    def panel(self, content: str, title: str = "", **kwargs) -> None:
        self.console.print(Panel(escape(content), title=title, **kwargs))

    def close(self) -> None:
        if self._started:
            self.progress.stop()
            self._started = False
