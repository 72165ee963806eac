"""
TQDM-based implementation of the UI service.
Plain-terminal alternative to the Rich UI adapter, e.g. for CI logs.
"""
import sys
from typing import List, Optional, TextIO

import colorama
from tqdm import tqdm

from near_contract_builder.domain.ports.ui_service import (
    LogLevel, UIServicePort, StatusPort, TablePort
)

# Initialize colorama for cross-platform color support
colorama.init()


class TqdmStatus(StatusPort):
    """TQDM implementation of a status display."""

    def __init__(self, progress_bar: tqdm):
        self.progress_bar = progress_bar

    def update(self, message: str, **kwargs) -> None:
        self.progress_bar.set_description_str(message)
        self.progress_bar.refresh()

    def stop(self, **kwargs) -> None:
        self.progress_bar.close()


class TqdmTable(TablePort):
    """Simple column-aligned table for plain terminals."""

    def __init__(self, columns: List[str], stream: TextIO):
        """
        Initialize the table.

        Args:
            columns: The column headers
            stream: Where to print the table
        """
        self.columns = columns
        self.rows = []
        self.stream = stream

    def add_row(self, *values, **kwargs) -> None:
        self.rows.append([str(value) for value in values])

    def render(self, **kwargs) -> None:
        # Calculate column widths
        col_widths = [len(col) for col in self.columns]
        for row in self.rows:
            for i, cell in enumerate(row):
                if i < len(col_widths):
                    col_widths[i] = max(col_widths[i], len(cell))

        header = " | ".join(col.ljust(col_widths[i]) for i, col in enumerate(self.columns))
        print(colorama.Fore.CYAN + header + colorama.Style.RESET_ALL, file=self.stream)
        print("-" * len(header), file=self.stream)

        for row in self.rows:
            row_str = " | ".join(cell.ljust(col_widths[i]) for i, cell in enumerate(row) if i < len(col_widths))
            print(row_str, file=self.stream)


class TqdmUIAdapter(UIServicePort):
    """TQDM implementation of the UI service."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self.colors = {
            LogLevel.DEBUG: colorama.Fore.WHITE + colorama.Style.DIM,
            LogLevel.INFO: colorama.Fore.CYAN,
            LogLevel.SUCCESS: colorama.Fore.GREEN,
            LogLevel.WARNING: colorama.Fore.YELLOW,
            LogLevel.ERROR: colorama.Fore.RED,
            LogLevel.CRITICAL: colorama.Fore.RED + colorama.Style.BRIGHT,
        }
        self._open_bars: List[tqdm] = []

    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
        color = self.colors.get(level, "")
        # tqdm.write keeps an active status line intact
        tqdm.write(f"{color}{message}{colorama.Style.RESET_ALL}", file=self.stream)

    def status(self, message: str, **kwargs) -> TqdmStatus:
        """Shows a one-line status without a bar."""
        progress_bar = tqdm(total=0, desc=message, bar_format='{desc}', file=self.stream, **kwargs)
        self._open_bars.append(progress_bar)
        return TqdmStatus(progress_bar)

    def table(self, columns: List[str], **kwargs) -> TqdmTable:
        return TqdmTable(columns, self.stream)

    def panel(self, content: str, title: str = "", **kwargs) -> None:
        width = kwargs.get("width", 80)

        # Print the top border with title
        if title:
            title_str = f" {title} "
            padding = (width - len(title_str)) // 2
            print(colorama.Fore.CYAN + "=" * padding + title_str + "=" * (width - padding - len(title_str))
                  + colorama.Style.RESET_ALL, file=self.stream)
        else:
            print(colorama.Fore.CYAN + "=" * width + colorama.Style.RESET_ALL, file=self.stream)

        for line in content.split("\n"):
            print(line, file=self.stream)

        print(colorama.Fore.CYAN + "=" * width + colorama.Style.RESET_ALL, file=self.stream)

    def close(self) -> None:
        for progress_bar in self._open_bars:
            progress_bar.close()
        self._open_bars = []
