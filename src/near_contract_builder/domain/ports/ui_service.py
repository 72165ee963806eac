"""
Console presentation ports used by the CLI commands.

A build is shown as a spinner while cargo runs, then as a diagnostics table
and a result panel once the BuildOutcome is known.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import List


class LogLevel(Enum):
    """How prominently a console message is shown; SUCCESS has no logging equivalent."""
    DEBUG = "debug"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class StatusPort(ABC):
    """A live one-line indicator for a running build (spinner plus text)."""

    @abstractmethod
    def update(self, message: str, **kwargs) -> None:
        """
        Replaces the indicator text, e.g. with the crate cargo is compiling now.

        Args:
            message: Plain text; never interpreted as markup.
        """

    @abstractmethod
    def stop(self, **kwargs) -> None:
        """Removes the indicator. Must be called before the result is printed."""


class TablePort(ABC):
    """Rows of build facts (diagnostics, toolchain settings) rendered in one go."""

    @abstractmethod
    def add_row(self, *values, **kwargs) -> None:
        """
        Args:
            *values: One cell per column, converted with str() and shown verbatim.
        """

    @abstractmethod
    def render(self, **kwargs) -> None:
        """Prints the table with every row added so far."""


class UIServicePort(ABC):
    """Console front end for the build and verify commands."""

    @abstractmethod
    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
        """
        Prints one message styled by level. Compiler output often contains
        brackets (`[u8; 32]`), so text is printed as-is.
        """

    @abstractmethod
    def status(self, message: str, **kwargs) -> StatusPort:
        """
        Starts a live indicator for work in progress.

        Args:
            message: Initial text, e.g. "Building contracts/hello...".

        Returns:
            The indicator; update it as cargo reports progress and stop it when done.
        """

    @abstractmethod
    def table(self, columns: List[str], **kwargs) -> TablePort:
        """
        Args:
            columns: Column headers, e.g. Severity / Location / Message / Docs.
            **kwargs: Adapter options such as `title`.
        """

    @abstractmethod
    def panel(self, content: str, title: str = "", **kwargs) -> None:
        """
        Shows a boxed summary such as "Build Failed" or "Build Succeeded".

        Args:
            content: Summary text; may span several lines.
            title: Panel heading.
            **kwargs: Adapter options such as `border_style`.
        """

    @abstractmethod
    def close(self) -> None:
        """Tears down any live display still running."""
