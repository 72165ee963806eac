"""
Front for the console UI adapters used by the CLI commands.
Without an adapter every call degrades to a log record.
"""
import logging
from typing import List, Optional

from near_contract_builder.domain.ports.ui_service import (
    LogLevel, UIServicePort, StatusPort, TablePort
)

logger = logging.getLogger(__name__)

_LOGGING_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.SUCCESS: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


class UIService:
    """Routes build presentation to a UIServicePort, or to logging when there is none."""

    def __init__(self, ui_service: Optional[UIServicePort] = None):
        self.ui_service = ui_service

    def log(self, message: str, level: LogLevel = LogLevel.INFO, **kwargs) -> None:
        if self.ui_service is None:
            logger.log(_LOGGING_LEVELS[level], message)
            return
        self.ui_service.log(message, level, **kwargs)

    def status(self, message: str, **kwargs) -> StatusPort:
        if self.ui_service is None:
            return LoggedStatus(message)
        return self.ui_service.status(message, **kwargs)

    def table(self, columns: List[str], **kwargs) -> TablePort:
        if self.ui_service is None:
            return LoggedTable(columns, kwargs.get("title"))
        return self.ui_service.table(columns, **kwargs)

    def panel(self, content: str, title: str = "", **kwargs) -> None:
        if self.ui_service is None:
            for line in ([f"[{title}]"] if title else []) + content.splitlines():
                logger.info(line)
            return
        self.ui_service.panel(content, title, **kwargs)

    def close(self) -> None:
        if self.ui_service is not None:
            self.ui_service.close()


class LoggedStatus(StatusPort):
    """Logs each distinct status text once instead of animating it."""

    def __init__(self, message: str):
        self._last = None
        self.update(message)

    def update(self, message: str, **kwargs) -> None:
        if message != self._last:
            logger.info(message)
            self._last = message

    def stop(self, **kwargs) -> None:
        self._last = None


class LoggedTable(TablePort):
    """Logs one record per row, cells joined with ' | '."""

    def __init__(self, columns: List[str], title: Optional[str] = None):
        self.columns = columns
        self.title = title
        self.rows: List[List[str]] = []

    def add_row(self, *values, **kwargs) -> None:
        self.rows.append([str(value) for value in values])

    def render(self, **kwargs) -> None:
        if self.title:
            logger.info(f"{self.title} ({len(self.rows)} row(s))")
        logger.info(" | ".join(self.columns))
        for row in self.rows:
            logger.info(" | ".join(row))
