import logging
from typing import Optional

from near_contract_builder.domain.ports.output_sink import OutputSinkPort

CARGO_LOGGER_NAME = "near_contract_builder.cargo"


class LoggingOutputSink(OutputSinkPort):
    """
    Forwards live cargo output to a logger, one record per line.

    Partial text is held until its line completes so records never split a line.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger(CARGO_LOGGER_NAME)
        self.level = level
        self._partial = ""

    def append(self, text: str) -> None:
        self._partial += text
        *lines, self._partial = self._partial.split("\n")
        for line in lines:
            self._emit(line)

    def append_line(self, text: str) -> None:
        if self._partial:
            self._emit(self._partial)
            self._partial = ""
        self._emit(text)

    def flush(self) -> None:
        if self._partial:
            self._emit(self._partial)
            self._partial = ""

    def _emit(self, line: str) -> None:
        line = line.rstrip("\r")
        if line.strip():
            self.logger.log(self.level, line)
