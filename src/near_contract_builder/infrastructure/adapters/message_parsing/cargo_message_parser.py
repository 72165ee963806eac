"""
Decodes cargo's `--message-format json` lines into typed messages.
"""
import json
import logging
from typing import Iterable, Iterator, Optional

from near_contract_builder.domain.models.cargo_message import MessageKind, RawMessage

logger = logging.getLogger(__name__)


class CargoMessageParser:
    """
    Parses each line independently. Plain-text lines legitimately interleave
    with JSON ones, so a line that does not decode is dropped, not reported.
    """

    def parse_line(self, line: str) -> Optional[RawMessage]:
        """
        Decodes and classifies a single line.

        Args:
            line: One complete line of stdout.

        Returns:
            A RawMessage, or None when the line is not JSON.
        """
        try:
            decoded = json.loads(line)
        except ValueError:
            logger.debug(f"Ignoring non-JSON output line: {line[:120]}")
            return None

        if not isinstance(decoded, dict):
            return RawMessage(kind=MessageKind.OTHER, payload={}, line=line)

        return RawMessage(kind=MessageKind.from_reason(decoded.get("reason")), payload=decoded, line=line)

    def parse_lines(self, lines: Iterable[str]) -> Iterator[RawMessage]:
        """Yields the decoded messages among `lines`, skipping the rest."""
        for line in lines:
            message = self.parse_line(line)
            if message is not None:
                yield message
