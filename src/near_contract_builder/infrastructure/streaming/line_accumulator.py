"""
Reassembles complete lines from arbitrarily chunked process output.
"""
import codecs
import logging
import re
from typing import Iterator, List, Union

logger = logging.getLogger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class LineAccumulator:
    """
    Turns chunks of bytes or text into trimmed, non-empty lines.

    A chunk may end anywhere, including inside a multi-byte UTF-8 sequence or
    between the two characters of a CRLF. The trailing partial line is kept until
    a terminator arrives or finish() is called.

    Only newly received text is scanned for terminators; the partial line is kept
    as a list of pieces and joined once it completes.
    """

    def __init__(self, encoding: str = "utf-8"):
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pieces: List[str] = []
        self._held_cr = False
        self._finished = False

    @property
    def pending(self) -> str:
        """Text received but not yet emitted as a line."""
        return "".join(self._pieces) + ("\r" if self._held_cr else "")

    def feed(self, chunk: Union[bytes, str]) -> Iterator[str]:
        """
        Adds a chunk and returns the lines it completed.

        The buffer is updated immediately; only the iteration over completed
        lines is lazy.
        """
        if self._finished:
            raise RuntimeError("LineAccumulator.feed() called after finish()")
        text = self._decoder.decode(chunk) if isinstance(chunk, (bytes, bytearray)) else chunk
        if not text:
            return iter(())

        if self._held_cr:
            text = "\r" + text
            self._held_cr = False
        # A trailing CR may be the first half of a CRLF; wait for the next chunk.
        if text.endswith("\r"):
            text = text[:-1]
            self._held_cr = True

        parts = _LINE_BREAK.split(text)
        tail = parts.pop()
        if parts:
            parts[0] = "".join(self._pieces) + parts[0]
            self._pieces = []
        if tail:
            self._pieces.append(tail)
        return (line for line in (part.strip() for part in parts) if line)

    def finish(self) -> Iterator[str]:
        """Flushes the decoder and returns whatever is left as final lines."""
        if self._finished:
            return iter(())
        self._finished = True
        remainder = "".join(self._pieces) + self._decoder.decode(b"", final=True)
        self._pieces = []
        self._held_cr = False
        if remainder.strip():
            logger.debug(f"Flushing unterminated trailing output ({len(remainder)} chars)")
        return (line for line in (part.strip() for part in _LINE_BREAK.split(remainder)) if line)
