from abc import ABC, abstractmethod


class OutputSinkPort(ABC):
    """Destination for live, unparsed build output (cargo's stderr)."""

    @abstractmethod
    def append(self, text: str) -> None:
        """
        Appends raw text as it arrives. May be a partial line.

        Args:
            text: Decoded output text.
        """
        pass

    @abstractmethod
    def append_line(self, text: str) -> None:
        """
        Appends one complete line (e.g. a status message from the builder itself).

        Args:
            text: The line, without terminator.
        """
        pass

    def flush(self) -> None:
        """Emits any buffered partial output. Called once the process has exited."""
        pass
