import re

from near_contract_builder.domain.ports.output_sink import OutputSinkPort
from near_contract_builder.domain.ports.ui_service import StatusPort
from near_contract_builder.infrastructure.streaming.line_accumulator import LineAccumulator

# cargo's right-aligned progress verbs on stderr, e.g. "   Compiling near-sdk v5.1.0"
_PROGRESS = re.compile(r"^(Updating|Downloading|Downloaded|Compiling|Checking|Finished)\s+(.*)$")


class StatusOutputSink(OutputSinkPort):
    """
    Passes cargo output through to another sink and mirrors cargo's current
    step on the build status line, so the spinner reads
    "Building hello-near: Compiling near-sdk v5.1.0" while rustc works.
    """

    def __init__(self, status: StatusPort, inner: OutputSinkPort, label: str):
        self.status = status
        self.inner = inner
        self.label = label
        self._lines = LineAccumulator()

    def append(self, text: str) -> None:
        self.inner.append(text)
        for line in self._lines.feed(text):
            match = _PROGRESS.match(line)
            if match:
                self.status.update(f"{self.label}: {match.group(1)} {match.group(2)}")

    def append_line(self, text: str) -> None:
        self.inner.append_line(text)

    def flush(self) -> None:
        self.inner.flush()
