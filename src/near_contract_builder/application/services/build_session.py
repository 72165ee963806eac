"""
Per-invocation state of a contract build.
"""
import logging
from typing import Dict, List, Optional, Set, Union

from near_contract_builder.domain.exceptions import InvalidPhaseTransition
from near_contract_builder.domain.models.build_outcome import BuildOutcome, BuildPhase, DiagnosticSet
from near_contract_builder.domain.models.cargo_message import MessageKind, RawMessage
from near_contract_builder.infrastructure.adapters.message_parsing import (
    ArtifactResolver,
    CargoMessageParser,
    DiagnosticExtractor,
    ToolchainErrorClassifier,
)
from near_contract_builder.infrastructure.streaming.line_accumulator import LineAccumulator

logger = logging.getLogger(__name__)

_TRANSITIONS: Dict[BuildPhase, Set[BuildPhase]] = {
    BuildPhase.IDLE: {BuildPhase.SPAWNING},
    BuildPhase.SPAWNING: {BuildPhase.STREAMING, BuildPhase.FAILED_TO_SPAWN},
    BuildPhase.STREAMING: {BuildPhase.FINALIZING},
    BuildPhase.FINALIZING: {BuildPhase.COMPLETED},
    BuildPhase.COMPLETED: set(),
    BuildPhase.FAILED_TO_SPAWN: set(),
}


class BuildSession:
    """
    Owns every buffer of one build: the stdout and stderr line accumulators,
    the diagnostic set, the toolchain findings and the artifact messages.

    Output is parsed as it arrives. A session is single-shot: once it reaches
    COMPLETED or FAILED_TO_SPAWN its buffers are released and it accepts no
    more input.
    """

    def __init__(
        self,
        project_dir: str,
        parser: Optional[CargoMessageParser] = None,
        extractor: Optional[DiagnosticExtractor] = None,
        resolver: Optional[ArtifactResolver] = None,
        classifier: Optional[ToolchainErrorClassifier] = None,
    ):
        self.project_dir = project_dir
        self.parser = parser or CargoMessageParser()
        self.extractor = extractor or DiagnosticExtractor()
        self.resolver = resolver or ArtifactResolver()
        self.classifier = classifier or ToolchainErrorClassifier()

        self.phase = BuildPhase.IDLE
        self._stdout: Optional[LineAccumulator] = LineAccumulator()
        self._stderr: Optional[LineAccumulator] = LineAccumulator()
        self._diagnostics = DiagnosticSet()
        self._artifact_messages: List[RawMessage] = []
        self._cargo_reported_success: Optional[bool] = None

    # --- State machine ---

    def _advance(self, phase: BuildPhase) -> None:
        if phase not in _TRANSITIONS[self.phase]:
            raise InvalidPhaseTransition(self.phase, phase)
        logger.debug(f"Build session {self.project_dir}: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def mark_spawning(self) -> None:
        self._advance(BuildPhase.SPAWNING)

    def mark_streaming(self) -> None:
        self._advance(BuildPhase.STREAMING)

    # --- Streaming input ---

    def feed_stdout(self, chunk: Union[bytes, str]) -> None:
        """Parses every stdout line completed by `chunk`."""
        self._require_streaming()
        for line in self._stdout.feed(chunk):
            self._handle_stdout_line(line)

    def feed_stderr(self, chunk: Union[bytes, str]) -> None:
        """Scans every stderr line completed by `chunk` for toolchain problems."""
        self._require_streaming()
        for line in self._stderr.feed(chunk):
            self.classifier.classify_line(line)

    def _require_streaming(self) -> None:
        if self.phase is not BuildPhase.STREAMING:
            raise InvalidPhaseTransition(self.phase, BuildPhase.STREAMING)

    def _handle_stdout_line(self, line: str) -> None:
        message = self.parser.parse_line(line)
        if message is None:
            self.classifier.classify_line(line)
            return
        self._handle_message(message)

    def _handle_message(self, message: RawMessage) -> None:
        if message.kind is MessageKind.COMPILER_DIAGNOSTIC:
            for diagnostic in self.extractor.extract(message):
                self._diagnostics.add(diagnostic)
            self.classifier.classify_message(message)
        elif message.kind is MessageKind.ARTIFACT_PRODUCED:
            self._artifact_messages.append(message)
        elif message.kind is MessageKind.BUILD_FINISHED:
            success = message.payload.get("success")
            self._cargo_reported_success = success if isinstance(success, bool) else None
            logger.debug(f"cargo reported build-finished (success={success})")

    # --- Completion ---

    def finalize(self, exit_code: int) -> BuildOutcome:
        """
        Flushes trailing partial lines and assembles the outcome.

        Args:
            exit_code: The process exit status; 0 means success.
        """
        self._advance(BuildPhase.FINALIZING)
        for line in self._stdout.finish():
            self._handle_stdout_line(line)
        for line in self._stderr.finish():
            self.classifier.classify_line(line)

        success = exit_code == 0
        if self._cargo_reported_success is not None and self._cargo_reported_success != success:
            logger.warning(
                f"cargo reported success={self._cargo_reported_success} but exited with code {exit_code}; "
                f"using the exit code"
            )

        artifact = self.resolver.resolve(self._artifact_messages, self.project_dir) if success else None
        outcome = BuildOutcome(
            success=success,
            artifact=artifact,
            diagnostics=self._diagnostics,
            toolchain_errors=self.classifier.hints,
            exit_code=exit_code,
        )
        self._advance(BuildPhase.COMPLETED)
        self._release()
        return outcome

    def fail_to_spawn(self, command: str, error: BaseException) -> BuildOutcome:
        """Builds the outcome for a process that never started."""
        self._advance(BuildPhase.FAILED_TO_SPAWN)
        self.classifier.record_spawn_failure(command, error)
        outcome = BuildOutcome(
            success=False,
            artifact=None,
            diagnostics=DiagnosticSet(),
            toolchain_errors=self.classifier.hints,
            exit_code=None,
        )
        self._release()
        return outcome

    def _release(self) -> None:
        self._stdout = None
        self._stderr = None
        self._artifact_messages = []
        self._diagnostics = DiagnosticSet()
