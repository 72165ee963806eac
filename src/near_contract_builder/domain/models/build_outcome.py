# src/near_contract_builder/domain/models/build_outcome.py
"""
Domain models for a single contract build: diagnostics, artifact and outcome.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple


class Severity(Enum):
    """Severity of a compiler diagnostic."""
    ERROR = "error"
    WARNING = "warning"


class BuildPhase(Enum):
    """Lifecycle of one build invocation."""
    IDLE = "idle"
    SPAWNING = "spawning"
    STREAMING = "streaming"
    FINALIZING = "finalizing"
    COMPLETED = "completed"
    FAILED_TO_SPAWN = "failed_to_spawn"


@dataclass(frozen=True)
class Position:
    """0-based line/character position."""
    line: int
    character: int

    def as_tuple(self) -> Tuple[int, int]:
        return self.line, self.character


@dataclass(frozen=True)
class Range:
    """0-based source range, end never before start."""
    start: Position
    end: Position


@dataclass
class CompilerDiagnostic:
    """A warning or error attached to the primary span of a compiler message."""
    file_path: str
    range: Range
    severity: Severity
    message: str
    code: Optional[str] = None
    documentation_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "range": {
                "start": {"line": self.range.start.line, "character": self.range.start.character},
                "end": {"line": self.range.end.line, "character": self.range.end.character},
            },
            "severity": self.severity.value,
            "message": self.message,
            "code": self.code,
            "documentation_url": self.documentation_url,
        }


class DiagnosticSet:
    """
    Ordered mapping of file path -> diagnostics for that file.

    Files appear in the order their first diagnostic was added and each file's
    diagnostics keep stream order. A file only has a key once it has a diagnostic.
    """

    def __init__(self):
        self._by_file: Dict[str, List[CompilerDiagnostic]] = {}

    def add(self, diagnostic: CompilerDiagnostic) -> None:
        self._by_file.setdefault(diagnostic.file_path, []).append(diagnostic)

    def files(self) -> List[str]:
        return list(self._by_file)

    def for_file(self, file_path: str) -> List[CompilerDiagnostic]:
        return list(self._by_file.get(file_path, []))

    def items(self) -> Iterator[Tuple[str, List[CompilerDiagnostic]]]:
        for file_path, diagnostics in self._by_file.items():
            yield file_path, list(diagnostics)

    def flatten(self) -> List[CompilerDiagnostic]:
        """All diagnostics as one list, file by file."""
        return [d for diagnostics in self._by_file.values() for d in diagnostics]

    def count(self, severity: Optional[Severity] = None) -> int:
        if severity is None:
            return sum(len(diagnostics) for diagnostics in self._by_file.values())
        return sum(1 for d in self.flatten() if d.severity is severity)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {path: [d.to_dict() for d in diagnostics] for path, diagnostics in self._by_file.items()}

    def __contains__(self, file_path: str) -> bool:
        return file_path in self._by_file

    def __len__(self) -> int:
        return len(self._by_file)

    def __bool__(self) -> bool:
        return bool(self._by_file)

    def __repr__(self) -> str:
        return f"DiagnosticSet(files={len(self._by_file)}, diagnostics={self.count()})"


@dataclass(frozen=True)
class Artifact:
    """The compiled contract produced by a successful build."""
    path: str  # Absolute
    kind: str  # e.g. 'cdylib'


@dataclass
class BuildOutcome:
    """Result of one build invocation."""
    success: bool
    artifact: Optional[Artifact] = None
    diagnostics: DiagnosticSet = field(default_factory=DiagnosticSet)
    toolchain_errors: List[str] = field(default_factory=list)
    exit_code: Optional[int] = None  # None when the process never started

    @property
    def missing_artifact(self) -> bool:
        """The build succeeded but no .wasm artifact was announced."""
        return self.success and self.artifact is None

    @property
    def spawn_failed(self) -> bool:
        return not self.success and self.exit_code is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "exit_code": self.exit_code,
            "artifact": {"path": self.artifact.path, "kind": self.artifact.kind} if self.artifact else None,
            "diagnostics": self.diagnostics.to_dict(),
            "toolchain_errors": list(self.toolchain_errors),
        }


@dataclass
class BuildReport:
    """A BuildOutcome plus the flattened diagnostic list handed to callers."""
    project_dir: str
    outcome: BuildOutcome
    diagnostics: List[CompilerDiagnostic] = field(default_factory=list)

    @property
    def ready_to_deploy(self) -> bool:
        return self.outcome.success and self.outcome.artifact is not None
