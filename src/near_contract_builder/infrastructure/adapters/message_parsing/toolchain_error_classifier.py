"""
Regex-based detection of environment-level build failures (missing target,
toolchain or linker) that are not attributable to a source file.
"""
import logging
import re
from typing import Any, Dict, List, Optional

from near_contract_builder.domain.models.cargo_message import MessageKind, RawMessage

logger = logging.getLogger(__name__)

CONTRACT_TARGET = "wasm32-unknown-unknown"


class ToolchainErrorClassifier:
    """
    Scans unparsed output for toolchain problems and collects one hint per
    problem, in the order first seen.

    Findings never change whether the build is considered successful.
    """

    def __init__(self):
        self.patterns = self._compile_patterns()
        self._hints: List[str] = []

    def _compile_patterns(self) -> List[Dict[str, Any]]:
        """Compiles regex patterns for the known toolchain failures."""
        missing_target = (
            f"The {CONTRACT_TARGET} target may not be installed. "
            f"Run `rustup target add {CONTRACT_TARGET}`."
        )
        return [
            {
                "pattern": re.compile(r"target may not be installed", re.IGNORECASE),
                "category": "MissingTarget",
                "hint": lambda match: missing_target,
            },
            {
                "pattern": re.compile(r"can't find crate for `(core|std)`"),
                "category": "MissingTarget",
                "hint": lambda match: missing_target,
            },
            {
                "pattern": re.compile(r"toolchain '([^']+)' is not installed"),
                "category": "MissingToolchain",
                "hint": lambda match: (
                    f"Rust toolchain '{match.group(1)}' is not installed. "
                    f"Run `rustup toolchain install {match.group(1)}`."
                ),
            },
            {
                "pattern": re.compile(r"no such (?:sub)?command:?\s*`?([\w-]+)`?"),
                "category": "MissingSubcommand",
                "hint": lambda match: f"cargo does not provide the `{match.group(1)}` command.",
            },
            {
                "pattern": re.compile(r"linker `([^`]+)` not found"),
                "category": "MissingLinker",
                "hint": lambda match: f"Linker `{match.group(1)}` was not found on PATH.",
            },
            {
                "pattern": re.compile(r"could not find `Cargo\.toml`"),
                "category": "MissingManifest",
                "hint": lambda match: "No Cargo.toml was found in the project folder or its parents.",
            },
        ]

    @property
    def hints(self) -> List[str]:
        return list(self._hints)

    def classify_line(self, line: str) -> Optional[str]:
        """
        Matches one line of plain output against the known patterns.

        Returns:
            The hint for the first matching pattern, or None.
        """
        for pattern_dict in self.patterns:
            match = pattern_dict["pattern"].search(line)
            if match:
                hint = pattern_dict["hint"](match)
                logger.debug(f"Toolchain problem ({pattern_dict['category']}) in: {line}")
                self._record(hint)
                return hint
        return None

    def classify_message(self, message: RawMessage) -> Optional[str]:
        """Checks error-level compiler messages that point at no file."""
        if message.kind is not MessageKind.COMPILER_DIAGNOSTIC:
            return None
        body = message.payload.get("message")
        if not isinstance(body, dict) or body.get("level") != "error" or body.get("spans"):
            return None

        for key in ("rendered", "message"):
            text = body.get(key)
            if not isinstance(text, str):
                continue
            for line in text.splitlines():
                hint = self.classify_line(line)
                if hint:
                    return hint
        return None

    def record_spawn_failure(self, command: str, error: BaseException) -> str:
        hint = f"Could not start `{command}`: {error}. Is the Rust toolchain installed and on PATH?"
        self._record(hint)
        return hint

    def _record(self, hint: str) -> None:
        if hint not in self._hints:
            self._hints.append(hint)
