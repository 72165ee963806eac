# src/near_contract_builder/domain/models/cargo_message.py
"""
Typed view of the newline-delimited JSON messages cargo prints with
`--message-format json`.
See: https://doc.rust-lang.org/cargo/reference/external-tools.html#json-messages
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class MessageKind(Enum):
    """Classification of a decoded cargo message by its `reason` field."""
    ARTIFACT_PRODUCED = "compiler-artifact"
    COMPILER_DIAGNOSTIC = "compiler-message"
    BUILD_FINISHED = "build-finished"
    OTHER = "other"

    @classmethod
    def from_reason(cls, reason: Any) -> "MessageKind":
        if not isinstance(reason, str):
            return cls.OTHER
        return _REASONS.get(reason, cls.OTHER)


# Tools that wrap cargo may emit the generic `artifact-produced` spelling.
_REASONS = {
    "compiler-artifact": MessageKind.ARTIFACT_PRODUCED,
    "artifact-produced": MessageKind.ARTIFACT_PRODUCED,
    "compiler-message": MessageKind.COMPILER_DIAGNOSTIC,
    "build-finished": MessageKind.BUILD_FINISHED,
}


@dataclass
class RawMessage:
    """One decoded line of cargo output."""
    kind: MessageKind
    payload: Dict[str, Any] = field(default_factory=dict)  # Empty when the JSON was not an object
    line: str = ""
