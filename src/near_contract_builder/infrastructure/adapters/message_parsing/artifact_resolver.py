"""
Finds the compiled contract among cargo's `compiler-artifact` messages.
"""
import logging
import os
from typing import Iterable, Optional

from near_contract_builder.domain.models.build_outcome import Artifact
from near_contract_builder.domain.models.cargo_message import MessageKind, RawMessage

logger = logging.getLogger(__name__)

CONTRACT_TARGET_KIND = "cdylib"
CONTRACT_EXTENSION = ".wasm"


class ArtifactResolver:
    """
    Resolves the contract binary from artifact messages.

    When several messages qualify, the last one in stream order wins: cargo
    announces the final release output after any intermediate ones.
    """

    def __init__(self, target_kind: str = CONTRACT_TARGET_KIND, extension: str = CONTRACT_EXTENSION):
        self.target_kind = target_kind
        self.extension = extension

    def candidate(self, message: RawMessage) -> Optional[str]:
        """Returns the binary filename announced by `message`, if it qualifies."""
        if message.kind is not MessageKind.ARTIFACT_PRODUCED:
            return None

        target = message.payload.get("target")
        kinds = target.get("kind") if isinstance(target, dict) else None
        if not isinstance(kinds, list) or self.target_kind not in kinds:
            return None

        filenames = message.payload.get("filenames")
        if not isinstance(filenames, list):
            return None
        for filename in filenames:
            if isinstance(filename, str) and filename.endswith(self.extension):
                return filename
        return None

    def resolve(self, messages: Iterable[RawMessage], project_dir: str) -> Optional[Artifact]:
        """
        Args:
            messages: Artifact messages in stream order.
            project_dir: Base for relative filenames.

        Returns:
            The resolved artifact with an absolute path, or None when no message qualified.
        """
        found = None
        for message in messages:
            filename = self.candidate(message)
            if filename:
                found = filename

        if found is None:
            logger.info(f"No {self.target_kind} artifact ending in {self.extension} was reported")
            return None

        path = found if os.path.isabs(found) else os.path.join(project_dir, found)
        path = os.path.abspath(path)
        logger.info(f"Resolved contract artifact: {path}")
        return Artifact(path=path, kind=self.target_kind)
