import logging
import os
from typing import Any, Dict, Optional

from near_contract_builder.domain.exceptions import InvalidProjectError
from near_contract_builder.domain.models.build_outcome import BuildReport
from near_contract_builder.domain.ports.build_system import BuildSystemPort

logger = logging.getLogger(__name__)

MANIFEST_FILE = "Cargo.toml"


class BuildContractUseCase:
    """
    Use case entry point for building a contract project.
    Validates the project folder, runs one build and flattens the diagnostics.
    """

    def __init__(self, build_system: BuildSystemPort, config: Optional[Dict[str, Any]] = None):
        """Initializes the use case with the build system to drive."""
        self.build_system = build_system
        self.config = config or {}
        logger.debug("BuildContractUseCase initialized.")

    def validate_project(self, project_dir: str) -> str:
        """
        Checks that `project_dir` is a cargo project.

        Returns:
            The absolute project directory.

        Raises:
            InvalidProjectError: If the folder is missing or has no Cargo.toml.
        """
        abs_dir = os.path.abspath(project_dir)
        if not os.path.isdir(abs_dir):
            raise InvalidProjectError(abs_dir, "folder does not exist")
        if not os.path.isfile(os.path.join(abs_dir, MANIFEST_FILE)):
            raise InvalidProjectError(abs_dir, f"folder does not contain {MANIFEST_FILE}")
        return abs_dir

    async def execute(self, project_dir: str) -> BuildReport:
        """
        Builds the contract at `project_dir`.

        Args:
            project_dir: The root directory of the contract (containing Cargo.toml).

        Returns:
            A BuildReport whose `diagnostics` lists every diagnostic, file by file.
        """
        abs_dir = self.validate_project(project_dir)
        logger.info(f"Building contract in {abs_dir}")

        outcome = await self.build_system.build(abs_dir)
        report = BuildReport(
            project_dir=abs_dir,
            outcome=outcome,
            diagnostics=outcome.diagnostics.flatten(),
        )

        if outcome.missing_artifact:
            logger.warning(f"Build in {abs_dir} succeeded but no .wasm artifact was reported")
        for hint in outcome.toolchain_errors:
            logger.warning(f"[Toolchain] {hint}")
        return report
