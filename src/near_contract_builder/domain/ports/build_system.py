from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

from near_contract_builder.domain.models.build_outcome import BuildOutcome


class BuildSystemPort(ABC):
    """Interface for building a contract project."""

    @abstractmethod
    def verify_environment(self) -> Tuple[bool, str]:
        """
        Verifies that the build tool can be launched.

        Returns:
            Tuple of (success, message) indicating if the environment is valid
            and providing details about any issues.
        """
        pass

    @abstractmethod
    async def build(self, project_dir: str) -> BuildOutcome:
        """
        Builds the project in release mode for the contract target.

        Never raises for spawn failures, compiler errors or toolchain problems:
        those are all reported inside the returned outcome.

        Args:
            project_dir: The root directory of the contract (containing Cargo.toml).

        Returns:
            The BuildOutcome of this single invocation.
        """
        pass

    @abstractmethod
    def get_build_info(self) -> Dict[str, Any]:
        """
        Returns information about the build system configuration.

        Returns:
            Dictionary containing build system details like version, command, arguments.
        """
        pass
