# src/near_contract_builder/domain/exceptions.py
"""Exceptions raised by the builder outside of the BuildOutcome taxonomy."""


class BuilderError(Exception):
    """Base class for builder errors."""
    pass


class InvalidProjectError(BuilderError):
    """The target folder does not exist or does not contain a Cargo.toml."""

    def __init__(self, project_dir: str, reason: str):
        self.project_dir = project_dir
        self.reason = reason
        super().__init__(f"{project_dir}: {reason}")


class InvalidPhaseTransition(BuilderError):
    """A build session was driven out of order."""

    def __init__(self, current, requested):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move build session from {current.value} to {requested.value}")
