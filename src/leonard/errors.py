"""Application-level exception types for leonard."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .types import AgentRole


class LeonardError(Exception):
    """Base exception for leonard."""


class ConfigurationError(LeonardError):
    """Base exception for configuration and startup validation errors."""


class WorkingDirectoryError(ConfigurationError):
    """Raised when the configured working directory is missing or not a directory."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{reason}: {path}")
        self.path = path


class BinaryNotFoundError(ConfigurationError):
    """Raised when an agent executable cannot be found on PATH."""

    def __init__(self, role: AgentRole, binary: str) -> None:
        super().__init__(f"{role.title} binary '{binary}' not found on PATH or not executable")
        self.role = role
        self.binary = binary


class EmptyTaskError(ConfigurationError):
    """Raised when the task text is empty or whitespace."""


class RelayError(LeonardError):
    """Base exception for failures that stop the relay loop."""

    def __init__(self, role: AgentRole, message: str) -> None:
        super().__init__(message)
        self.role = role


class SpawnError(RelayError):
    """Raised when an agent process could not be started."""

    def __init__(self, role: AgentRole, binary: str, cause: OSError) -> None:
        super().__init__(role, f"failed to spawn {role.tag} ({binary}): {cause.strerror or cause}")
        self.binary = binary
        self.cause = cause


class NonZeroExitError(RelayError):
    """Raised when an agent process exits with a failure status."""

    def __init__(
        self,
        role: AgentRole,
        returncode: int,
        *,
        partial_output: str = "",
        stderr_lines: Sequence[str] = (),
    ) -> None:
        super().__init__(role, f"{role.tag} exited with status {returncode}")
        self.returncode = returncode
        self.partial_output = partial_output
        self.stderr_lines = tuple(stderr_lines)


class RelayInterrupted(RelayError):
    """Raised after the relay was cancelled and its children were terminated."""

    def __init__(self, role: AgentRole, turn_index: int) -> None:
        super().__init__(role, f"interrupted during {role.tag} turn {turn_index}")
        self.turn_index = turn_index
