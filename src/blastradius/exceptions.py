"""Custom exceptions for blastradius."""

from __future__ import annotations


class BlastRadiusError(Exception):
    """Base exception for all blastradius errors."""


class ConfigError(BlastRadiusError):
    """Configuration-related errors."""


class ResolutionError(BlastRadiusError):
    """An import could not be resolved through any shadow candidate."""

    def __init__(self, name: str, chain: list[str], cause: Exception | None = None):
        self.name = name
        self.chain = list(chain)
        self.cause = cause
        parts = [*self.chain, f"cannot resolve '{name}'"]
        message = " > ".join(parts)
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class GraphConsistencyError(BlastRadiusError):
    """A module identity that should be in the graph is not."""

    def __init__(self, identity: str, message: str | None = None):
        self.identity = identity
        super().__init__(message or f"Module '{identity}' does not exist in graph")


class CollaboratorError(BlastRadiusError):
    """A collaborator (git, source loader) failed."""


class GitError(CollaboratorError):
    """A git command failed."""

    def __init__(self, command: list[str], stderr: str = ""):
        self.command = list(command)
        self.stderr = stderr.strip()
        message = f"Error running command `{' '.join(self.command)}`"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class LoaderError(CollaboratorError):
    """Module source loading errors."""


class ModuleNotFound(LoaderError):
    """No module exists at the candidate identity."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__(f"No module found at '{identity}'")
