"""Base module loader interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from blastradius.graph.models import ModuleDescriptor


class ModuleLoader(ABC):
    """Abstract base for module loaders."""

    @abstractmethod
    def load(self, candidate: str) -> ModuleDescriptor:
        """Load the module at a candidate identity.

        Raises:
            ModuleNotFound: nothing exists at ``candidate``.
            LoaderError: the module exists but could not be read.
        """
        ...
