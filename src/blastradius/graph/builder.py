"""Build a module graph by following imports from a root module."""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING

from blastradius.exceptions import ModuleNotFound, ResolutionError
from blastradius.graph.models import NATIVE_IMPORT, Module, ModuleDescriptor, ModuleGraph

if TYPE_CHECKING:
    from blastradius.loader.base import ModuleLoader

logger = logging.getLogger("blastradius.graph")


def vendor_paths(import_name: str, importer: str = "", vendor: str = "vendor") -> list[str]:
    """Return every identity ``import_name`` may resolve to, most specific first.

    If module "a/b" imports "target", the candidates are:
    [a/b/vendor/target, a/vendor/target, vendor/target, target]
    """
    parts = importer.split("/") if importer else []
    paths = [
        "/".join([*parts[:i], vendor, import_name])
        for i in range(len(parts), -1, -1)
    ]
    paths.append(import_name)
    return paths


class GraphBuilder:
    """Discovers every module reachable by import from a root module.

    Traversal is a FIFO work queue. A module is loaded once; later imports of
    it only record the name -> identity mapping on the importer.
    """

    def __init__(self, loader: ModuleLoader, vendor_segment: str = "vendor") -> None:
        self.loader = loader
        self.vendor_segment = vendor_segment
        self._reset()

    def _reset(self) -> None:
        self._descriptors: dict[str, ModuleDescriptor] = {}
        self._resolved: dict[str, dict[str, str]] = {}
        self._parents: dict[str, str | None] = {}
        self._candidates: dict[str, str] = {}
        self._missing: dict[str, ModuleNotFound] = {}

    def build(self, root: str) -> ModuleGraph:
        """Build the full graph reachable from ``root``.

        Raises:
            ResolutionError: a required import could not be resolved.
            LoaderError: a module exists but could not be loaded.
        """
        self._reset()
        queue: deque[str] = deque()

        root_identity = self._resolve(None, root, queue)
        if root_identity is None:
            return ModuleGraph(root, {})

        while queue:
            identity = queue.popleft()
            descriptor = self._descriptors[identity]

            for name in [*descriptor.imports, *descriptor.test_imports]:
                self._resolve(identity, name, queue)

            for name in descriptor.optional_imports:
                try:
                    self._resolve(identity, name, queue)
                except ResolutionError as e:
                    logger.debug("Skipping optional import %s in %s: %s", name, identity, e.cause)

        modules = {
            identity: Module(
                identity=identity,
                imports=tuple(d.imports),
                test_imports=tuple(d.test_imports),
                optional_imports=tuple(d.optional_imports),
                resolved=dict(self._resolved[identity]),
            )
            for identity, d in self._descriptors.items()
        }
        logger.info("Built graph for %s: %d modules", root_identity, len(modules))
        return ModuleGraph(root_identity, modules)

    def _resolve(self, importer: str | None, name: str, queue: deque[str]) -> str | None:
        """Resolve one import name in the context of ``importer``.

        Returns the resolved identity, or None for the native sentinel.
        """
        if name == NATIVE_IMPORT:
            return None

        last_error: ModuleNotFound | None = None
        for candidate in vendor_paths(name, importer or "", self.vendor_segment):
            identity = self._candidates.get(candidate)
            if identity is None and candidate in self._descriptors:
                identity = candidate

            if identity is None:
                if candidate in self._missing:
                    last_error = self._missing[candidate]
                    continue
                try:
                    descriptor = self.loader.load(candidate)
                except ModuleNotFound as e:
                    self._missing[candidate] = e
                    last_error = e
                    continue

                identity = descriptor.identity
                self._candidates[candidate] = identity
                if identity not in self._descriptors:
                    self._descriptors[identity] = descriptor
                    self._resolved[identity] = {}
                    self._parents[identity] = importer
                    queue.append(identity)

            if importer is not None:
                self._resolved[importer][name] = identity
            if candidate != name:
                logger.debug("%s: %s resolved to %s", importer, name, identity)
            return identity

        raise ResolutionError(name, self._chain(importer), last_error)

    def _chain(self, importer: str | None) -> list[str]:
        """Import chain from the root down to ``importer``."""
        chain: list[str] = []
        while importer is not None:
            chain.append(importer)
            importer = self._parents.get(importer)
        chain.reverse()
        return chain
