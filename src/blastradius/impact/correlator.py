"""Change correlator: which changed files matter to a module graph.

Maps changed repository files to module identities, then keeps only what is
both reachable from the root module and changed.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from blastradius.exceptions import ConfigError
from blastradius.graph.models import ModuleGraph

logger = logging.getLogger("blastradius.impact")


def nested(identity: str, parent: str) -> bool:
    """True if ``identity`` is ``parent`` or lives anywhere beneath it.

    nested("a/b", "a/b") == True
    nested("a/b/c", "a/b") == True
    nested("ax", "a") == False
    """
    if not identity.startswith(parent):
        return False
    if len(identity) == len(parent):
        return True
    return identity[len(parent)] == "/"


class ModuleNamer:
    """Turns repository-relative directories into module identities.

    Two layouts are supported:

    - The repository sits at or below the module-source root, so every
      directory is prefixed with the repository's position under it.
    - The module-source root sits below the repository (a ``src/`` layout),
      so directories are made relative to it. Directories outside of it
      belong to no module.
    """

    def __init__(self, repository_root: str | Path, source_root: str | Path) -> None:
        repo = Path(repository_root).resolve()
        source = Path(source_root).resolve()
        self.prefix = ""
        self.source_subdir: str | None = None

        if repo == source or source in repo.parents:
            self.prefix = _clean(repo.relative_to(source).as_posix())
        elif repo in source.parents:
            self.source_subdir = _clean(source.relative_to(repo).as_posix())
        else:
            raise ConfigError(
                f"Expected git root {repo} and source root {source} to contain one another"
            )

    def __call__(self, directory: str) -> str | None:
        directory = _clean(posixpath.normpath(directory)) if directory else ""
        if self.source_subdir is not None:
            if directory == self.source_subdir:
                return ""
            if nested(directory, self.source_subdir):
                return directory[len(self.source_subdir) + 1:]
            return None
        return "/".join(p for p in (self.prefix, directory) if p)

    def module_for_source(self, file_path: str) -> str | None:
        """Owning module of a source file.

        A file directly in the module-source root is a top-level module named
        after its stem.
        """
        identity = self(posixpath.dirname(file_path))
        if identity == "":
            stem, _ = posixpath.splitext(posixpath.basename(file_path))
            return stem
        return identity


def _clean(path: str) -> str:
    return "" if path == "." else path


@dataclass
class ChangeSet:
    """Result of correlating changed files against a module graph."""

    relevant_modules: set[str] = field(default_factory=set)
    relevant_files: list[str] = field(default_factory=list)
    artifact_files: list[str] = field(default_factory=list)
    module_files: dict[str, list[str]] = field(default_factory=dict)
    file_modules: dict[str, str] = field(default_factory=dict)

    def modules_for_files(self, files: Iterable[str]) -> list[str]:
        """Sorted relevant modules owning any of ``files``."""
        modules = {
            self.file_modules[f]
            for f in files
            if f in self.file_modules and self.file_modules[f] in self.relevant_modules
        }
        return sorted(modules)


def correlate(
    graph: ModuleGraph,
    changed_files: Sequence[str],
    root: str,
    namer: ModuleNamer,
    include_artifacts: bool = False,
    source_suffixes: Sequence[str] = (".py", ".pyi"),
) -> ChangeSet:
    """Determine which changed files and modules are relevant to ``root``.

    A module is relevant when it is reachable from ``root`` (every graph key,
    plus the root itself) and has at least one changed source file. With
    ``include_artifacts``, changed non-source files under the root module's
    directory are relevant as well, and a graph module whose directory holds
    one becomes relevant too.
    """
    suffixes = tuple(source_suffixes)
    reachable = set(graph) | {root}

    source_files: dict[str, list[str]] = {}
    artifact_owners: dict[str, list[str]] = {}
    artifacts: list[str] = []
    file_modules: dict[str, str] = {}

    for file_path in changed_files:
        if file_path.endswith(suffixes):
            identity = namer.module_for_source(file_path)
            if identity is None:
                continue
            source_files.setdefault(identity, []).append(file_path)
            file_modules[file_path] = identity
        elif include_artifacts:
            identity = namer(posixpath.dirname(file_path))
            if identity is None or not nested(identity, root):
                continue
            artifacts.append(file_path)
            # Only an exact graph key owns an artifact
            if identity in graph:
                artifact_owners.setdefault(identity, []).append(file_path)
                file_modules[file_path] = identity

    relevant = {identity for identity in reachable if identity in source_files}
    relevant |= set(artifact_owners)

    module_files = {
        identity: [*source_files.get(identity, []), *artifact_owners.get(identity, [])]
        for identity in relevant
    }

    files = set(artifacts)
    for identity in relevant:
        files.update(source_files.get(identity, []))

    logger.debug(
        "%d changed files: %d relevant modules, %d artifacts",
        len(changed_files), len(relevant), len(artifacts),
    )

    return ChangeSet(
        relevant_modules=relevant,
        relevant_files=sorted(files),
        artifact_files=sorted(set(artifacts)),
        module_files=module_files,
        file_modules=file_modules,
    )
