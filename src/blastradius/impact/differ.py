"""Impact analysis pipeline.

This is the main entry point for computing a blast radius. It:
1. Locates the git repository and relates it to the module-source root
2. Lists files changed since the boundary revision
3. Builds the module graph reachable from the root module
4. Correlates changed files with the graph
5. Attributes relevant commits to the modules they touched

Usage:
    differ = Differ(load_config(root))
    summary = differ.compute_impact("myapp/api", "abc123", include_paths=True)
    print(summary.to_json())
"""

from __future__ import annotations

import logging
from pathlib import Path

from blastradius.config import ProjectConfig
from blastradius.graph.builder import GraphBuilder
from blastradius.graph.models import ModuleGraph
from blastradius.impact.correlator import ModuleNamer, correlate
from blastradius.impact.summary import Summary, assemble
from blastradius.loader.base import ModuleLoader
from blastradius.loader.python_loader import PythonModuleLoader
from blastradius.vcs.git import Git

logger = logging.getLogger("blastradius.impact")


class Differ:
    """Computes which changes since a revision are reachable from a module."""

    def __init__(
        self,
        config: ProjectConfig,
        loader: ModuleLoader | None = None,
        git: Git | None = None,
    ) -> None:
        self.config = config
        self.loader = loader or PythonModuleLoader(
            config.search_path_list(),
            foreign_modules=config.resolver.foreign_modules,
            source_suffixes=config.resolver.source_suffixes,
            test_patterns=config.resolver.test_patterns,
        )
        self._git = git
        self._gits: dict[Path, Git] = {}

    def git_for(self, root: str) -> Git:
        """Git repository holding ``root``, or the source root as a fallback."""
        if self._git is not None:
            return self._git
        source_root = self.config.source_root_path()
        start = source_root.joinpath(*root.split("/"))
        if not start.is_dir():
            start = source_root
        if start not in self._gits:
            logger.debug("Locating git repository from: %s", start)
            self._gits[start] = Git.in_directory(
                start,
                executable=self.config.git.executable,
                timeout=self.config.git.timeout,
            )
        return self._gits[start]

    def build_graph(self, root: str) -> ModuleGraph:
        builder = GraphBuilder(self.loader, vendor_segment=self.config.resolver.vendor_segment)
        return builder.build(root)

    def compute_impact(
        self,
        root: str,
        revision: str,
        include_artifacts: bool = False,
        include_paths: bool = False,
        to_revision: str = "HEAD",
    ) -> Summary:
        """Run the full impact analysis for ``root`` since ``revision``.

        Raises:
            ConfigError: the git root and source root are unrelated.
            ResolutionError: an import reachable from ``root`` cannot be found.
            GitError: a git command failed.
        """
        git = self.git_for(root)
        namer = ModuleNamer(git.root_dir, self.config.source_root_path())
        logger.debug("Prefixing modules with: %r", namer.prefix)

        changed = git.diff_files(revision, to_revision)
        logger.info("%d files changed since %s", len(changed), revision)

        graph = self.build_graph(root)
        graph_root = graph.root

        change_set = correlate(
            graph,
            changed,
            graph_root,
            namer,
            include_artifacts=include_artifacts,
            source_suffixes=self.config.resolver.source_suffixes,
        )
        logger.info(
            "%d relevant modules, %d relevant files",
            len(change_set.relevant_modules), len(change_set.relevant_files),
        )

        revisions = git.commits(revision, to_revision)
        for rev in revisions:
            rev.files = git.commit_files(rev.sha)
        logger.info("%d commits in range", len(revisions))

        summary = assemble(
            graph_root,
            revision,
            graph,
            change_set,
            revisions,
            include_paths=include_paths,
        )
        summary.root = root
        return summary
