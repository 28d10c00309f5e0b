"""Shared test fixtures for blastradius."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from blastradius.exceptions import ModuleNotFound
from blastradius.graph.models import ModuleDescriptor
from blastradius.loader.base import ModuleLoader
from blastradius.vcs.git import Revision


class FakeLoader(ModuleLoader):
    """Serves modules from a dict of identity -> imports.

    A value is either a list of imports or a dict with ``imports``,
    ``test_imports`` and ``optional_imports`` keys.
    """

    def __init__(self, modules: dict) -> None:
        self.modules = modules
        self.calls: list[str] = []

    def load(self, candidate: str) -> ModuleDescriptor:
        self.calls.append(candidate)
        if candidate not in self.modules:
            raise ModuleNotFound(candidate)
        entry = self.modules[candidate]
        if isinstance(entry, dict):
            return ModuleDescriptor(identity=candidate, **entry)
        return ModuleDescriptor(identity=candidate, imports=list(entry))


class FakeGit:
    """Deterministic stand-in for the git client."""

    def __init__(
        self,
        root_dir: Path,
        changed: list[str],
        revisions: list[tuple[str, str, list[str]]] | None = None,
    ) -> None:
        self.root_dir = root_dir
        self.changed = changed
        self.revisions = revisions or []

    def diff_files(self, from_rev: str, to_rev: str = "HEAD") -> list[str]:
        return list(self.changed)

    def commits(self, from_rev: str, to_rev: str = "HEAD") -> list[Revision]:
        return [Revision(sha=sha, description=desc) for sha, desc, _ in self.revisions]

    def commit_files(self, sha: str) -> list[str]:
        for rev_sha, _, files in self.revisions:
            if rev_sha == sha:
                return list(files)
        return []


@pytest.fixture
def fake_loader_factory():
    return FakeLoader


@pytest.fixture
def fake_git_factory():
    return FakeGit


def write_tree(root: Path, files: dict[str, str]) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


SOURCE_TREE = {
    "app/__init__.py": '''"""Application package."""

import os

import lib
from . import core
''',
    "app/core.py": '''"""Core logic, using the vendored copy of shared."""

from shared import tools


def run():
    return tools
''',
    "app/test_app.py": '''import testsupport
from app import core
''',
    "app/vendor/shared/__init__.py": '''import json

tools = json.dumps
''',
    "app/templates/index.html": "<html></html>\n",
    "shared/__init__.py": '''"""Top-level copy of shared."""

tools = None
''',
    "lib/__init__.py": '''import shared

try:
    import ujson as json_impl
except ImportError:
    import json as json_impl
''',
    "lib/util.py": '''def helper():
    return 1
''',
    "testsupport/__init__.py": "",
    "unused/__init__.py": "import lib\n",
    "README.md": "# demo\n",
}


@pytest.fixture
def tmp_source_tree(tmp_path: Path) -> Path:
    """A flat source root with a vendored dependency and an unused package."""
    return write_tree(tmp_path / "repo", SOURCE_TREE)


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_source_tree: Path):
    """The source tree committed to a git repository.

    Returns (repo_path, base_sha, git) where ``git`` runs git commands in the
    repository and returns stdout.
    """
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def git(*args: str) -> str:
        return _git(tmp_source_tree, *args)

    git("init", "-q")
    git("add", "-A")
    git("commit", "-q", "-m", "Initial commit")
    base = git("rev-parse", "HEAD")
    return tmp_source_tree, base, git
