"""Git client: the revision-control side of impact analysis.

All ranges are git's two-dot form, ``from..to``: changes after ``from`` up to
and including ``to``.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from blastradius.exceptions import GitError

logger = logging.getLogger("blastradius.git")


@dataclass
class Revision:
    """A single commit."""
    sha: str
    description: str
    files: list[str] = field(default_factory=list)


def run_command(args: list[str], cwd: Path | None = None, timeout: int = 60) -> str:
    """Run a command and return its stdout.

    If the command fails to run, stderr becomes part of the raised error.
    """
    try:
        result = subprocess.run(
            args,
            cwd=cwd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise GitError(args, f"executable not found: {e.filename}") from e
    except subprocess.TimeoutExpired as e:
        raise GitError(args, f"timed out after {timeout}s") from e

    if result.returncode != 0:
        raise GitError(args, result.stderr)
    return result.stdout


class Git:
    """A local git repository."""

    def __init__(self, root_dir: str | Path, executable: str = "git", timeout: int = 60) -> None:
        self.root_dir = Path(root_dir)
        self.executable = executable
        self.timeout = timeout

    @classmethod
    def in_directory(
        cls, directory: str | Path, executable: str = "git", timeout: int = 60
    ) -> Git:
        """Create a Git for the repository containing ``directory``."""
        out = run_command(
            [executable, "-C", str(directory), "rev-parse", "--show-toplevel"],
            timeout=timeout,
        )
        root = Path(out.strip()).resolve()
        logger.debug("Using git root: %s", root)
        return cls(root, executable=executable, timeout=timeout)

    def diff_files(self, from_rev: str, to_rev: str = "HEAD") -> list[str]:
        """Files changed after ``from_rev`` through ``to_rev``, repo-relative."""
        out = self._run("diff", "--name-only", f"{from_rev}..{to_rev}")
        return [line for line in out.splitlines() if line]

    def commits(self, from_rev: str, to_rev: str = "HEAD") -> list[Revision]:
        """Commits after ``from_rev`` through ``to_rev``, newest first, no merges."""
        out = self._run(
            "log", "--pretty=format:%H;%s", "--no-merges", f"{from_rev}..{to_rev}"
        )
        revisions = []
        for line in out.splitlines():
            if not line:
                continue
            sha, _, description = line.partition(";")
            revisions.append(Revision(sha=sha, description=description))
        return revisions

    def commit_files(self, sha: str) -> list[str]:
        """Files touched by a single commit, repo-relative."""
        out = self._run("diff-tree", "--no-commit-id", "--name-only", "-r", sha)
        return [line for line in out.splitlines() if line]

    def _run(self, *args: str) -> str:
        return run_command(
            # Non-ASCII paths are printed verbatim instead of quoted
            [self.executable, "-C", str(self.root_dir), "-c", "core.quotePath=false", *args],
            timeout=self.timeout,
        )
