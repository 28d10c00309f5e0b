"""Revision-control collaborators."""

from blastradius.vcs.git import Git, Revision

__all__ = ["Git", "Revision"]
