"""Change-impact analysis: correlate changes with the module graph.

Usage:
    from blastradius.impact import Differ

    differ = Differ(config)
    summary = differ.compute_impact("myapp/api", "abc123")
"""

from blastradius.impact.correlator import ChangeSet, ModuleNamer, correlate, nested
from blastradius.impact.differ import Differ
from blastradius.impact.summary import ModuleSummary, RevisionSummary, Summary, assemble

__all__ = [
    "ChangeSet",
    "Differ",
    "ModuleNamer",
    "ModuleSummary",
    "RevisionSummary",
    "Summary",
    "assemble",
    "correlate",
    "nested",
]
