"""Summary models and assembly."""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, Field

from blastradius.exceptions import GraphConsistencyError
from blastradius.graph.models import ModuleGraph
from blastradius.graph.query import shortest_path
from blastradius.impact.correlator import ChangeSet
from blastradius.vcs.git import Revision


class ModuleSummary(BaseModel):
    """A relevant module, optionally with the import chain that reaches it."""

    identity: str
    path_from_root: list[str] | None = None


class RevisionSummary(BaseModel):
    """A relevant commit and the relevant modules it touched."""

    sha: str
    description: str
    modules: list[ModuleSummary] = Field(default_factory=list)


class Summary(BaseModel):
    """Everything that changed under a root module since a revision."""

    root: str
    revision: str
    modules: list[ModuleSummary] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    revisions: list[RevisionSummary] = Field(default_factory=list)

    def to_json(self, indent: int = 2) -> str:
        return self.model_dump_json(indent=indent, exclude_none=True)


def _module_summary(
    graph: ModuleGraph, root: str, identity: str, include_paths: bool
) -> ModuleSummary:
    summary = ModuleSummary(identity=identity)
    if include_paths:
        path = shortest_path(graph, root, identity)
        if not path:
            raise GraphConsistencyError(
                identity, f"Expected path between {root} and {identity}"
            )
        summary.path_from_root = path
    return summary


def assemble(
    root: str,
    revision: str,
    graph: ModuleGraph,
    change_set: ChangeSet,
    revisions: Sequence[Revision] = (),
    include_paths: bool = False,
) -> Summary:
    """Compose a Summary with deterministic ordering.

    Modules and files are sorted. Revisions keep the order given (newest
    first) and are kept only if they touched a relevant file.
    """
    summaries: dict[str, ModuleSummary] = {}

    def summary_for(identity: str) -> ModuleSummary:
        if identity not in summaries:
            summaries[identity] = _module_summary(graph, root, identity, include_paths)
        return summaries[identity]

    modules = [summary_for(identity) for identity in sorted(change_set.relevant_modules)]

    relevant_files = set(change_set.relevant_files)
    revision_summaries = []
    for rev in revisions:
        if relevant_files.isdisjoint(rev.files):
            continue
        revision_summaries.append(
            RevisionSummary(
                sha=rev.sha,
                description=rev.description,
                modules=[summary_for(m) for m in change_set.modules_for_files(rev.files)],
            )
        )

    return Summary(
        root=root,
        revision=revision,
        modules=modules,
        files=list(change_set.relevant_files),
        revisions=revision_summaries,
    )
