"""Path and reachability queries over a built module graph."""

from __future__ import annotations

from collections import deque

import networkx as nx

from blastradius.exceptions import GraphConsistencyError
from blastradius.graph.models import NATIVE_IMPORT, ModuleGraph


def shortest_path(graph: ModuleGraph, from_id: str, to_id: str) -> list[str]:
    """Return the shortest import path from one module to another.

    A path of [A, B, C] means "A imports B and B imports C". If there is no
    path, an empty list is returned. If several paths are equally short, which
    one is returned is not specified.

    Raises:
        GraphConsistencyError: either module is not in the graph.
    """
    for identity in (from_id, to_id):
        if identity not in graph:
            raise GraphConsistencyError(identity)

    visited = {from_id}
    queue: deque[list[str]] = deque([[from_id]])
    while queue:
        path = queue.popleft()
        last = path[-1]
        if last == to_id:
            return path
        if last == NATIVE_IMPORT:
            continue
        module = graph.get(last)
        if module is None:
            raise GraphConsistencyError(
                last, f"Unexpected: module '{last}' does not exist in graph (path={path})"
            )

        for dep in module.dependencies():
            if dep not in visited:
                visited.add(dep)
                queue.append([*path, dep])

    return []


class GraphQuery:
    """Query engine for the module graph.

    Provides high-level methods for common questions: why is a module
    reachable, what does it pull in, what depends on it.
    """

    def __init__(self, graph: ModuleGraph) -> None:
        self.graph = graph
        self._nx: nx.DiGraph | None = None

    @property
    def digraph(self) -> nx.DiGraph:
        if self._nx is None:
            self._nx = self.graph.to_networkx()
        return self._nx

    def shortest_path(self, from_id: str, to_id: str) -> list[str]:
        return shortest_path(self.graph, from_id, to_id)

    def dependencies_of(self, identity: str) -> list[str]:
        """Direct dependencies of a module (resolved, native excluded)."""
        if identity not in self.graph:
            raise GraphConsistencyError(identity)
        return [d for d in self.graph[identity].dependencies() if d != NATIVE_IMPORT]

    def dependents_of(self, identity: str) -> list[str]:
        """Modules in the graph that directly import ``identity``."""
        if identity not in self.graph:
            raise GraphConsistencyError(identity)
        return sorted(self.digraph.predecessors(identity))

    def reachable_from(self, identity: str) -> set[str]:
        """All modules transitively imported by ``identity``, itself included."""
        if identity not in self.graph:
            raise GraphConsistencyError(identity)
        seen = {identity}
        frontier = [identity]
        while frontier:
            current = frontier.pop()
            for dep in self.dependencies_of(current):
                if dep not in seen:
                    seen.add(dep)
                    frontier.append(dep)
        return seen
