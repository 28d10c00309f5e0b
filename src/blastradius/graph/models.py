"""Data models for modules and the module graph."""

from __future__ import annotations

from collections.abc import Iterator, Mapping

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field

# Import name standing for the standard library, builtins and other foreign
# code. Never resolved, never traversed.
NATIVE_IMPORT = "<native>"


class ModuleDescriptor(BaseModel):
    """What a loader reports for one candidate identity."""

    identity: str
    imports: list[str] = Field(default_factory=list)
    test_imports: list[str] = Field(default_factory=list)
    optional_imports: list[str] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class Module(BaseModel):
    """A resolved module in the graph.

    ``resolved`` maps each import name as written by this module to the
    identity it resolved to. The same name may resolve differently in
    another module.
    """

    model_config = ConfigDict(frozen=True)

    identity: str
    imports: tuple[str, ...] = ()
    test_imports: tuple[str, ...] = ()
    optional_imports: tuple[str, ...] = ()
    resolved: dict[str, str] = Field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(self.identity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Module):
            return NotImplemented
        return self.identity == other.identity

    def all_imports(self) -> list[str]:
        return [*self.imports, *self.test_imports, *self.optional_imports]

    def dependencies(self) -> list[str]:
        """Resolved edge targets, in import order, without duplicates.

        The native sentinel is kept as a raw target. Optional imports that
        did not resolve and imports of the module itself are dropped.
        """
        deps: list[str] = []
        seen: set[str] = set()
        for name in self.all_imports():
            if name == NATIVE_IMPORT:
                target = NATIVE_IMPORT
            elif name in self.resolved:
                target = self.resolved[name]
            else:
                continue
            if target == self.identity or target in seen:
                continue
            seen.add(target)
            deps.append(target)
        return deps


class ModuleGraph(Mapping[str, Module]):
    """All modules reachable from one root, keyed by identity. Read-only."""

    def __init__(self, root: str, modules: Mapping[str, Module]) -> None:
        self.root = root
        self._modules = dict(modules)

    def __getitem__(self, identity: str) -> Module:
        return self._modules[identity]

    def __iter__(self) -> Iterator[str]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __repr__(self) -> str:
        return f"ModuleGraph(root={self.root!r}, modules={len(self)})"

    def to_map(self) -> dict[str, list[str]]:
        """Identity -> sorted resolved dependencies."""
        return {
            identity: sorted(set(module.resolved.values()) - {identity})
            for identity, module in sorted(self._modules.items())
        }

    def to_networkx(self) -> nx.DiGraph:
        """Build a NetworkX view of the graph (native edges excluded)."""
        graph = nx.DiGraph()
        for identity, module in self._modules.items():
            graph.add_node(identity)
            for dep in module.dependencies():
                if dep == NATIVE_IMPORT:
                    continue
                graph.add_edge(identity, dep)
        return graph

    def stats(self) -> dict:
        """Get graph statistics."""
        graph = self.to_networkx()
        cyclic = [c for c in nx.strongly_connected_components(graph) if len(c) > 1]
        native_users = sum(
            1 for m in self._modules.values() if NATIVE_IMPORT in m.dependencies()
        )
        return {
            "root": self.root,
            "modules": graph.number_of_nodes(),
            "edges": graph.number_of_edges(),
            "cycles": len(cyclic),
            "largest_cycle": max((len(c) for c in cyclic), default=0),
            "native_users": native_users,
            "is_dag": nx.is_directed_acyclic_graph(graph),
        }
