"""Module graph construction and queries."""

from blastradius.graph.builder import GraphBuilder, vendor_paths
from blastradius.graph.models import NATIVE_IMPORT, Module, ModuleDescriptor, ModuleGraph
from blastradius.graph.query import GraphQuery, shortest_path

__all__ = [
    "NATIVE_IMPORT",
    "GraphBuilder",
    "GraphQuery",
    "Module",
    "ModuleDescriptor",
    "ModuleGraph",
    "shortest_path",
    "vendor_paths",
]
