#!/usr/bin/env python3
"""Demo: Using blastradius as a Python library.

This shows how to use blastradius programmatically, not just as a CLI tool.
Run it from a git checkout whose top-level packages you want to inspect:

    python examples/demo.py mypackage HEAD~10
"""

import sys
from pathlib import Path

from blastradius.config import load_config
from blastradius.graph.query import GraphQuery
from blastradius.impact.differ import Differ
from blastradius.render import render_markdown


def main():
    root_module = sys.argv[1] if len(sys.argv) > 1 else "blastradius"
    since = sys.argv[2] if len(sys.argv) > 2 else "HEAD~1"

    # Point at any source root
    differ = Differ(load_config(Path(".")))

    # 1. Build the module graph
    print(f"Building module graph for {root_module}...")
    graph = differ.build_graph(root_module)

    stats = graph.stats()
    print(f"  Modules: {stats['modules']}")
    print(f"  Import edges: {stats['edges']}")
    print(f"  Import cycles: {stats['cycles']}")

    # 2. Query the graph
    query = GraphQuery(graph)
    print(f"\n--- What does '{graph.root}' import directly? ---")
    for dep in query.dependencies_of(graph.root):
        print(f"  {dep}")

    print("\n--- Why is each module reachable? ---")
    for identity in sorted(graph):
        print(f"  {' > '.join(query.shortest_path(graph.root, identity))}")

    # 3. Impact since a revision
    print(f"\n--- Changes since {since} ---")
    summary = differ.compute_impact(root_module, since, include_paths=True)
    print(render_markdown(summary))


if __name__ == "__main__":
    main()
