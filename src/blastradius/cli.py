"""Command-line interface for blastradius."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click

from blastradius import __version__
from blastradius.config import (
    ProjectConfig,
    find_project_root,
    get_config_value,
    load_config,
    save_config,
    set_config_value,
)
from blastradius.exceptions import BlastRadiusError
from blastradius.ui.console import Console, configure_logging

console = Console()


def _get_project_root(path: str | None = None) -> Path:
    """Find the project root: --path, then a .blastradius dir, then cwd."""
    if path:
        root = Path(path).resolve()
        if not root.exists():
            console.error(f"Path does not exist: {path}")
            sys.exit(1)
        return root
    return find_project_root() or Path.cwd().resolve()


def _load_config(path: str | None, foreign: tuple[str, ...] = ()) -> ProjectConfig:
    config = load_config(_get_project_root(path))
    if foreign:
        config.resolver.foreign_modules = [*config.resolver.foreign_modules, *foreign]
    return config


def _identity(module: str) -> str:
    """Accept both dotted and slash-delimited module names."""
    return module.strip("/").replace(".", "/")


def _fail(error: BlastRadiusError) -> None:
    console.error(str(error))
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="blastradius")
@click.option("--verbose", "-v", is_flag=True, help="Log debugging information.")
def main(verbose: bool):
    """blastradius - did anything I depend on change, and why?"""
    configure_logging(verbose)


@main.command()
@click.argument("module")
@click.option("--since", "-s", "revision", required=True,
              help="Revision after which changes are considered (exclusive).")
@click.option("--to", "to_revision", default="HEAD", show_default=True,
              help="Last revision to consider (inclusive).")
@click.option("--artifacts", is_flag=True,
              help="Include changed non-source files under the module's directory.")
@click.option("--paths", "include_paths", is_flag=True,
              help="Show the shortest import chain to each changed module.")
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "modules", "files", "commits", "json", "markdown", "html"]),
    default="text",
    help="Output format.",
)
@click.option("--foreign", multiple=True,
              help="Top-level package to treat as external (repeatable).")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def diff(
    module: str,
    revision: str,
    to_revision: str,
    artifacts: bool,
    include_paths: bool,
    output_format: str,
    foreign: tuple[str, ...],
    path: str | None,
):
    """Show changes since a revision in everything MODULE imports."""
    from blastradius.impact.differ import Differ
    from blastradius.render import render_markdown, write_html

    include_paths = include_paths or output_format in ("json", "html")

    try:
        summary = Differ(_load_config(path, foreign)).compute_impact(
            _identity(module),
            revision,
            include_artifacts=artifacts,
            include_paths=include_paths,
            to_revision=to_revision,
        )
    except BlastRadiusError as e:
        _fail(e)

    if output_format == "modules":
        for m in summary.modules:
            click.echo(m.identity)
    elif output_format == "files":
        for f in summary.files:
            click.echo(f)
    elif output_format == "commits":
        for rev in summary.revisions:
            click.echo(f"{rev.sha} {rev.description}")
    elif output_format == "json":
        click.echo(summary.to_json())
    elif output_format == "markdown":
        click.echo(render_markdown(summary))
    elif output_format == "html":
        click.echo(str(write_html(summary)))
    else:
        console.show_summary(summary)


@main.command()
@click.argument("module")
@click.option("--json", "as_json", is_flag=True, help="Print the map as JSON.")
@click.option("--foreign", multiple=True,
              help="Top-level package to treat as external (repeatable).")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def deps(module: str, as_json: bool, foreign: tuple[str, ...], path: str | None):
    """Print every module reachable from MODULE and what it imports."""
    from blastradius.impact.differ import Differ

    try:
        graph = Differ(_load_config(path, foreign)).build_graph(_identity(module))
    except BlastRadiusError as e:
        _fail(e)

    dep_map = graph.to_map()
    if as_json:
        click.echo(json.dumps(dep_map, indent=2))
        return
    for name, targets in dep_map.items():
        click.echo(name)
        for target in targets:
            click.echo(f"  {target}")


@main.command()
@click.argument("from_module")
@click.argument("to_module")
@click.option("--foreign", multiple=True,
              help="Top-level package to treat as external (repeatable).")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def why(from_module: str, to_module: str, foreign: tuple[str, ...], path: str | None):
    """Show the shortest import chain from FROM_MODULE to TO_MODULE."""
    from blastradius.graph.query import GraphQuery
    from blastradius.impact.differ import Differ

    try:
        graph = Differ(_load_config(path, foreign)).build_graph(_identity(from_module))
        chain = GraphQuery(graph).shortest_path(graph.root, _identity(to_module))
    except BlastRadiusError as e:
        _fail(e)

    if not chain:
        console.warning(f"No import path from '{from_module}' to '{to_module}'")
        return
    console.show_path(chain)


@main.command()
@click.argument("module")
@click.option("--foreign", multiple=True,
              help="Top-level package to treat as external (repeatable).")
@click.option("--path", "-p", default=None, help="Path to the project root.")
def stats(module: str, foreign: tuple[str, ...], path: str | None):
    """Show statistics for the module graph reachable from MODULE."""
    from blastradius.impact.differ import Differ

    try:
        graph = Differ(_load_config(path, foreign)).build_graph(_identity(module))
    except BlastRadiusError as e:
        _fail(e)

    console.show_stats(graph.stats())


# =========================================================================
# Config Management
# =========================================================================

def _parse_value(value: str) -> Any:
    """JSON if it parses (numbers, lists, booleans), else the raw string."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


@main.command("config")
@click.argument("action", type=click.Choice(["set", "get", "show"]))
@click.argument("key", required=False)
@click.argument("value", required=False)
@click.option("--path", "-p", default=None, help="Path to the project root.")
def config_cmd(action: str, key: str | None, value: str | None, path: str | None):
    """Manage blastradius configuration."""
    root = _get_project_root(path)
    if action == "get" and not key:
        console.error("Usage: blastradius config get <key>")
        sys.exit(1)
    if action == "set" and (not key or value is None):
        console.error("Usage: blastradius config set <key> <value>")
        sys.exit(1)

    try:
        config = load_config(root)
        if action == "show":
            console.console.print_json(config.model_dump_json())
        elif action == "get":
            console.console.print(f"{key} = {get_config_value(config, key)}", markup=False)
        else:
            parsed = _parse_value(value)
            save_config(root, set_config_value(config, key, parsed))
            console.success(f"Set {key} = {parsed}")
    except KeyError:
        console.error(f"Unknown config key: {key}")
        sys.exit(1)
    except BlastRadiusError as e:
        _fail(e)


if __name__ == "__main__":
    main()
