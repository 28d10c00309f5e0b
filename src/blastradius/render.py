"""Renderers for impact summaries.

  - Markdown: GitHub-flavored report with module chains and a file tree
  - HTML: standalone page, one section each for commits, modules and files
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from jinja2 import Environment

from blastradius.impact.summary import ModuleSummary, Summary


def render_markdown(summary: Summary) -> str:
    """Render a summary as a GitHub markdown report."""
    sections: list[str] = []

    sections.append(f"## Blast radius of `{summary.root}` since `{summary.revision[:12]}`")
    sections.append("")

    if not summary.modules and not summary.files:
        sections.append("> Nothing reachable from this module has changed.")
        return "\n".join(sections)

    sections.append("| Modules | Files | Commits |")
    sections.append("|:---:|:---:|:---:|")
    sections.append(
        f"| {len(summary.modules)} | {len(summary.files)} | {len(summary.revisions)} |"
    )
    sections.append("")

    if summary.revisions:
        sections.append("### Commits")
        sections.append("")
        for rev in summary.revisions:
            modules = ", ".join(f"`{m.identity}`" for m in rev.modules) or "*artifacts only*"
            sections.append(f"- `{rev.sha[:12]}` {rev.description} ({modules})")
        sections.append("")

    if summary.modules:
        sections.append("### Modules")
        sections.append("")
        for module in summary.modules:
            sections.append(f"- `{module.identity}`")
            if module.path_from_root:
                sections.append(f"  - {_chain(module)}")
        sections.append("")

    if summary.files:
        sections.append("### Files")
        sections.append("")
        sections.append("```")
        sections.extend(_render_file_tree(summary.files))
        sections.append("```")
        sections.append("")

    return "\n".join(sections)


def _chain(module: ModuleSummary) -> str:
    return " > ".join(module.path_from_root or [module.identity])


def _render_file_tree(files: list[str]) -> list[str]:
    """Render a list of file paths as an ASCII tree."""
    if not files:
        return []

    tree: dict = {}
    for fp in sorted(files):
        node = tree
        for part in fp.split("/"):
            node = node.setdefault(part, {})

    lines: list[str] = []
    _render_tree_recursive(tree, "", lines, is_root=True)
    return lines


def _render_tree_recursive(
    node: dict, prefix: str, lines: list[str], is_root: bool = False
) -> None:
    items = list(node.items())
    for i, (name, children) in enumerate(items):
        is_last_item = i == len(items) - 1
        if is_root:
            connector = ""
            next_prefix = ""
        else:
            connector = "└── " if is_last_item else "├── "
            next_prefix = prefix + ("    " if is_last_item else "│   ")

        if children:
            lines.append(f"{prefix}{connector}{name}/")
            _render_tree_recursive(children, next_prefix, lines)
        else:
            lines.append(f"{prefix}{connector}{name}")


HTML_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
    <head>
        <meta charset="utf-8">
        <title>Blast radius: {{ summary.root }}</title>
        <style>
            body { font-family: monospace; }
            .section { padding-left: 10px; }
            .path { padding-left: 1.5em; text-indent: -1.5em; }
        </style>
    </head>
    <body>
        <h1>Commits</h1>
        <div class="section">
        {% for rev in summary.revisions %}
            <h3>{{ rev.sha }}</h3>
            <div class="section">
                <p><b>{{ rev.description }}</b></p>
                {% for module in rev.modules %}
                <div class="path">{% for part in module.path_from_root or [module.identity] %} &gt; {{ part }}{% endfor %}</div>
                {% endfor %}
            </div>
        {% endfor %}
        </div>

        <h1>Modules</h1>
        <div class="section">
        {% for module in summary.modules %}
            <p><b>{{ module.identity }}</b></p>
            {% if module.path_from_root %}
            <div class="path">{% for part in module.path_from_root %} &gt; {{ part }}{% endfor %}</div>
            {% endif %}
        {% endfor %}
        </div>

        <h1>Files</h1>
        <div class="section">
            <ul>
            {% for file in summary.files %}
                <li>{{ file }}</li>
            {% endfor %}
            </ul>
        </div>
    </body>
</html>
"""

_env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)


def render_html(summary: Summary) -> str:
    """Render a summary as a standalone HTML page."""
    return _env.from_string(HTML_TEMPLATE).render(summary=summary)


def write_html(summary: Summary, directory: str | Path | None = None) -> Path:
    """Write the HTML report to a new file and return its path."""
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        prefix=f"{summary.revision[:12].replace('/', '-')}-",
        suffix=".html",
        dir=directory,
        delete=False,
    ) as f:
        f.write(render_html(summary))
    return Path(f.name)
