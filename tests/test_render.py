"""Tests for the markdown and HTML renderers."""

from __future__ import annotations

from pathlib import Path

import pytest

from blastradius.impact.summary import ModuleSummary, RevisionSummary, Summary
from blastradius.render import render_html, render_markdown, write_html


@pytest.fixture
def summary() -> Summary:
    lib = ModuleSummary(identity="lib", path_from_root=["app", "lib"])
    return Summary(
        root="app",
        revision="0123456789abcdef0123",
        modules=[ModuleSummary(identity="app", path_from_root=["app"]), lib],
        files=["app/core.py", "app/templates/index.html", "lib/util.py"],
        revisions=[
            RevisionSummary(sha="f" * 40, description="Update util", modules=[lib]),
            RevisionSummary(sha="e" * 40, description="Update <template>", modules=[]),
        ],
    )


class TestMarkdown:
    def test_header_and_counts(self, summary):
        md = render_markdown(summary)
        assert md.startswith("## Blast radius of `app` since `0123456789ab`")
        assert "| 2 | 3 | 2 |" in md

    def test_sections(self, summary):
        md = render_markdown(summary)
        assert "### Commits" in md
        assert f"- `{'f' * 12}` Update util (`lib`)" in md
        assert "*artifacts only*" in md
        assert "  - app > lib" in md

    def test_file_tree(self, summary):
        md = render_markdown(summary)
        assert "app/\n├── core.py\n└── templates/\n    └── index.html\nlib/\n└── util.py" in md

    def test_empty(self):
        md = render_markdown(Summary(root="app", revision="abc"))
        assert "Nothing reachable from this module has changed" in md
        assert "### Modules" not in md


class TestHtml:
    def test_render(self, summary):
        html = render_html(summary)
        assert "<title>Blast radius: app</title>" in html
        assert "<li>lib/util.py</li>" in html
        assert " &gt; app &gt; lib" in html

    def test_escapes_descriptions(self, summary):
        html = render_html(summary)
        assert "Update &lt;template&gt;" in html
        assert "<template>" not in html

    def test_write_html(self, summary, tmp_path: Path):
        path = write_html(summary, directory=tmp_path)
        assert path.parent == tmp_path
        assert path.suffix == ".html"
        assert path.read_text(encoding="utf-8") == render_html(summary)

    def test_write_html_branch_name(self, tmp_path: Path):
        path = write_html(Summary(root="app", revision="origin/main"), directory=tmp_path)
        assert path.name.startswith("origin-main-")
