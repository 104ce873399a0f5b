"""Shared test fixtures for folio."""

from __future__ import annotations

import html
import re
from pathlib import Path

import pytest

from folio.config import FolioConfig, MarkdownConfig


def fake_markdown(text: str) -> str:
    """Stand-in markdown renderer: one ``<p>`` per blank-line separated block.

    Fenced blocks become ``<pre><code class="language-x">`` and backtick
    spans become ``<code>``, which is all the converter tests rely on.
    """
    blocks: list[str] = []
    for block in text.strip().split("\n\n"):
        fence = re.match(r"```(\w*)\n(.*?)\n```$", block, re.DOTALL)
        if fence:
            lang = f' class="language-{fence.group(1)}"' if fence.group(1) else ""
            blocks.append(f"<pre><code{lang}>{html.escape(fence.group(2))}\n</code></pre>")
            continue
        heading = re.match(r"(#{1,6}) (.*)$", block)
        if heading:
            level = len(heading.group(1))
            blocks.append(f"<h{level}>{heading.group(2)}</h{level}>")
            continue
        inline = re.sub(r"`([^`]*)`", lambda m: f"<code>{html.escape(m.group(1))}</code>", block)
        blocks.append(f"<p>{inline}</p>")
    return "\n".join(blocks)


@pytest.fixture
def markdown_options() -> MarkdownConfig:
    return MarkdownConfig(highlight=False)


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal site structure for testing.

    Returns the path to the site root with content/, templates/ and static/
    directories.
    """
    content = tmp_path / "content"
    content.mkdir()
    (content / "index.md").write_text(
        "---\ntitle: Home\n---\n\n# Welcome\n\nThis is the home page.\n"
    )

    post = content / "post"
    post.mkdir()
    (post / "first.md").write_text(
        "---\ntitle: First Post\ndate: 2024-01-01\ntags: News, Python\n---\n\n"
        "## Intro\n\nHello world.\n"
    )
    (post / "second.md").write_text(
        "---\ntitle: Second Post\ndate: 2024-02-01\ntags: news\n---\n\n"
        "## Intro\n\nMore words.\n"
    )
    (content / "robots.txt").write_text("User-agent: *\n")

    templates = tmp_path / "templates"
    templates.mkdir()
    (templates / "default.html").write_text(
        "<html>\n<head><title>${ data.title }</title></head>\n"
        "<body>\n${ data.content_rendered }\n</body>\n</html>\n"
    )

    static = tmp_path / "static"
    static.mkdir()
    (static / "style.css").write_text("body { margin: 0; }\n")

    return tmp_path


@pytest.fixture
def site_config(tmp_site: Path) -> FolioConfig:
    return FolioConfig(root=tmp_site, dev_mode=False)


@pytest.fixture
def converter(markdown_options: MarkdownConfig):
    """Markdown converter backed by :func:`fake_markdown`."""
    from folio.content.markdown import MarkdownConverter

    return MarkdownConverter(markdown_options, renderer=fake_markdown)
