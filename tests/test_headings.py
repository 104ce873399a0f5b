"""Tests for folio.content.headings — anchors and the contents list."""

from __future__ import annotations

from folio.config import HeadingConfig
from folio.content.headings import add_heading_anchors, heading_id

OPTIONS = HeadingConfig()


class TestHeadingId:
    """heading_id — anchor ids from heading HTML."""

    def test_simple(self) -> None:
        assert heading_id("Getting Started") == "getting-started"

    def test_tags_and_punctuation_removed(self) -> None:
        assert heading_id("<em>What's</em> new?") == "whats-new"

    def test_entities_decoded(self) -> None:
        assert heading_id("Fish &amp; Chips") == "fish-chips"

    def test_numeric_start_prefixed(self) -> None:
        assert heading_id("2024 plans") == "a-2024-plans"

    def test_empty_prefixed(self) -> None:
        assert heading_id("!!!") == "a-"


class TestAnchors:
    """add_heading_anchors — ids, self-links and marker classes."""

    def test_anchor_added(self) -> None:
        result = add_heading_anchors("<h2>Intro</h2>", OPTIONS)
        assert result.content == (
            '<h2 id="intro" tabindex="-1">Intro <a href="#intro" class="headlink">#</a></h2>'
        )

    def test_h1_skipped_by_default(self) -> None:
        result = add_heading_anchors("<h1>Title</h1><h2>Intro</h2>", OPTIONS)
        assert result.content.startswith("<h1>Title</h1>")
        assert 'href="#title"' not in result.nav_heading

    def test_min_level_one(self) -> None:
        result = add_heading_anchors("<h1>Title</h1>", HeadingConfig(min_level=1))
        assert 'id="title"' in result.content

    def test_duplicate_ids_numbered(self) -> None:
        result = add_heading_anchors("<h2>Intro</h2><h2>Intro</h2><h2>Intro</h2>", OPTIONS)
        assert 'id="intro"' in result.content
        assert 'id="intro-2"' in result.content
        assert 'id="intro-3"' in result.content

    def test_existing_id_reused_and_reserved(self) -> None:
        result = add_heading_anchors('<h2>Setup</h2><h2 id="setup">Later</h2>', OPTIONS)
        assert 'id="setup-2" tabindex="-1">Setup' in result.content
        assert '<a href="#setup">Later</a>' in result.nav_heading

    def test_nolink(self) -> None:
        result = add_heading_anchors('<h2 class="nolink">Quiet</h2>', OPTIONS)
        assert 'id="quiet"' in result.content
        assert "headlink" not in result.content
        assert '<a href="#quiet">Quiet</a>' in result.nav_heading

    def test_nomenu(self) -> None:
        result = add_heading_anchors('<h2 class="nomenu">Hidden</h2>', OPTIONS)
        assert 'id="hidden"' in result.content
        assert result.nav_heading == ""

    def test_noid_implied(self) -> None:
        html = '<h2 class="nolink nomenu">Plain</h2>'
        result = add_heading_anchors(html, OPTIONS)
        assert result.content == html

    def test_custom_link(self) -> None:
        options = HeadingConfig(link_content="¶", link_class="anchor")
        result = add_heading_anchors("<h2>A</h2>", options)
        assert '<a href="#a" class="anchor">¶</a>' in result.content

    def test_disabled(self) -> None:
        result = add_heading_anchors("<h2>A</h2>", HeadingConfig(enabled=False))
        assert result.content == "<h2>A</h2>"
        assert result.nav_heading == ""


class TestContentsList:
    """The nested <ol> contents list."""

    def test_flat(self) -> None:
        result = add_heading_anchors("<h2>A</h2><h2>B</h2>", OPTIONS)
        assert result.nav_heading == (
            '<nav class="contents"><ol>'
            '<li><a href="#a">A</a></li>'
            '<li><a href="#b">B</a></li>'
            "</ol></nav>"
        )

    def test_nested(self) -> None:
        result = add_heading_anchors("<h2>A</h2><h3>B</h3><h2>C</h2>", OPTIONS)
        assert result.nav_heading == (
            '<nav class="contents"><ol>'
            '<li><a href="#a">A</a><ol><li><a href="#b">B</a></li></ol></li>'
            '<li><a href="#c">C</a></li>'
            "</ol></nav>"
        )

    def test_level_skip(self) -> None:
        result = add_heading_anchors("<h2>A</h2><h4>B</h4>", OPTIONS)
        assert result.nav_heading == (
            '<nav class="contents"><ol>'
            '<li><a href="#a">A</a><ol><li><ol><li><a href="#b">B</a></li></ol></li></ol></li>'
            "</ol></nav>"
        )

    def test_hidden_entries_pruned(self) -> None:
        html = '<h2>A</h2><h3 class="nomenu">B</h3><h2>C</h2>'
        result = add_heading_anchors(html, OPTIONS)
        assert "<li></li>" not in result.nav_heading
        assert "<ol></ol>" not in result.nav_heading
        assert '<a href="#c">C</a>' in result.nav_heading

    def test_no_headings(self) -> None:
        assert add_heading_anchors("<p>text</p>", OPTIONS).nav_heading == ""
