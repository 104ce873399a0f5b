"""Tests for folio.content.record — building records from source files."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from folio._errors import PathTraversalError
from folio.config import FolioConfig, PageListConfig
from folio.content.markdown import MarkdownConverter
from folio.content.record import ContentRecord, RecordBuilder, parse_date, word_count
from folio.observability import EventLog, StackCollector


@pytest.fixture
def builder(tmp_path: Path, converter: MarkdownConverter) -> RecordBuilder:
    return RecordBuilder(FolioConfig(root=tmp_path, dev_mode=False), converter)


class TestDerivedFields:
    """Slug, link, directory and type flags."""

    def test_markdown_page(self, builder: RecordBuilder) -> None:
        record = builder.build("post/article.md", "---\ntitle: Hi\n---\nBody")
        assert record.slug == "post/article/index.html"
        assert record.link == "/post/article/"
        assert record.directory == "post"
        assert record.title == "Hi"
        assert record.is_html and record.is_md
        assert record.filetype == "html"
        assert record.content == "<p>Body</p>"

    def test_plain_text(self, builder: RecordBuilder) -> None:
        record = builder.build("robots.txt", "User-agent: *")
        assert record.slug == "robots.txt"
        assert record.is_text
        assert not record.is_html
        assert record.template is None
        assert record.index is False
        assert record.content == "User-agent: *"

    def test_xml(self, builder: RecordBuilder) -> None:
        record = builder.build("feed.xml", "<rss/>")
        assert record.is_xml
        assert record.directory == ""

    def test_explicit_slug(self, builder: RecordBuilder) -> None:
        record = builder.build("x.md", "---\nslug: /custom/path/\n---\n")
        assert record.slug == "custom/path/index.html"
        assert record.link == "/custom/path/"

    def test_explicit_slug_traversal(self, builder: RecordBuilder) -> None:
        with pytest.raises(PathTraversalError):
            builder.build("x.md", "---\nslug: ../../etc/x\n---\n")

    def test_filename_traversal(self, builder: RecordBuilder) -> None:
        with pytest.raises(PathTraversalError):
            builder.build("../x.md", "text")


class TestFrontMatterValues:
    """Front-matter driven fields and extras."""

    def test_default_template_for_html(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "x").template == "default.html"

    def test_template_override(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "---\ntemplate: post.html\n---\n").template == "post.html"

    def test_non_html_template_from_front_matter(self, builder: RecordBuilder) -> None:
        record = builder.build("feed.xml", "---\ntemplate: rss.xml\n---\n")
        assert record.template == "rss.xml"

    def test_dashes_become_underscores(self, builder: RecordBuilder) -> None:
        record = builder.build("a.md", "---\nhero-image: /a.png\n---\n")
        assert record.hero_image == "/a.png"

    def test_unknown_key_is_none(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "x").anything is None

    def test_private_names_raise(self, builder: RecordBuilder) -> None:
        record = builder.build("a.md", "x")
        with pytest.raises(AttributeError):
            record._secret  # noqa: B018

    def test_priority(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "---\npriority: 0.8\n---\n").priority == 0.8
        assert builder.build("b.md", "---\npriority: high\n---\n").priority == 0.1

    def test_index_default_and_false(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "x").index == "monthly"
        assert builder.build("b.md", "---\nindex: false\n---\n").index is False

    def test_menu(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "---\nmenu: false\n---\n").menu is False
        assert builder.build("b.md", "---\nmenu: Short\n---\n").menu == "Short"

    def test_render_priority(self, builder: RecordBuilder) -> None:
        body = "${ [p.content_rendered for p in tacs.dir.post] }"
        assert builder.build("feed.xml", body).render_priority == 1
        assert builder.build("a.md", "x").render_priority == 0

    def test_word_count(self, builder: RecordBuilder) -> None:
        record = builder.build("a.html", "<p>one two</p><p>three</p>")
        assert record.word_count == 3

    def test_no_word_count_when_not_indexed(self, builder: RecordBuilder) -> None:
        record = builder.build("a.html", "---\nindex: false\n---\n<p>one two</p>")
        assert record.word_count == 0


class TestPublishing:
    """Publish gating and development mode."""

    def test_published_by_default(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "x").publish is True

    @pytest.mark.parametrize("value", ["draft", "false", "Draft"])
    def test_unpublished_values(self, builder: RecordBuilder, value: str) -> None:
        assert builder.build("a.md", f"---\npublish: {value}\n---\n").publish is False

    def test_future_date_unpublished(self, builder: RecordBuilder) -> None:
        future = (datetime.now() + timedelta(days=30)).date().isoformat()
        assert builder.build("a.md", f"---\npublish: {future}\n---\n").publish is False

    def test_past_date_published(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "---\npublish: 2000-01-01\n---\n").publish is True

    def test_dev_mode_publishes_drafts(self, tmp_path: Path, converter: MarkdownConverter) -> None:
        builder = RecordBuilder(FolioConfig(root=tmp_path, dev_mode=True), converter)
        assert builder.build("a.md", "---\npublish: draft\n---\n").publish is True


class TestDates:
    """parse_date and invalid date handling."""

    def test_iso_date(self) -> None:
        assert parse_date("2024-03-01") == datetime(2024, 3, 1)

    def test_aware_becomes_naive(self) -> None:
        parsed = parse_date("2024-03-01T12:00:00+00:00")
        assert parsed is not None
        assert parsed.tzinfo is None

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_date("yesterday")

    def test_invalid_date_warns(self, tmp_path: Path, converter: MarkdownConverter) -> None:
        log = EventLog()
        builder = RecordBuilder(FolioConfig(root=tmp_path), converter, StackCollector(log))

        record = builder.build("a.md", "---\ndate: someday\n---\n")

        assert record.date is None
        assert log.warnings()[0].path == "a.md"


class TestTags:
    """Tag parsing, normalization and listing links."""

    def test_tags_normalized_and_deduplicated(self, builder: RecordBuilder) -> None:
        record = builder.build("a.md", "---\ntags: Machine  Learning, python, machine learning\n---\n")
        assert [t.tag for t in record.tags] == ["Machine Learning", "python"]
        assert [t.ref for t in record.tags] == ["machine-learning", "python"]

    def test_tag_links(self, builder: RecordBuilder) -> None:
        tag = builder.build("a.md", "---\ntags: News\n---\n").tags[0]
        assert tag.slug == "tag/news/index.html"
        assert tag.link == "/tag/news/"

    def test_no_links_without_tag_pages(self, tmp_path: Path, converter: MarkdownConverter) -> None:
        config = FolioConfig(root=tmp_path, tag_pages=PageListConfig(enabled=False))
        tag = RecordBuilder(config, converter).build("a.md", "---\ntags: News\n---\n").tags[0]
        assert tag.link is None
        assert tag.slug is None

    def test_empty_tags(self, builder: RecordBuilder) -> None:
        assert builder.build("a.md", "---\ntags:\n---\n").tags == ()


class TestHelpers:
    """word_count and ContentRecord defaults."""

    def test_word_count_strips_tags(self) -> None:
        assert word_count("<p class='x'>Hello <b>big</b> world</p>") == 3

    def test_record_identity_equality(self) -> None:
        a = ContentRecord(filename="a", slug="a", link="/a", directory="")
        b = ContentRecord(filename="a", slug="a", link="/a", directory="")
        assert a != b
        assert len({a, b}) == 2
