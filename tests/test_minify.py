"""Tests for folio.pipeline.minify."""

from __future__ import annotations

import sys

import pytest

from folio._errors import ConfigError
from folio.pipeline.minify import minify_full, minify_simple


class TestMinifySimple:
    """minify_simple — whitespace normalization for HTML and XML."""

    def test_indentation_removed(self) -> None:
        html = "<div>\n    <p>Hi</p>\n\n\n    <p>There</p>\n</div>\n"
        assert minify_simple(html) == "<div>\n<p>Hi</p>\n<p>There</p>\n</div>"

    def test_trailing_spaces(self) -> None:
        assert minify_simple("a   \nb") == "a\nb"

    def test_odd_spaces_normalized(self) -> None:
        assert minify_simple("a\u00a0b\u2003c") == "a b c"

    def test_none_safe(self) -> None:
        assert minify_simple("") == ""

    def test_html_comments_kept(self) -> None:
        assert "<!-- keep -->" in minify_simple("<p>x</p><!-- keep -->")

    def test_xml_comments_stripped(self) -> None:
        xml = '<?xml version="1.0"?>\n<!-- generated -->\n<feed>\n  <entry/>\n</feed>'
        assert minify_simple(xml, xml=True) == '<?xml version="1.0"?>\n<feed>\n<entry/>\n</feed>'

    def test_text_content_untouched(self) -> None:
        assert minify_simple("<p>one two</p>") == "<p>one two</p>"


class TestMinifyFull:
    """minify_full — the optional htmlmin pass."""

    def test_htmlmin(self) -> None:
        pytest.importorskip("htmlmin")
        html = "<div>\n  <!-- note -->\n  <p>Hi</p>\n</div>"
        result = minify_full(html, {"remove_comments": True, "remove_empty_space": True})
        assert "note" not in result
        assert "<p>Hi</p>" in result

    def test_missing_htmlmin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setitem(sys.modules, "htmlmin", None)
        with pytest.raises(ConfigError, match="htmlmin"):
            minify_full("<p>x</p>", {})
