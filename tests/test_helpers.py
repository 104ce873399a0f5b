"""Tests for folio.template.helpers — the expression helper registry."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from folio.site.nav import NavNode
from folio.template.helpers import HELPERS, date_format, escape, menu


class TestEscape:

    def test_markup_escaped(self) -> None:
        assert escape('<a href="x">&</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;&lt;/a&gt;"

    def test_none_is_empty(self) -> None:
        assert escape(None) == ""

    def test_non_string(self) -> None:
        assert escape(3) == "3"


class TestDateFormat:

    def test_default_format(self) -> None:
        assert date_format(date(2024, 3, 9)) == "2024-03-09"

    def test_custom_format(self) -> None:
        assert date_format(datetime(2024, 3, 9, 14, 5), "%d %b %Y %H:%M") == "09 Mar 2024 14:05"

    def test_none_is_empty(self) -> None:
        assert date_format(None) == ""


class TestMenu:
    """menu — nested list markup for navigation trees."""

    @pytest.fixture
    def tree(self) -> tuple[NavNode, ...]:
        return (
            NavNode(segment="about", title="About", link="/about/"),
            NavNode(
                segment="post",
                title="Blog",
                link="/post/",
                children=(NavNode(segment="a", title="A & B", link="/post/a/"),),
            ),
        )

    def test_empty(self) -> None:
        assert menu(None) == ""
        assert menu(()) == ""

    def test_nested_markup(self, tree: tuple[NavNode, ...]) -> None:
        html = menu(tree)
        assert html.startswith('<ul class="menu"><li><a href="/about/">About</a></li>')
        assert '<ul><li><a href="/post/a/">A &amp; B</a></li></ul>' in html

    def test_active_and_open(self, tree: tuple[NavNode, ...]) -> None:
        html = menu(tree, current="/post/a/")
        assert '<li class="open"><a href="/post/">' in html
        assert '<li class="active"><a href="/post/a/">' in html
        assert '<li><a href="/about/">' in html

    def test_custom_class(self, tree: tuple[NavNode, ...]) -> None:
        assert menu(tree, css_class="site-nav").startswith('<ul class="site-nav">')


class TestRegistry:

    def test_read_only(self) -> None:
        with pytest.raises(TypeError):
            HELPERS["open"] = open  # type: ignore[index]

    def test_no_dangerous_builtins(self) -> None:
        for name in ("open", "eval", "exec", "__import__", "getattr", "compile"):
            assert name not in HELPERS

    def test_reversed_returns_list(self) -> None:
        assert HELPERS["reversed"]((1, 2, 3)) == [3, 2, 1]
