"""Tests for folio.pipeline.hooks."""

from __future__ import annotations

from types import SimpleNamespace

from folio.pipeline.hooks import HookSet


class TestHookSet:
    """Hooks run in registration order."""

    def test_empty(self) -> None:
        hooks = HookSet()
        record = SimpleNamespace(title="x")
        assert hooks.run_content("a.md", record) is record  # type: ignore[arg-type]
        assert hooks.run_template("t.html", "text") == "text"
        assert hooks.run_post_render(record, "<p/>") == "<p/>"  # type: ignore[arg-type]

    def test_content_none_keeps_record(self) -> None:
        seen: list[str] = []
        record = SimpleNamespace(title="x")

        def mutate(filename, rec):
            seen.append(filename)
            rec.title = "y"

        hooks = HookSet(content=[mutate])
        assert hooks.run_content("a.md", record) is record  # type: ignore[arg-type]
        assert record.title == "y"
        assert seen == ["a.md"]

    def test_content_replacement_chained(self) -> None:
        replacement = SimpleNamespace(title="new")
        received: list[object] = []

        hooks = HookSet(content=[
            lambda f, r: replacement,
            lambda f, r: received.append(r),
        ])
        result = hooks.run_content("a.md", SimpleNamespace(title="old"))  # type: ignore[arg-type]

        assert result is replacement
        assert received == [replacement]

    def test_template_chain(self) -> None:
        hooks = HookSet(template=[lambda f, t: t + "1", lambda f, t: t + "2"])
        assert hooks.run_template("t.html", "0") == "012"

    def test_pre_render(self) -> None:
        calls: list[tuple[object, object]] = []
        hooks = HookSet(pre_render=[lambda b, s: calls.append((b, s))])
        hooks.run_pre_render("builder", "site")  # type: ignore[arg-type]
        assert calls == [("builder", "site")]

    def test_post_render_chain(self) -> None:
        hooks = HookSet(post_render=[
            lambda r, h: h.upper(),
            lambda r, h: f"{h}<!-- {r.title} -->",
        ])
        record = SimpleNamespace(title="a")
        assert hooks.run_post_render(record, "<p>x</p>") == "<P>X</P><!-- a -->"  # type: ignore[arg-type]
