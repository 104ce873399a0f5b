"""Expression template renderer.

Immediate expressions (``${…}``) are evaluated at build time by the sandboxed
evaluator against a context exposing the current record (``data``), the site
aggregate (``tacs``), ``include(path)`` and the helper registry. Deferred
expressions (``!{…}``) pass through untouched and are rewritten to immediate
syntax in the final output, so a later request-time render can bind them.

Rendering repeats while a pass changes the text length and immediate
expressions remain. All passes of one render (including those performed by
``include``) share a budget of :data:`MAX_ITERATIONS`; exhausting it yields an
empty result and a warning instead of failing the build.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from types import GeneratorType
from typing import TYPE_CHECKING, Any

from folio._errors import FolioError, TemplateError
from folio.template.evaluator import ExpressionError, evaluate
from folio.template.helpers import HELPERS
from folio.template.scanner import DEFERRED, IMMEDIATE, find_expression, scan

if TYPE_CHECKING:
    from folio.observability.collector import StackCollector

MAX_ITERATIONS = 50

_COLLECTIONS = (list, tuple, set, frozenset, GeneratorType, Iterator)


class _IterationLimit(Exception):
    """Internal: the render budget was exhausted."""


class _Budget:
    __slots__ = ("remaining",)

    def __init__(self, passes: int) -> None:
        self.remaining = passes

    def spend(self) -> None:
        self.remaining -= 1
        if self.remaining < 0:
            raise _IterationLimit


class TemplateMap:
    """Template name -> raw template text.

    Templates are added and removed explicitly by the build, and files that
    are only reached through ``include`` are read from ``root`` on first use
    and cached.

    Args:
        root: Template directory used to resolve includes not yet cached.

    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root
        self._templates: dict[str, str] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def __len__(self) -> int:
        return len(self._templates)

    def names(self) -> list[str]:
        """Sorted names of cached templates."""
        return sorted(self._templates)

    def get(self, name: str) -> str | None:
        """Return cached template text or *None*."""
        return self._templates.get(_normalize_name(name))

    def set(self, name: str, text: str | None) -> None:
        """Add or replace a template; ``None`` removes it."""
        key = _normalize_name(name)
        if text is None:
            self._templates.pop(key, None)
        else:
            self._templates[key] = text

    def load(self, name: str) -> str:
        """Return template text, reading it from ``root`` if not cached.

        Raises:
            TemplateError: If the template does not exist or resolves
                outside ``root``.

        """
        key = _normalize_name(name)
        cached = self._templates.get(key)
        if cached is not None:
            return cached
        if self.root is None:
            msg = f"template {name!r} not found"
            raise TemplateError(msg)

        root = self.root.resolve()
        path = (root / key).resolve()
        if not path.is_relative_to(root):
            msg = f"template {name!r} resolves outside {root}"
            raise TemplateError(msg)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"template {name!r} could not be read: {exc}"
            raise TemplateError(msg) from exc
        self._templates[key] = text
        return text


def _normalize_name(name: str) -> str:
    return name.replace("\\", "/").lstrip("/")


def to_text(value: Any) -> str:
    """Convert an expression result to its substituted text.

    ``None`` becomes empty, collections concatenate their elements in
    iteration order without a separator (mappings use their values), and
    everything else uses ``str()``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return "".join(to_text(v) for v in value.values())
    if isinstance(value, _COLLECTIONS):
        return "".join(to_text(v) for v in value)
    return str(value)


def rewrite_deferred(text: str) -> str:
    """Rewrite every complete ``!{…}`` span to ``${…}``."""
    parts: list[str] = []
    last = 0
    pos = 0
    while True:
        span = find_expression(text, pos, (DEFERRED,))
        if span is None:
            break
        begin, end = span
        parts.append(text[last:begin])
        parts.append(IMMEDIATE + text[begin + 1:end])
        last = pos = end
    parts.append(text[last:])
    return "".join(parts)


class TemplateRenderer:
    """Renders templates and record bodies.

    Args:
        templates: Template map used for ``include`` lookups.
        helpers: Extra helpers merged over the default registry.
        collector: Optional event collector for render warnings.

    """

    def __init__(
        self,
        templates: TemplateMap,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
        collector: StackCollector | None = None,
    ) -> None:
        self._templates = templates
        self._helpers = {**HELPERS, **(helpers or {})}
        self._collector = collector

    @property
    def templates(self) -> TemplateMap:
        """The template map used for includes."""
        return self._templates

    def render(
        self,
        template: str | None,
        data: Any = None,
        tacs: Any = None,
        *,
        filename: str | None = None,
        final: bool = True,
    ) -> str:
        """Render ``template`` against ``data`` and the site aggregate.

        Args:
            template: Template text (``None`` renders as empty).
            data: The current record, exposed as ``data``.
            tacs: The site aggregate, exposed as ``tacs``.
            filename: Name reported in errors and warnings.
            final: Rewrite deferred ``!{…}`` markers to ``${…}``.

        Raises:
            TemplateError: If an expression is malformed or fails.

        """
        if not template:
            return ""

        budget = _Budget(MAX_ITERATIONS)
        context: dict[str, Any] = {**self._helpers, "data": data, "tacs": tacs}

        def include(name: str) -> str:
            return self._render_passes(self._templates.load(str(name)), context, budget, name)

        context["include"] = include

        try:
            result = self._render_passes(template, context, budget, filename)
        except _IterationLimit:
            self._warn(
                filename or "<template>",
                f"render exceeded {MAX_ITERATIONS} iterations (recursive include?)",
            )
            return ""

        return rewrite_deferred(result) if final else result

    def _render_passes(
        self,
        text: str,
        context: dict[str, Any],
        budget: _Budget,
        filename: str | None,
    ) -> str:
        while True:
            budget.spend()
            result = self._substitute(text, context, filename)
            if len(result) == len(text) or find_expression(result, 0, (IMMEDIATE,)) is None:
                return result
            text = result

    def _substitute(self, text: str, context: dict[str, Any], filename: str | None) -> str:
        scanned = scan(text)
        if not scanned.expressions:
            return text

        parts: list[str] = []
        for i, expression in enumerate(scanned.expressions):
            parts.append(scanned.segments[i])
            if expression[0] == DEFERRED:
                parts.append(expression)
                continue
            try:
                value = evaluate(expression[2:-1], context)
            except ExpressionError as exc:
                raise TemplateError(str(exc), filename=filename) from exc
            parts.append(to_text(value))
        parts.append(scanned.segments[-1])
        return "".join(parts)

    def _warn(self, filename: str, message: str) -> None:
        print(f"  Render warning: {filename}: {message}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_warning(filename, message)


def render_file(path: str | Path, data: Any = None) -> str:
    """Render a template file at request time.

    Includes resolve relative to the file's directory. Deferred expressions
    compiled into the file (now ``${…}``) are evaluated against ``data``.
    """
    path = Path(path)
    renderer = TemplateRenderer(TemplateMap(path.parent))
    return renderer.render(path.read_text(encoding="utf-8"), data, filename=str(path))


def template_engine(
    file_path: str | Path,
    data: Any,
    callback: Callable[[BaseException | None, str | None], Any],
) -> Any:
    """View-engine adapter: render ``file_path`` and report through ``callback``.

    ``callback(error, html)`` receives either the error or the rendered HTML,
    following the ``(filePath, options, callback)`` convention of web
    framework view engines.
    """
    try:
        html = render_file(file_path, data)
    except (OSError, FolioError) as exc:
        return callback(exc, None)
    return callback(None, html)
