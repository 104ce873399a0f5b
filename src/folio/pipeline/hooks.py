"""Build hooks — user callbacks run at fixed points of a build.

Each phase holds an ordered list of callables, run in registration order:

- ``content``: ``(filename, record) -> record | None`` after a record is
  built; returning *None* keeps the record the hook received.
- ``template``: ``(filename, text) -> str`` after a template is read.
- ``pre_render``: ``(builder, aggregate) -> None`` after aggregation,
  before any record renders.
- ``post_render``: ``(record, html) -> str`` after the template pass,
  before minification and writing.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from folio.content.record import ContentRecord
    from folio.site.aggregate import SiteAggregate

type ContentHook = Callable[[str, ContentRecord], ContentRecord | None]
type TemplateHook = Callable[[str, str], str]
type PreRenderHook = Callable[[Any, SiteAggregate], None]
type PostRenderHook = Callable[[ContentRecord, str], str]


@dataclass(slots=True)
class HookSet:
    """Ordered callbacks per build phase."""

    content: list[ContentHook] = field(default_factory=list)
    template: list[TemplateHook] = field(default_factory=list)
    pre_render: list[PreRenderHook] = field(default_factory=list)
    post_render: list[PostRenderHook] = field(default_factory=list)

    def run_content(self, filename: str, record: ContentRecord) -> ContentRecord:
        for hook in self.content:
            result = hook(filename, record)
            if result is not None:
                record = result
        return record

    def run_template(self, filename: str, text: str) -> str:
        for hook in self.template:
            text = hook(filename, text)
        return text

    def run_pre_render(self, builder: Any, site: SiteAggregate) -> None:
        for hook in self.pre_render:
            hook(builder, site)

    def run_post_render(self, record: ContentRecord, html: str) -> str:
        for hook in self.post_render:
            html = hook(record, html)
        return html
