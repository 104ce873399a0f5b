"""Build orchestrator — content and templates in, output files out.

Pipeline of one render:
    1. Aggregate records (groups, sorting, pagination, navigation)
    2. Run pre-render hooks
    3. Check slug uniqueness and containment
    4. Render record bodies, lowest ``render_priority`` first
    5. Add heading anchors to HTML bodies
    6. Render each record's template
    7. Substitute ``<nav-heading>`` placeholders, run post-render hooks
    8. Minify, hash-gate and write
"""

from __future__ import annotations

import asyncio
import sys
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from folio._errors import SlugCollisionError, TemplateError
from folio.content.headings import NAV_HEADING_TAG, add_heading_anchors
from folio.content.record import ContentRecord, RecordBuilder
from folio.content.slug import check_relative
from folio.observability.collector import StackCollector
from folio.observability.profiler import BuildProfiler
from folio.pipeline.hooks import HookSet
from folio.pipeline.minify import minify_full, minify_simple
from folio.pipeline.writer import OutputWriter, WrittenFile, copy_pass_through, resolve_output
from folio.site.aggregate import SiteAggregate, aggregate
from folio.template.renderer import TemplateMap, TemplateRenderer, rewrite_deferred

if TYPE_CHECKING:
    from folio.config import FolioConfig
    from folio.content.markdown import MarkdownConverter


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Result of a render or build.

    Attributes:
        files: Files written (unchanged outputs are not included).
        records_rendered: Number of published records rendered.
        duration_ms: Wall-clock time in milliseconds.
        output_dir: Absolute path to the output directory.

    """

    files: tuple[WrittenFile, ...]
    records_rendered: int
    duration_ms: float
    output_dir: Path

    @property
    def files_written(self) -> int:
        return len(self.files)


class Builder:
    """Holds the source map and template map of a site and renders them.

    Args:
        config: Build configuration.
        hooks: Build hooks (empty by default).
        collector: Event collector (a private one is created if omitted).
        converter: Markdown converter override.
        verbose: Print the metrics summary after each build.

    """

    def __init__(
        self,
        config: FolioConfig,
        *,
        hooks: HookSet | None = None,
        collector: StackCollector | None = None,
        converter: MarkdownConverter | None = None,
        verbose: bool = True,
    ) -> None:
        self.config = config
        self.hooks = hooks if hooks is not None else HookSet()
        self.collector = collector if collector is not None else StackCollector()
        self._records: dict[str, ContentRecord] = {}
        self._templates = TemplateMap(config.templates_path)
        self._renderer = TemplateRenderer(self._templates, collector=self.collector)
        self._record_builder = RecordBuilder(config, converter, self.collector)
        self._writer = OutputWriter(config.output_path, self.collector)
        self._profiler = BuildProfiler(self.collector.log, verbose=verbose)

    @property
    def records(self) -> Mapping[str, ContentRecord]:
        """Source map: content filename -> record."""
        return self._records

    @property
    def templates(self) -> TemplateMap:
        return self._templates

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_content(self, filename: str, text: str | None) -> ContentRecord | None:
        """Build and store the record for ``filename``; ``None`` removes it.

        Raises:
            PathTraversalError: If the filename escapes the content directory.

        """
        name = check_relative(filename)
        if text is None:
            self._records.pop(name, None)
            return None

        t0 = time.perf_counter()
        record = self.hooks.run_content(name, self._record_builder.build(name, text))
        self._records[name] = record
        self.collector.record_record(
            name,
            record.slug,
            publish=record.publish,
            build_ms=(time.perf_counter() - t0) * 1000,
        )
        return record

    def add_template(self, filename: str, text: str | None) -> None:
        """Store the template ``filename``; ``None`` removes it.

        Raises:
            PathTraversalError: If the filename escapes the template directory.

        """
        name = check_relative(filename)
        if text is not None:
            text = self.hooks.run_template(name, text)
        self._templates.set(name, text)

    async def read_content(self, paths: Iterable[Path] | None = None) -> int:
        """Read content files (all of them by default) into the source map.

        Returns the number of files read successfully. Unreadable or
        deleted files are removed from the source map.
        """
        return await self._read(self.config.content_path, paths, self.add_content)

    async def read_templates(self, paths: Iterable[Path] | None = None) -> int:
        """Read template files (all of them by default) into the template map."""
        return await self._read(self.config.templates_path, paths, self.add_template)

    async def _read(
        self,
        base: Path,
        paths: Iterable[Path] | None,
        add: Callable[[str, str | None], object],
    ) -> int:
        files = list(paths) if paths is not None else _list_files(base)
        results = await asyncio.gather(
            *(asyncio.to_thread(path.read_text, encoding="utf-8") for path in files),
            return_exceptions=True,
        )

        read = 0
        for path, result in zip(files, results, strict=True):
            name = path.relative_to(base).as_posix()
            if isinstance(result, BaseException):
                if not isinstance(result, FileNotFoundError):
                    self._warn(name, f"could not be read: {result}")
                add(name, None)
                continue
            add(name, result)
            read += 1
        return read

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> RenderResult:
        """Aggregate, render and write every published record.

        Raises:
            SlugCollisionError: If two records share a slug.
            PathTraversalError: If a slug resolves outside the output.
            TemplateError: If a template is missing or an expression fails.
            ExportError: If an output file cannot be written.

        """
        t0 = time.perf_counter()
        config = self.config
        profiler = self._profiler

        with profiler.stage("render"):
            site = aggregate(self._records.values(), config)
            self.hooks.run_pre_render(self, site)
            self._check_slugs(site.records)

            published = [record for record in site.records if record.publish]
            for record in sorted(published, key=lambda r: r.render_priority):
                self._render_body(record, site)

            outputs = [(record, self._render_page(record, site)) for record in published]

        files: list[WrittenFile] = []
        with profiler.stage("write"):
            for record, html in outputs:
                written = self._writer.write(record.slug, html)
                record.hash = self._writer.hash_for(record.slug)
                if written is not None:
                    files.append(written)

        return RenderResult(
            files=tuple(files),
            records_rendered=len(outputs),
            duration_ms=(time.perf_counter() - t0) * 1000,
            output_dir=config.output_path,
        )

    def _render_body(self, record: ContentRecord, site: SiteAggregate) -> None:
        body = self._renderer.render(
            record.content, record, site,
            filename=record.filename or record.slug,
            final=False,
        )
        if record.is_html:
            anchored = add_heading_anchors(body, self.config.headings)
            record.content_rendered = anchored.content
            record.nav_heading = anchored.nav_heading
        else:
            record.content_rendered = body

    def _render_page(self, record: ContentRecord, site: SiteAggregate) -> str:
        if record.template:
            try:
                template = self._templates.load(record.template)
            except TemplateError as exc:
                msg = f"{record.slug}: {exc}"
                raise TemplateError(msg) from exc
            html = self._renderer.render(template, record, site, filename=record.template)
        else:
            html = rewrite_deferred(record.content_rendered)

        html = html.replace(NAV_HEADING_TAG, record.nav_heading)
        html = self.hooks.run_post_render(record, html)

        if record.is_html or record.is_xml:
            html = minify_simple(html, xml=record.is_xml)
        if record.is_html and self.config.minify:
            html = minify_full(html, self.config.minify_options)
        return html

    def _check_slugs(self, records: Iterable[ContentRecord]) -> None:
        seen: dict[str, ContentRecord] = {}
        output_dir = self.config.output_path
        for record in records:
            resolve_output(output_dir, record.slug)
            other = seen.setdefault(record.slug, record)
            if other is not record:
                first = other.filename or "generated listing page"
                second = record.filename or "generated listing page"
                msg = f"slug {record.slug!r} is produced by both {first!r} and {second!r}"
                raise SlugCollisionError(msg)

    # ------------------------------------------------------------------
    # Whole builds
    # ------------------------------------------------------------------

    def copy_pass_through(self) -> tuple[WrittenFile, ...]:
        """Copy the configured pass-through directories into the output."""
        with self._profiler.stage("pass_through"):
            return copy_pass_through(
                self.config.pass_through,
                self.config.root,
                self.config.output_path,
                self.collector,
            )

    async def build(self) -> RenderResult:
        """Read everything, render, write and copy pass-through files."""
        t0 = time.perf_counter()
        self._profiler.begin("build")

        with self._profiler.stage("content"):
            await self.read_content()
        with self._profiler.stage("templates"):
            await self.read_templates()
        result = self.render()
        copied = self.copy_pass_through()

        self._profiler.finish(files_written=result.files_written + len(copied))
        return RenderResult(
            files=result.files + copied,
            records_rendered=result.records_rendered,
            duration_ms=(time.perf_counter() - t0) * 1000,
            output_dir=result.output_dir,
        )

    async def rebuild(self, paths: Iterable[str | Path]) -> RenderResult:
        """Re-read only the changed files, then render everything.

        Paths outside the content and template directories are ignored.
        """
        t0 = time.perf_counter()
        changed = [Path(p) for p in paths]
        self._profiler.begin(", ".join(sorted(p.name for p in changed)) or "rebuild")

        content = _within(changed, self.config.content_path)
        templates = _within(changed, self.config.templates_path)
        with self._profiler.stage("content"):
            await self.read_content(content)
        with self._profiler.stage("templates"):
            await self.read_templates(templates)
        result = self.render()

        self._profiler.finish(files_written=result.files_written)
        return RenderResult(
            files=result.files,
            records_rendered=result.records_rendered,
            duration_ms=(time.perf_counter() - t0) * 1000,
            output_dir=result.output_dir,
        )

    def _warn(self, name: str, message: str) -> None:
        print(f"  Warning: {name}: {message}", file=sys.stderr)
        self.collector.record_warning(name, message)


def _list_files(base: Path) -> list[Path]:
    """Every non-hidden file below ``base``, sorted."""
    if not base.is_dir():
        return []
    return [
        path
        for path in sorted(base.rglob("*"))
        if path.is_file()
        and not any(part.startswith(".") for part in path.relative_to(base).parts)
    ]


def _within(paths: list[Path], base: Path) -> list[Path]:
    return [p for p in paths if p.is_relative_to(base) and p != base and not p.is_dir()]
