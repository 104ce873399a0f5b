"""Folio application — the public build and watch entry points.

``build()`` runs one complete build. ``watch()`` builds, then keeps the
output current as content and templates change.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from folio._errors import FolioError
from folio.config import FolioConfig
from folio.config_loader import load_config

if TYPE_CHECKING:
    from folio.pipeline.builder import Builder, RenderResult
    from folio.pipeline.hooks import HookSet
    from folio.pipeline.scheduler import RebuildScheduler


def _warning_lines(config: FolioConfig) -> list[str]:
    """Configuration problems worth showing in the banner."""
    warnings: list[str] = []
    if not config.content_path.is_dir():
        warnings.append(f"content directory not found: {config.content_path}")
    if not config.templates_path.is_dir():
        warnings.append(f"templates directory not found: {config.templates_path}")
    if config.dev_mode:
        warnings.append("development mode: drafts and future posts are published")
    return warnings


async def _consume_events(
    config: FolioConfig,
    scheduler: RebuildScheduler,
) -> None:
    """Feed watcher events to the scheduler until the watcher stops."""
    from folio.content.watcher import ContentWatcher

    watcher = ContentWatcher(config)
    watcher.start()
    try:
        async for event in watcher.changes():
            if event.category == "config":
                print(
                    f"  {event.path.name} changed; restart folio watch to apply it",
                    file=sys.stderr,
                )
                continue
            scheduler.notify(str(event.path))
    finally:
        watcher.stop()
        scheduler.close()
        await scheduler.wait_idle()


async def _watch(config: FolioConfig, builder: Builder) -> None:
    from folio.pipeline.scheduler import RebuildScheduler

    try:
        await builder.build()
    except FolioError as exc:
        # Keep watching: the edit that fixes the error triggers a rebuild.
        print(f"  Build error: {exc}", file=sys.stderr)

    scheduler = RebuildScheduler(builder.rebuild, debounce_ms=config.watch_debounce)
    await _consume_events(config, scheduler)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def build(
    root: str | Path = ".",
    *,
    hooks: HookSet | None = None,
    **kwargs: object,
) -> RenderResult:
    """Build the site once.

    Reads every content and template file, renders all published records,
    writes changed outputs and copies pass-through directories.

    Args:
        root: Path to the site root directory.
        hooks: Optional build hooks.
        **kwargs: Override FolioConfig fields.

    Returns:
        The build result (written files and timing).

    Raises:
        FolioError: If the build fails.

    """
    from folio.banner import print_banner, print_summary
    from folio.pipeline.builder import Builder

    config = load_config(Path(root), **kwargs)
    print_banner(config, mode="build", warnings=_warning_lines(config))

    builder = Builder(config, hooks=hooks)
    result = asyncio.run(builder.build())

    print_summary(result)
    return result


def watch(
    root: str | Path = ".",
    *,
    hooks: HookSet | None = None,
    **kwargs: object,
) -> None:
    """Build the site, then rebuild on every content or template change.

    Blocks until interrupted. Render errors are reported and the watch
    continues, so a single bad edit does not end the session.

    Args:
        root: Path to the site root directory.
        hooks: Optional build hooks.
        **kwargs: Override FolioConfig fields.

    """
    from folio.banner import print_banner, print_session_stats
    from folio.observability.profiler import compute_aggregate_stats
    from folio.pipeline.builder import Builder

    config = load_config(Path(root), **kwargs)
    print_banner(config, mode="watch", warnings=_warning_lines(config))

    builder = Builder(config, hooks=hooks)
    try:
        asyncio.run(_watch(config, builder))
    except KeyboardInterrupt:
        print("\n  Stopped watching.", file=sys.stderr)
    log = builder.collector.log
    print_session_stats(compute_aggregate_stats(log), log.stats()["by_type"])
