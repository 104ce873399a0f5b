"""Startup banner and build summary — mode-aware status output.

Prints a branded banner before a build or watch session, a short summary
after a build and build timings when a watch session ends.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from folio._types import FolioMode
    from folio.config import FolioConfig
    from folio.pipeline.builder import RenderResult


# ---------------------------------------------------------------------------
# ANSI helpers — respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_BLUE = "\033[34m" if _COLOR else ""


# ---------------------------------------------------------------------------
# Mode badges
# ---------------------------------------------------------------------------

_MODE_STYLES: dict[str, tuple[str, str]] = {
    "build": (_YELLOW, "build"),
    "watch": (_GREEN, "watch"),
}


def _mode_badge(mode: str) -> str:
    """Return a styled [mode] badge."""
    color, label = _MODE_STYLES.get(mode, (_DIM, mode))
    return f"{color}[{label}]{_RESET}"


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def print_banner(
    config: FolioConfig,
    mode: FolioMode,
    *,
    warnings: list[str] | None = None,
) -> None:
    """Print the Folio startup banner to stderr.

    Args:
        config: Resolved FolioConfig.
        mode: ``"build"`` or ``"watch"``.
        warnings: Optional list of warning messages to display.

    """
    from folio import __version__

    header = f"  {_BLUE}{_BOLD}folio{_RESET} {_DIM}v{__version__}{_RESET}  {_mode_badge(mode)}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
        f"  {_DIM}├─{_RESET} content:   {_DIM}{config.content_path}{_RESET}",
        f"  {_DIM}├─{_RESET} templates: {_DIM}{config.templates_path}{_RESET}",
    ]

    if config.minify:
        lines.append(f"  {_DIM}├─{_RESET} minify: {_GREEN}on{_RESET}")
    lines.append(f"  {_DIM}└─{_RESET} output:    {_DIM}{config.output_path}{_RESET}")

    if mode == "watch":
        lines.append("")
        lines.append(
            f"  {_DIM}Watching for changes "
            f"(debounce {config.watch_debounce}ms)...{_RESET}"
        )

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)


def print_summary(result: RenderResult) -> None:
    """Print build completion summary to stderr."""
    copied = sum(1 for f in result.files if f.kind == "pass_through")
    written = result.files_written - copied

    lines = [
        "",
        "─" * 41,
        f"  Rendered {_plural(result.records_rendered, 'page')}, "
        f"wrote {_plural(written, 'file')}",
    ]
    if copied:
        lines.append(f"  Copied {_plural(copied, 'pass-through file')}")
    lines.append(f"  Output: {result.output_dir}")
    lines.append(f"  Done in {result.duration_ms:.0f}ms")

    print("\n".join(lines), file=sys.stderr)


def print_session_stats(stats: dict, by_type: dict[str, int] | None = None) -> None:
    """Print build timings for a finished watch session to stderr.

    Args:
        stats: Output of ``compute_aggregate_stats``; nothing is printed
            when no build completed.
        by_type: Event counts from ``EventLog.stats``, used for the
            written-file and warning totals.

    """
    count = stats.get("count", 0)
    if not count:
        return
    totals = stats["total_ms"]
    lines = [
        f"  {_DIM}{_plural(count, 'build')}: p50 {totals['p50']:.0f}ms, "
        f"p95 {totals['p95']:.0f}ms, slowest {totals['max']:.0f}ms{_RESET}",
    ]
    if by_type:
        written = by_type.get("FileWritten", 0)
        warned = by_type.get("RenderWarning", 0)
        line = f"  {_DIM}{_plural(written, 'file')} written"
        if warned:
            line += f", {_plural(warned, 'warning')}"
        lines.append(f"{line}{_RESET}")

    print("\n".join(lines), file=sys.stderr)
