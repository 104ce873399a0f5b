"""Output writing — hash-gated file writes and pass-through copies.

Every rendered output is hashed before writing; a slug is only written when
its hash differs from the one recorded on the previous successful write, so
an unchanged rebuild touches no files.
"""

from __future__ import annotations

import base64
import hashlib
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from folio._errors import ExportError, PathTraversalError

if TYPE_CHECKING:
    from folio.observability.collector import StackCollector

# Files/directories skipped during pass-through copying
_HIDDEN_PREFIXES = (".",)


@dataclass(frozen=True, slots=True)
class WrittenFile:
    """Record of a single file written during a build.

    Attributes:
        slug: Output-relative path (e.g., ``"post/article/index.html"``).
        output_path: Absolute filesystem path to the written file.
        kind: Rendered record or pass-through copy.
        size_bytes: Size of the written file in bytes.
        duration_ms: Time taken to write this file.

    """

    slug: str
    output_path: Path
    kind: Literal["render", "pass_through"]
    size_bytes: int
    duration_ms: float


def content_hash(text: str) -> str:
    """SHA-1 digest of rendered output, base64 encoded."""
    return base64.b64encode(hashlib.sha1(text.encode("utf-8")).digest()).decode("ascii")


def resolve_output(output_dir: Path, slug: str) -> Path:
    """Absolute output path for ``slug``.

    Raises:
        PathTraversalError: If the slug resolves outside ``output_dir``.

    """
    root = output_dir.resolve()
    path = (root / slug).resolve()
    if path == root or not path.is_relative_to(root):
        msg = f"slug {slug!r} resolves outside the build directory {root}"
        raise PathTraversalError(msg)
    return path


class OutputWriter:
    """Writes rendered outputs, skipping those whose hash is unchanged.

    Args:
        output_dir: Build output directory.
        collector: Optional event collector for ``FileWritten`` events.

    """

    def __init__(self, output_dir: Path, collector: StackCollector | None = None) -> None:
        self._output_dir = output_dir
        self._collector = collector
        self._hashes: dict[str, str] = {}

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def hash_for(self, slug: str) -> str | None:
        """Hash recorded by the last successful write of ``slug``."""
        return self._hashes.get(slug)

    def write(self, slug: str, text: str) -> WrittenFile | None:
        """Write ``text`` to ``slug`` unless its hash is unchanged.

        Returns:
            The written file, or *None* when the write was skipped.

        Raises:
            PathTraversalError: If the slug resolves outside the output.
            ExportError: If the file cannot be written.

        """
        digest = content_hash(text)
        if self._hashes.get(slug) == digest:
            return None

        t0 = time.perf_counter()
        path = resolve_output(self._output_dir, slug)
        data = text.encode("utf-8")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            msg = f"Failed to write {slug}: {exc}"
            raise ExportError(msg) from exc

        self._hashes[slug] = digest
        if self._collector is not None:
            self._collector.record_write(slug, size_bytes=len(data))
        return WrittenFile(
            slug=slug,
            output_path=path,
            kind="render",
            size_bytes=len(data),
            duration_ms=(time.perf_counter() - t0) * 1000,
        )


def copy_pass_through(
    pairs: tuple[tuple[str, str], ...],
    root: Path,
    output_dir: Path,
    collector: StackCollector | None = None,
) -> tuple[WrittenFile, ...]:
    """Recursively copy each ``(source, target)`` pair into the output.

    ``source`` is relative to ``root`` and ``target`` relative to
    ``output_dir``. Hidden files are skipped; a missing source is reported
    and skipped.

    Raises:
        PathTraversalError: If a target resolves outside ``output_dir``.
        ExportError: If a file cannot be copied.

    """
    results: list[WrittenFile] = []
    output_root = output_dir.resolve()

    for source, target in pairs:
        src = root / source
        dest_root = (output_root / target).resolve()
        if not dest_root.is_relative_to(output_root):
            msg = f"pass-through target {target!r} resolves outside {output_root}"
            raise PathTraversalError(msg)

        if src.is_file():
            files = [(src, dest_root)]
        elif src.is_dir():
            files = [
                (f, dest_root / f.relative_to(src))
                for f in sorted(src.rglob("*"))
                if f.is_file() and not f.name.startswith(_HIDDEN_PREFIXES)
            ]
        else:
            message = f"pass-through source {source!r} does not exist"
            print(f"  Warning: {message}", file=sys.stderr)
            if collector is not None:
                collector.record_warning(source, message)
            continue

        for src_file, dest_file in files:
            t0 = time.perf_counter()
            try:
                dest_file.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src_file, dest_file)
            except OSError as exc:
                msg = f"Failed to copy {src_file}: {exc}"
                raise ExportError(msg) from exc

            size = dest_file.stat().st_size
            slug = dest_file.relative_to(output_root).as_posix()
            if collector is not None:
                collector.record_write(slug, size_bytes=size, kind="pass_through")
            results.append(WrittenFile(
                slug=slug,
                output_path=dest_file,
                kind="pass_through",
                size_bytes=size,
                duration_ms=(time.perf_counter() - t0) * 1000,
            ))

    return tuple(results)
