"""Folio CLI — folio build / folio watch.

Entry point for the ``folio`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the folio CLI."""
    parser = argparse.ArgumentParser(
        prog="folio",
        description="Static site builder with an embedded expression template engine.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # folio build
    build_parser = subparsers.add_parser(
        "build",
        help="Build the site into the output directory",
    )
    build_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    build_parser.add_argument("--output", default=None, help="Output directory")
    build_parser.add_argument(
        "--dev",
        action="store_true",
        default=None,
        help="Development mode: publish drafts and future-dated content",
    )
    build_parser.add_argument(
        "--minify", action="store_true", default=None, help="Minify HTML output",
    )

    # folio watch
    watch_parser = subparsers.add_parser(
        "watch",
        help="Build, then rebuild on content and template changes",
    )
    watch_parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    watch_parser.add_argument("--output", default=None, help="Output directory")
    watch_parser.add_argument(
        "--dev",
        action="store_true",
        default=None,
        help="Development mode: publish drafts and future-dated content",
    )
    watch_parser.add_argument(
        "--debounce", type=int, default=None, help="Rebuild debounce in milliseconds",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from folio import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from folio._errors import FolioError
    from folio.app import build, watch

    try:
        if args.command == "build":
            build(
                root=args.root,
                output=args.output,
                dev_mode=args.dev,
                minify=args.minify,
            )
        elif args.command == "watch":
            watch(
                root=args.root,
                output=args.output,
                dev_mode=args.dev,
                watch_debounce=args.debounce,
            )
    except FolioError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
