"""Folio — a static site builder with an embedded expression template engine.

Turns a directory of content files (markdown, HTML, text, XML, anything) and
a directory of templates into a tree of static output files. Templates and
content use ``${ expression }`` placeholders evaluated at build time, and
``!{ expression }`` placeholders kept for request-time rendering.

Quick start::

    import folio

    folio.build("my-site/")

Two modes::

    folio.build("my-site/")       # One complete build
    folio.watch("my-site/")       # Build, then rebuild on change

Built on:

    patitas     Markdown parser    (converts content)
    pygments    Syntax highlighter (highlights code blocks)
    watchfiles  File watcher       (drives rebuilds)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "FolioConfig",
    "HookSet",
    "__version__",
    "build",
    "watch",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import folio`` fast while providing a clean top-level API.
    """
    if name == "FolioConfig":
        from folio.config import FolioConfig

        return FolioConfig

    if name == "HookSet":
        from folio.pipeline.hooks import HookSet

        return HookSet

    if name == "build":
        from folio.app import build

        return build

    if name == "watch":
        from folio.app import watch

        return watch

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
