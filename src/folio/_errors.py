"""Folio error hierarchy.

All folio-specific errors inherit from FolioError for easy catching.
Errors that abort a build carry the offending filename or slug in their message.
"""


class FolioError(Exception):
    """Base error for all folio operations."""


class ConfigError(FolioError):
    """Invalid or missing configuration."""


class ContentError(FolioError):
    """Error in content ingestion (reading, front matter, slugs)."""


class PathTraversalError(ContentError):
    """A filename or slug would resolve outside its root directory."""


class SlugCollisionError(ContentError):
    """Two records resolved to the same output slug."""


class TemplateError(FolioError):
    """A template expression is malformed or failed to evaluate."""

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        self.filename = filename
        if filename:
            message = f"{filename}: {message}"
        super().__init__(message)


class ExportError(FolioError):
    """Error while writing build output."""
