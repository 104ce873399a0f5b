"""Shared type definitions for folio."""

from typing import Literal

# Mode of operation
type FolioMode = Literal["build", "watch"]

# Output-relative path of a record (e.g., "post/article/index.html")
type Slug = str

# Ordered slug rewriting rules: regex pattern -> replacement
type SlugReplace = tuple[tuple[str, str], ...]
