"""Folio configuration.

FolioConfig is the central configuration object, frozen after creation.
Nested option groups (page listings, heading anchors, markdown) are frozen
dataclasses of their own so a whole group can be overridden at once.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def _env_dev_mode() -> bool:
    return os.environ.get("FOLIO_ENV", "").lower() == "development"


@dataclass(frozen=True, slots=True)
class PageListConfig:
    """Options for generated listing pages (directory or tag groups).

    Attributes:
        enabled: Generate listing pages for this group type.
        sort_by: Record field used as the primary sort key.
        sort_order: ``1`` ascending, ``-1`` descending.
        root_dir: Output directory the listing pages live under
            (``""`` for directory listings, ``"tag"`` for tag listings).
        template: Template for synthetic listing pages
            (``None`` uses the default template).

    """

    enabled: bool = True
    sort_by: str = "priority"
    sort_order: int = -1
    root_dir: str = ""
    template: str | None = None


@dataclass(frozen=True, slots=True)
class HeadingConfig:
    """Heading anchor and contents-list options.

    The three marker classes act independently on individual headings.
    """

    enabled: bool = True
    min_level: int = 2
    nolink: str = "nolink"
    nomenu: str = "nomenu"
    noid: str = "noid"
    link_content: str = "#"
    link_class: str = "headlink"
    nav_class: str = "contents"


@dataclass(frozen=True, slots=True)
class MarkdownConfig:
    """Markdown rendering and code highlighting options."""

    plugins: tuple[str, ...] = ("table",)
    highlight: bool = True
    default_language: str = "text"
    highlight_inline_code: bool = True


@dataclass(frozen=True, slots=True)
class FolioConfig:
    """Configuration for a Folio build.

    Attributes:
        root: Path to the site root directory (contains content/, templates/).
              Always resolved to an absolute path on construction.
        content_dir: Directory containing content files.
        templates_dir: Directory containing template files.
        output: Build output directory.
        base_path: URL path prefix for generated links.
        index_filename: Filename page-like slugs end in.
        default_template: Template applied to HTML records without one.
        front_matter_delimiter: Line delimiting the front-matter block.
        page_list_items: Records per generated listing page.
        dir_pages: Directory listing options.
        tag_pages: Tag listing options.
        nav_sort_by: Navigation tree sort field.
        nav_sort_order: Navigation tree sort direction.
        nav_sort: Per top-level directory ``(sort_by, sort_order)`` overrides.
        headings: Heading anchor options.
        markdown: Markdown rendering options.
        slug_replace: Ordered ``(pattern, replacement)`` slug rewrites.
        minify: Run the full HTML minifier on HTML output.
        minify_options: Keyword options passed to the HTML minifier.
        dev_mode: Publish drafts and future-dated content.
        watch_debounce: Rebuild debounce window in milliseconds.
        pass_through: ``(source, target)`` directories copied verbatim;
            source relative to ``root``, target relative to the output.
        site: User-defined values exposed to templates as ``tacs.config``.
        index_frequency: Default ``index`` value for HTML records.

    """

    root: Path = field(default_factory=Path.cwd)
    content_dir: str = "content"
    templates_dir: str = "templates"
    output: Path = field(default_factory=lambda: Path("build"))
    base_path: str = "/"
    index_filename: str = "index.html"
    default_template: str = "default.html"
    front_matter_delimiter: str = "---"
    page_list_items: int = 24
    dir_pages: PageListConfig = field(default_factory=PageListConfig)
    tag_pages: PageListConfig = field(
        default_factory=lambda: PageListConfig(sort_by="date", root_dir="tag")
    )
    nav_sort_by: str = "priority"
    nav_sort_order: int = -1
    nav_sort: dict[str, tuple[str, int]] = field(default_factory=dict)
    headings: HeadingConfig = field(default_factory=HeadingConfig)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    slug_replace: tuple[tuple[str, str], ...] = ()
    minify: bool = False
    minify_options: dict[str, Any] = field(
        default_factory=lambda: {
            "remove_comments": True,
            "remove_empty_space": True,
            "reduce_boolean_attributes": True,
            "keep_pre": True,
        }
    )
    dev_mode: bool = field(default_factory=_env_dev_mode)
    watch_debounce: int = 200
    pass_through: tuple[tuple[str, str], ...] = ()
    site: dict[str, Any] = field(default_factory=dict)
    index_frequency: str = "monthly"

    def __post_init__(self) -> None:
        # Resolve root to absolute so that watchfiles (which returns
        # absolute paths) can be compared via Path.relative_to().
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())

    @property
    def content_path(self) -> Path:
        """Absolute path to content directory."""
        return self.root / self.content_dir

    @property
    def templates_path(self) -> Path:
        """Absolute path to templates directory."""
        return self.root / self.templates_dir

    @property
    def output_path(self) -> Path:
        """Absolute path to output directory."""
        if self.output.is_absolute():
            return self.output
        return self.root / self.output

    def nav_sort_for(self, directory: str) -> tuple[str, int]:
        """Navigation sort rule for a top-level directory."""
        return self.nav_sort.get(directory, (self.nav_sort_by, self.nav_sort_order))
