"""Tests for folio.config."""

from pathlib import Path

import pytest

from folio.config import FolioConfig, HeadingConfig, PageListConfig


class TestFolioConfig:
    """FolioConfig — frozen dataclass with sensible defaults."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("FOLIO_ENV", raising=False)
        config = FolioConfig()
        assert config.content_dir == "content"
        assert config.templates_dir == "templates"
        assert config.base_path == "/"
        assert config.index_filename == "index.html"
        assert config.default_template == "default.html"
        assert config.page_list_items == 24
        assert config.watch_debounce == 200
        assert config.minify is False
        assert config.dev_mode is False

    def test_frozen(self) -> None:
        config = FolioConfig()
        with pytest.raises(AttributeError):
            config.minify = True  # type: ignore[misc]

    def test_paths_resolve_from_root(self, tmp_path: Path) -> None:
        config = FolioConfig(root=tmp_path)
        assert config.content_path == tmp_path / "content"
        assert config.templates_path == tmp_path / "templates"
        assert config.output_path == tmp_path / "build"

    def test_absolute_output_preserved(self, tmp_path: Path) -> None:
        output = Path("/tmp/custom-output")
        config = FolioConfig(root=tmp_path, output=output)
        assert config.output_path == output

    def test_custom_dirs(self, tmp_path: Path) -> None:
        config = FolioConfig(root=tmp_path, content_dir="pages", templates_dir="layouts")
        assert config.content_path == tmp_path / "pages"
        assert config.templates_path == tmp_path / "layouts"

    def test_relative_root_resolved_to_absolute(self) -> None:
        """Relative root is resolved to absolute in __post_init__."""
        config = FolioConfig(root=Path("site"))
        assert config.root.is_absolute()

    def test_absolute_root_unchanged(self, tmp_path: Path) -> None:
        config = FolioConfig(root=tmp_path)
        assert config.root == tmp_path

    def test_dev_mode_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOLIO_ENV", "Development")
        assert FolioConfig().dev_mode is True
        monkeypatch.setenv("FOLIO_ENV", "production")
        assert FolioConfig().dev_mode is False

    def test_explicit_dev_mode_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("FOLIO_ENV", "development")
        assert FolioConfig(dev_mode=False).dev_mode is False


class TestOptionGroups:
    """Nested option groups."""

    def test_listing_defaults(self) -> None:
        config = FolioConfig()
        assert config.dir_pages == PageListConfig()
        assert config.tag_pages.root_dir == "tag"
        assert config.tag_pages.sort_by == "date"
        assert config.tag_pages.sort_order == -1

    def test_heading_defaults(self) -> None:
        headings = HeadingConfig()
        assert headings.min_level == 2
        assert (headings.nolink, headings.nomenu, headings.noid) == ("nolink", "nomenu", "noid")

    def test_nav_sort_for(self) -> None:
        config = FolioConfig(nav_sort={"post": ("date", -1)})
        assert config.nav_sort_for("post") == ("date", -1)
        assert config.nav_sort_for("about") == ("priority", -1)
