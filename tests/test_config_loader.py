"""Tests for folio.config_loader — folio.yaml / folio.toml merging."""

from pathlib import Path

import pytest

from folio._errors import ConfigError
from folio.config import MarkdownConfig
from folio.config_loader import load_config


class TestLoadConfig:
    """load_config — file values merged with overrides."""

    def test_no_file(self, tmp_path: Path) -> None:
        config = load_config(tmp_path)
        assert config.root == tmp_path
        assert config.content_dir == "content"

    def test_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text(
            "content_dir: pages\nwatch_debounce: 500\nsite:\n  name: Example\n"
        )
        config = load_config(tmp_path)
        assert config.content_dir == "pages"
        assert config.watch_debounce == 500
        assert config.site == {"name": "Example"}

    def test_yml_extension(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yml").write_text("minify: true\n")
        assert load_config(tmp_path).minify is True

    def test_toml_folio_section(self, tmp_path: Path) -> None:
        (tmp_path / "folio.toml").write_text(
            '[folio]\noutput = "public"\nbase_path = "/docs/"\n'
        )
        config = load_config(tmp_path)
        assert config.output_path == tmp_path / "public"
        assert config.base_path == "/docs/"

    def test_yaml_preferred_over_toml(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("templates_dir: yaml\n")
        (tmp_path / "folio.toml").write_text('templates_dir = "toml"\n')
        assert load_config(tmp_path).templates_dir == "yaml"

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("output: public\n")
        config = load_config(tmp_path, output="dist")
        assert config.output_path == tmp_path / "dist"

    def test_none_overrides_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("dev_mode: true\n")
        assert load_config(tmp_path, dev_mode=None).dev_mode is True

    def test_unknown_key(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("colour: blue\n")
        with pytest.raises(ConfigError, match="colour"):
            load_config(tmp_path)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("a: [unclosed\n")
        with pytest.raises(ConfigError, match=r"folio\.yaml"):
            load_config(tmp_path)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(tmp_path)

    def test_malformed_toml(self, tmp_path: Path) -> None:
        (tmp_path / "folio.toml").write_text("output = \n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)


class TestCoercion:
    """Raw values become FolioConfig field types."""

    def test_option_group(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text(
            "markdown:\n  plugins: [table, footnotes]\n  highlight: false\n"
            "tag_pages:\n  root_dir: topics\n"
        )
        config = load_config(tmp_path)
        assert config.markdown == MarkdownConfig(plugins=("table", "footnotes"), highlight=False)
        assert config.tag_pages.root_dir == "topics"

    def test_unknown_group_option(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("headings:\n  depth: 3\n")
        with pytest.raises(ConfigError, match="headings"):
            load_config(tmp_path)

    def test_pairs_from_list(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text(
            "slug_replace:\n  - ['^blog/', 'post/']\npass_through:\n  - [static, assets]\n"
        )
        config = load_config(tmp_path)
        assert config.slug_replace == (("^blog/", "post/"),)
        assert config.pass_through == (("static", "assets"),)

    def test_pairs_from_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "folio.toml").write_text('[pass_through]\nstatic = "assets"\n')
        assert load_config(tmp_path).pass_through == (("static", "assets"),)

    def test_bad_pair(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("pass_through:\n  - [static]\n")
        with pytest.raises(ConfigError, match="pairs"):
            load_config(tmp_path)

    def test_nav_sort(self, tmp_path: Path) -> None:
        (tmp_path / "folio.yaml").write_text("nav_sort:\n  post: [date, -1]\n")
        assert load_config(tmp_path).nav_sort_for("post") == ("date", -1)
