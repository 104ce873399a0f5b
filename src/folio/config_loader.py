"""Load FolioConfig from folio.yaml / folio.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from folio._errors import ConfigError
from folio.config import FolioConfig, HeadingConfig, MarkdownConfig, PageListConfig

CONFIG_FILENAMES = ("folio.yaml", "folio.yml", "folio.toml")

_SCALAR_KEYS = frozenset({
    "content_dir", "templates_dir", "output", "base_path", "index_filename",
    "default_template", "front_matter_delimiter", "page_list_items",
    "nav_sort_by", "nav_sort_order", "minify", "dev_mode", "watch_debounce",
    "index_frequency",
})

_GROUPS: dict[str, type] = {
    "dir_pages": PageListConfig,
    "tag_pages": PageListConfig,
    "headings": HeadingConfig,
    "markdown": MarkdownConfig,
}


def load_config(root: Path, **overrides: object) -> FolioConfig:
    """Load FolioConfig from root, optionally merging folio.yaml / folio.toml.

    Looks for folio.yaml, folio.yml, or folio.toml in root. If found, loads
    and merges with overrides. Overrides take precedence; ``None`` overrides
    are ignored so unset CLI flags do not clobber file values.
    """
    file_config = _read_folio_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    return FolioConfig(root=root, **_coerce(merged))


def _read_folio_config(root: Path) -> dict[str, object]:
    """Read folio config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("folio.yaml", "folio.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "folio.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    """Parse YAML config."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path.name} must contain a mapping"
        raise ConfigError(msg)
    return _flatten_folio_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    """Parse TOML config."""
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Failed to read {path.name}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_folio_section(data)


def _flatten_folio_section(data: dict[str, object]) -> dict[str, object]:
    """Extract folio.* keys into top-level config."""
    result: dict[str, object] = {}
    folio = data.get("folio")
    if isinstance(folio, dict):
        result.update(folio)
    for k, v in data.items():
        if k != "folio":
            result[k] = v
    return result


def _coerce(values: dict[str, object]) -> dict[str, object]:
    """Convert raw file/CLI values into FolioConfig field types."""
    result: dict[str, object] = {}
    for key, value in values.items():
        if key in _GROUPS:
            result[key] = _coerce_group(key, value)
        elif key == "output":
            result[key] = value if isinstance(value, Path) else Path(str(value))
        elif key in ("slug_replace", "pass_through"):
            result[key] = _coerce_pairs(key, value)
        elif key == "nav_sort":
            if not isinstance(value, dict):
                msg = "nav_sort must map directory names to [sort_by, sort_order]"
                raise ConfigError(msg)
            result[key] = {str(d): (str(r[0]), int(r[1])) for d, r in value.items()}
        elif key in ("site", "minify_options"):
            if not isinstance(value, dict):
                msg = f"{key} must be a mapping"
                raise ConfigError(msg)
            result[key] = dict(value)
        elif key in _SCALAR_KEYS:
            result[key] = value
        else:
            msg = f"Unknown configuration key: {key!r}"
            raise ConfigError(msg)
    return result


def _coerce_group(key: str, value: object) -> object:
    cls = _GROUPS[key]
    if isinstance(value, cls):
        return value
    if not isinstance(value, dict):
        msg = f"{key} must be a mapping"
        raise ConfigError(msg)
    options = {k: tuple(v) if isinstance(v, list) else v for k, v in value.items()}
    try:
        return cls(**options)
    except TypeError as exc:
        msg = f"Invalid {key} options: {exc}"
        raise ConfigError(msg) from exc


def _coerce_pairs(key: str, value: object) -> tuple[tuple[str, str], ...]:
    if isinstance(value, dict):
        return tuple((str(k), str(v)) for k, v in value.items())
    if isinstance(value, (list, tuple)):
        pairs: list[tuple[str, str]] = []
        for item in value:
            if not isinstance(item, (list, tuple)) or len(item) != 2:
                msg = f"{key} entries must be [from, to] pairs"
                raise ConfigError(msg)
            pairs.append((str(item[0]), str(item[1])))
        return tuple(pairs)
    msg = f"{key} must be a list of pairs or a mapping"
    raise ConfigError(msg)
