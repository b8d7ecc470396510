"""Load TabbyConfig from tabby.yaml if present.

Merges file config with keyword overrides. Overrides take precedence.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from tabby._errors import ConfigError
from tabby.config import TabbyConfig

_KNOWN_KEYS = frozenset({
    "output",
    "control_dir",
    "tmp_dir",
    "build_concurrency",
    "copy_concurrency",
    "move_progress_threshold",
    "progress",
    "vcs",
    "keep_failed_staging",
})

_PATH_KEYS = ("output", "tmp_dir")


def load_config(root: Path, **overrides: object) -> TabbyConfig:
    """Load TabbyConfig from root, optionally merging tabby.yaml.

    Looks for tabby.yaml, tabby.yml, or tabby.toml in root. If found, loads
    and merges with overrides. Overrides take precedence; overrides whose
    value is ``None`` are ignored so callers can forward optional arguments.

    Raises:
        ConfigError: If the config file is malformed or names unknown keys.

    """
    file_config = _read_tabby_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}

    unknown = sorted(set(merged) - _KNOWN_KEYS)
    if unknown:
        msg = f"Unknown tabby config key(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    for key in _PATH_KEYS:
        if key in merged and not isinstance(merged[key], Path):
            merged[key] = Path(str(merged[key]))
    return TabbyConfig(root=root, **merged)  # type: ignore[arg-type]


def _read_tabby_config(root: Path) -> dict[str, object]:
    """Read tabby config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("tabby.yaml", "tabby.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "tabby.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping at the top level"
        raise ConfigError(msg)
    return _flatten_tabby_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_tabby_section(data)


def _flatten_tabby_section(data: dict[str, object]) -> dict[str, object]:
    """Extract tabby.* keys into top-level config."""
    result: dict[str, object] = {}
    section = data.get("tabby")
    if isinstance(section, dict):
        result.update(section)
    for k, v in data.items():
        if k != "tabby" and k in _KNOWN_KEYS:
            result[k] = v
    return result
