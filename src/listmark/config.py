"""
Settings and TOML-based config file loading for listmark.

`ListSettings` holds the flags the list engine reads. `ListmarkConfig` is what a
config file says, with `None` for anything it leaves unset.

Config files are found by walking up from the current directory, looking for
`.listmark.toml`, `listmark.toml`, or `pyproject.toml [tool.listmark]`. Values
are merged with CLI flags using three-way precedence: explicit CLI flags >
config file > built-in defaults.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, TypeVar, cast

if sys.version_info >= (3, 11):
    import tomllib  # pyright: ignore[reportUnreachable]
else:
    import tomli as tomllib  # type: ignore[no-redef]  # pyright: ignore[reportUnreachable]


@dataclass(frozen=True)
class ListSettings:
    """
    Flags that gate the list engine. Read-only to the engine.
    """

    custom_labels: bool = True
    """Recognize `{::label}` items and references."""

    auto_renumber: bool = False
    """Renumber a fancy list block after an item is inserted into it."""

    strict: bool = False
    """Only treat list blocks Pandoc would recognize as lists."""


@dataclass
class ListmarkConfig:
    """
    Parsed config from a TOML file. Fields are `None` when not set in the config,
    allowing the merge logic to distinguish "not configured" from "explicitly set
    to default value".
    """

    # Syntax
    custom_labels: bool | None = None
    auto_renumber: bool | None = None
    strict: bool | None = None
    # File discovery
    extend_include: list[str] | None = None
    exclude: list[str] | None = None
    extend_exclude: list[str] | None = None
    respect_gitignore: bool | None = None


# Config file search order (first match wins within each directory level)
_CONFIG_FILENAMES = [".listmark.toml", "listmark.toml", "pyproject.toml"]

# Mapping from TOML kebab-case keys to Python snake_case field names
_KEBAB_TO_SNAKE: dict[str, str] = {
    "custom-labels": "custom_labels",
    "auto-renumber": "auto_renumber",
    "extend-include": "extend_include",
    "extend-exclude": "extend_exclude",
    "respect-gitignore": "respect_gitignore",
}

_VALID_FIELDS = {f.name for f in fields(ListmarkConfig)}


def find_config_file(start_dir: Path) -> Path | None:
    """
    Walk up from `start_dir` looking for a config file. Returns the first
    found, or `None`. Search order per directory: `.listmark.toml` >
    `listmark.toml` > `pyproject.toml` (only if it has `[tool.listmark]`).
    """
    current = start_dir.resolve()
    while True:
        for filename in _CONFIG_FILENAMES:
            candidate = current / filename
            if not candidate.is_file():
                continue
            if filename != "pyproject.toml" or _pyproject_has_listmark_section(candidate):
                return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def _pyproject_has_listmark_section(path: Path) -> bool:
    try:
        data = tomllib.loads(path.read_text())
        return "listmark" in data.get("tool", {})
    except (tomllib.TOMLDecodeError, OSError):
        return False


def load_config(config_path: Path) -> ListmarkConfig:
    """
    Load a `ListmarkConfig` from a TOML file: a standalone `listmark.toml` /
    `.listmark.toml`, or the `[tool.listmark]` table of a `pyproject.toml`.

    A file that is not valid TOML is reported on stderr and treated as empty.
    """
    try:
        data = tomllib.loads(config_path.read_text())
    except tomllib.TOMLDecodeError as e:
        print(f"Warning: ignoring invalid config file {config_path}: {e}", file=sys.stderr)
        return ListmarkConfig()

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("listmark", {})

    return _parse_config_data(data)


def _parse_config_data(data: dict[str, Any]) -> ListmarkConfig:
    """Parse a flat or sectioned TOML dict into ListmarkConfig."""
    # Flatten sections: [syntax] and [file-discovery] merge into top level
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            flat.update(cast(dict[str, Any], value))
        else:
            flat[key] = value

    mapped: dict[str, Any] = {}
    for key, value in flat.items():
        snake_key = _KEBAB_TO_SNAKE.get(key, key.replace("-", "_"))
        if snake_key in _VALID_FIELDS:
            mapped[snake_key] = value
        else:
            print(f"Warning: unrecognized config key: {key}", file=sys.stderr)

    return ListmarkConfig(**mapped)


_T = TypeVar("_T")


def merge_cli_with_config(
    cli_opts: _T,
    config: ListmarkConfig | None,
    explicit_flags: set[str],
) -> _T:
    """
    Merge CLI options with config file settings.

    Precedence: explicit CLI flags > config file > built-in defaults.
    """
    if config is None:
        return cli_opts

    for cfg_field in fields(ListmarkConfig):
        cfg_value = getattr(config, cfg_field.name)
        if cfg_value is None or cfg_field.name in explicit_flags:
            continue
        if hasattr(cli_opts, cfg_field.name):
            setattr(cli_opts, cfg_field.name, cfg_value)

    return cli_opts


def settings_from(opts: Any) -> ListSettings:
    """
    Build engine settings from any object with matching attributes, such as CLI
    options or a `ListmarkConfig`. Missing or `None` attributes take the default.
    """
    defaults = ListSettings()
    values: dict[str, bool] = {}
    for settings_field in fields(ListSettings):
        value = getattr(opts, settings_field.name, None)
        if value is None:
            value = getattr(defaults, settings_field.name)
        values[settings_field.name] = bool(value)
    return ListSettings(**values)
