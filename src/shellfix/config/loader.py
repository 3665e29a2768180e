"""
shellfix — settings loader.

File: src/shellfix/config/loader.py

Purpose
- Load the effective ``Settings`` from defaults, the TOML settings file,
  ``SHELLFIX_`` environment variables and CLI overrides.

What should be included in this file
- Precedence logic: CLI > env (SHELLFIX_) > file > defaults.
- TOML loading via ``tomllib``.
- Deterministic environment variable mapping and coercion.
- Default settings file creation.

Functional requirements
- A broken settings file or a bad value degrades to defaults with a warning.
- Only an explicitly requested settings file that is missing is fatal.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, Literal

from shellfix.config.settings import Settings, validate_settings

ENV_PREFIX: Final[str] = "SHELLFIX_"
SETTINGS_FILENAME: Final[str] = "settings.toml"

_BOOLEAN_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_BOOLEAN_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off"})

_ValueType = Literal["list", "bool", "int", "optional_int", "priority"]

_DEFAULT_SETTINGS_TEMPLATE: Final[str] = """\
# shellfix settings. Uncomment a line to override the default.
# Environment variables prefixed with SHELLFIX_ take precedence over this file.

# rules = ["ALL"]
# exclude_rules = []
# require_confirmation = true
# wait_command = 3
# wait_slow_command = 15
# no_colors = false
# history_limit = 100
# alter_history = true
# slow_commands = ["lein", "react-native", "gradle", "./gradlew", "vagrant"]
# num_close_matches = 3
# excluded_search_path_prefixes = []
# instant_mode = false
# debug = false

# [priority]
# sudo = 100

# [env]
# LC_ALL = "C"
"""

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Binding:
    field: str
    value_type: _ValueType


_ENV_BINDINGS: Final[tuple[_Binding, ...]] = (
    _Binding("rules", "list"),
    _Binding("exclude_rules", "list"),
    _Binding("require_confirmation", "bool"),
    _Binding("wait_command", "int"),
    _Binding("wait_slow_command", "int"),
    _Binding("no_colors", "bool"),
    _Binding("priority", "priority"),
    _Binding("history_limit", "optional_int"),
    _Binding("alter_history", "bool"),
    _Binding("slow_commands", "list"),
    _Binding("num_close_matches", "int"),
    _Binding("excluded_search_path_prefixes", "list"),
    _Binding("instant_mode", "bool"),
    _Binding("debug", "bool"),
)


class ConfigLoadError(ValueError):
    """Raised when an explicitly requested settings file cannot be used."""


def settings_dir(environ: Mapping[str, str] | None = None) -> Path:
    env_map = os.environ if environ is None else environ
    xdg_home = env_map.get("XDG_CONFIG_HOME", "").strip()
    base = Path(xdg_home).expanduser() if xdg_home else Path("~/.config").expanduser()
    return base / "shellfix"


def settings_path(environ: Mapping[str, str] | None = None) -> Path:
    return settings_dir(environ) / SETTINGS_FILENAME


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    cli_overrides: Mapping[str, object] | None = None,
) -> Settings:
    """Load effective settings with precedence: CLI > env > file > defaults."""

    env_map = dict(os.environ if environ is None else environ)
    explicit_path = config_path is not None
    resolved_path = (
        Path(config_path).expanduser() if config_path is not None else settings_path(env_map)
    )

    settings = Settings()
    file_payload = _load_toml_file(resolved_path, required=explicit_path)
    settings = _overlay(settings, file_payload, source=f"{resolved_path}: ")
    settings = _overlay(settings, _collect_env_overrides(env_map), source=ENV_PREFIX)
    settings = _overlay(settings, dict(cli_overrides or {}), source="cli: ")

    logger.debug("effective settings: %s", settings.to_dict())
    return settings


def create_default_settings_file(
    path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Write the commented settings template unless the file already exists."""

    target = Path(path).expanduser() if path is not None else settings_path(environ)
    if target.exists():
        return target
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(_DEFAULT_SETTINGS_TEMPLATE, encoding="utf-8")
    logger.debug("created default settings file %s", target)
    return target


def _overlay(settings: Settings, payload: Mapping[str, object], *, source: str) -> Settings:
    if not payload:
        return settings
    updated, issues = validate_settings(payload, base=settings, source=source)
    for issue in issues:
        logger.warning("ignoring setting %s: %s", issue.path, issue.message)
    return updated


def _load_toml_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"settings file not found: {path}")
        return {}

    try:
        with path.open("rb") as handle:
            parsed = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("invalid TOML in %s, using defaults: %s", path, exc)
        return {}
    except OSError as exc:
        logger.warning("unable to read settings file %s, using defaults: %s", path, exc)
        return {}
    return parsed


def _collect_env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for binding in _ENV_BINDINGS:
        env_name = _env_name_for_field(binding.field)
        raw = environ.get(env_name)
        if raw is None:
            continue
        try:
            overrides[binding.field] = _coerce_env(raw, binding.value_type)
        except ValueError as exc:
            logger.warning("ignoring %s: %s", env_name, exc)
    return overrides


def _coerce_env(raw: str, value_type: _ValueType) -> object:
    value = raw.strip()
    if value_type == "list":
        return [part.strip() for part in value.split(":") if part.strip()]
    if value_type == "int":
        try:
            return int(value)
        except ValueError as exc:
            raise ValueError(f"{value!r} is not an integer") from exc
    if value_type == "optional_int":
        if not value:
            return None
        return _coerce_env(value, "int")
    if value_type == "priority":
        return _parse_priority(value)

    lowered = value.lower()
    if lowered in _BOOLEAN_TRUE:
        return True
    if lowered in _BOOLEAN_FALSE:
        return False
    raise ValueError(f"{value!r} is not a boolean (true/false/1/0/yes/no/on/off)")


def _parse_priority(value: str) -> dict[str, int]:
    """Parse ``rule=num:rule=num``; malformed pairs are skipped."""

    result: dict[str, int] = {}
    for pair in value.split(":"):
        name, separator, number = pair.partition("=")
        if not separator or not name.strip():
            logger.warning("ignoring malformed priority entry %r", pair)
            continue
        try:
            result[name.strip()] = int(number.strip())
        except ValueError:
            logger.warning("ignoring non-integer priority for rule %r", name.strip())
    return result


def _env_name_for_field(name: str) -> str:
    return ENV_PREFIX + name.upper()


__all__ = [
    "ConfigLoadError",
    "ENV_PREFIX",
    "SETTINGS_FILENAME",
    "create_default_settings_file",
    "load_settings",
    "settings_dir",
    "settings_path",
]
