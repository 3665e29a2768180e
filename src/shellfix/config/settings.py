"""
shellfix — settings value type and field validation.

File: src/shellfix/config/settings.py

Purpose
- Hold one immutable configuration snapshot consumed by the corrector, the
  output capture and the CLI.

What should be included in this file
- ``Settings`` with the built-in defaults.
- Lenient field-by-field validation that reports structured issues and keeps
  the default for every offending field.
- Strict construction (``Settings.from_mapping``) raising
  ``ConfigValidationError``.

Functional requirements
- Exclusion always wins over inclusion.
- The ``ALL`` sentinel enables every rule that is enabled by default.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Final

from shellfix.constants import (
    ALL_RULES,
    DEFAULT_NUM_CLOSE_MATCHES,
    DEFAULT_SLOW_COMMANDS,
    DEFAULT_WAIT_COMMAND,
    DEFAULT_WAIT_SLOW_COMMAND,
)

_TUPLE_FIELDS: Final[frozenset[str]] = frozenset(
    {"rules", "exclude_rules", "slow_commands", "excluded_search_path_prefixes"}
)
_BOOL_FIELDS: Final[frozenset[str]] = frozenset(
    {"require_confirmation", "no_colors", "alter_history", "instant_mode", "debug"}
)
_POSITIVE_INT_FIELDS: Final[frozenset[str]] = frozenset({"wait_command", "wait_slow_command"})


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    """Single structured validation failure."""

    path: str
    message: str


class ConfigValidationError(ValueError):
    """Raised when strict settings validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        if not self.issues:
            rendered = "unknown validation failure"
        else:
            rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid settings:\n{rendered}")


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable configuration snapshot for one correction pass."""

    rules: tuple[str, ...] = (ALL_RULES,)
    exclude_rules: tuple[str, ...] = ()
    require_confirmation: bool = True
    wait_command: int = DEFAULT_WAIT_COMMAND
    wait_slow_command: int = DEFAULT_WAIT_SLOW_COMMAND
    no_colors: bool = False
    priority: Mapping[str, int] = field(default_factory=dict)
    history_limit: int | None = None
    alter_history: bool = True
    slow_commands: tuple[str, ...] = DEFAULT_SLOW_COMMANDS
    num_close_matches: int = DEFAULT_NUM_CLOSE_MATCHES
    excluded_search_path_prefixes: tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    instant_mode: bool = False
    debug: bool = False

    def is_rule_enabled(self, name: str, *, enabled_by_default: bool = True) -> bool:
        if name in self.exclude_rules:
            return False
        if name in self.rules:
            return True
        return enabled_by_default and ALL_RULES in self.rules

    def get_rule_priority(self, name: str, default: int) -> int:
        return self.priority.get(name, default)

    def with_overrides(self, **changes: Any) -> Settings:
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for item in dataclasses.fields(self):
            value = getattr(self, item.name)
            if isinstance(value, tuple):
                value = list(value)
            elif isinstance(value, Mapping):
                value = dict(sorted(value.items()))
            payload[item.name] = value
        return payload

    @classmethod
    def from_mapping(cls, payload: Mapping[str, object]) -> Settings:
        """Build settings from ``payload``, raising on any invalid field."""

        settings, issues = validate_settings(payload)
        if issues:
            raise ConfigValidationError(issues)
        return settings


def validate_settings(
    payload: Mapping[str, object],
    *,
    base: Settings | None = None,
    source: str = "",
) -> tuple[Settings, tuple[ConfigValidationIssue, ...]]:
    """Overlay valid fields of ``payload`` onto ``base`` and collect issues.

    Unknown keys and invalid values are reported and otherwise ignored.
    """

    resolved = base or Settings()
    known = {item.name for item in dataclasses.fields(Settings)}
    changes: dict[str, Any] = {}
    issues: list[ConfigValidationIssue] = []

    for key in sorted(payload):
        path = f"{source}{key}"
        if key not in known:
            issues.append(ConfigValidationIssue(path, "unknown setting"))
            continue
        try:
            changes[key] = _coerce_field(key, payload[key])
        except ValueError as exc:
            issues.append(ConfigValidationIssue(path, str(exc)))

    if changes:
        resolved = dataclasses.replace(resolved, **changes)
    return resolved, tuple(issues)


def _coerce_field(key: str, value: object) -> object:
    if key in _TUPLE_FIELDS:
        return _as_str_tuple(value)
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ValueError("must be a boolean")
        return value
    if key in _POSITIVE_INT_FIELDS:
        number = _as_int(value)
        if number <= 0:
            raise ValueError("must be > 0")
        return number
    if key == "num_close_matches":
        return _as_int(value)
    if key == "history_limit":
        if value is None:
            return None
        number = _as_int(value)
        if number < 0:
            raise ValueError("must be >= 0")
        return number
    if key == "priority":
        return _as_priority_map(value)
    if key == "env":
        return _as_env_map(value)
    raise ValueError("unsupported setting")


def _as_int(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("must be an integer")
    return value


def _as_str_tuple(value: object) -> tuple[str, ...]:
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ValueError("must be a list of strings")
    items: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            raise ValueError("must contain only non-empty strings")
        items.append(item.strip())
    return tuple(items)


def _as_priority_map(value: object) -> dict[str, int]:
    if not isinstance(value, Mapping):
        raise ValueError("must be a table of rule name to integer")
    result: dict[str, int] = {}
    for name, number in value.items():
        if not isinstance(name, str) or not name.strip():
            raise ValueError("rule names must be non-empty strings")
        try:
            result[name.strip()] = _as_int(number)
        except ValueError as exc:
            raise ValueError(f"priority for {name!r} {exc}") from exc
    return result


def _as_env_map(value: object) -> dict[str, str]:
    if not isinstance(value, Mapping):
        raise ValueError("must be a table of strings")
    result: dict[str, str] = {}
    for name, item in value.items():
        if not isinstance(name, str) or not isinstance(item, str):
            raise ValueError("must be a table of strings")
        result[name] = item
    return result


__all__ = [
    "ConfigValidationError",
    "ConfigValidationIssue",
    "Settings",
    "validate_settings",
]
