"""
shellfix — unit tests for settings validation

File: tests/unit/config/test_settings.py

Purpose
- Validate rule enablement, priority overrides, strict construction, and
  structured validation issues.
"""

from __future__ import annotations

import pytest

from shellfix.config.settings import (
    ConfigValidationError,
    ConfigValidationIssue,
    Settings,
    validate_settings,
)

pytestmark = [pytest.mark.unit]


class TestRuleEnablement:
    def test_all_enables_default_on_rules_only(self) -> None:
        settings = Settings()

        assert settings.is_rule_enabled("sudo")
        assert not settings.is_rule_enabled("git_push_force", enabled_by_default=False)

    def test_explicit_listing_enables_opt_in_rules(self) -> None:
        settings = Settings(rules=("git_push_force",))

        assert settings.is_rule_enabled("git_push_force", enabled_by_default=False)
        assert not settings.is_rule_enabled("sudo")

    def test_exclusion_wins(self) -> None:
        settings = Settings(rules=("ALL", "sudo"), exclude_rules=("sudo",))

        assert not settings.is_rule_enabled("sudo")

    def test_priority_override(self) -> None:
        settings = Settings(priority={"sudo": 10})

        assert settings.get_rule_priority("sudo", 50) == 10
        assert settings.get_rule_priority("cd_parent", 100) == 100


def test_to_dict_is_plain_data() -> None:
    payload = Settings(priority={"b": 2, "a": 1}).to_dict()

    assert payload["rules"] == ["ALL"]
    assert list(payload["priority"]) == ["a", "b"]
    assert payload["history_limit"] is None


def test_from_mapping_round_trips_to_dict() -> None:
    settings = Settings(rules=("sudo",), wait_command=9, env={"LC_ALL": "C"})

    assert Settings.from_mapping(settings.to_dict()) == settings


def test_from_mapping_raises_with_every_issue() -> None:
    with pytest.raises(ConfigValidationError) as excinfo:
        Settings.from_mapping({"wait_command": 0, "rules": "sudo", "bogus": True})

    paths = [issue.path for issue in excinfo.value.issues]
    assert paths == ["bogus", "rules", "wait_command"]
    assert "- wait_command: must be > 0" in str(excinfo.value)


def test_validate_settings_overlays_valid_fields_onto_base() -> None:
    base = Settings(num_close_matches=7)

    settings, issues = validate_settings(
        {"no_colors": True, "history_limit": -3, "priority": {"sudo": "high"}},
        base=base,
        source="cli: ",
    )

    assert settings.no_colors is True
    assert settings.num_close_matches == 7
    assert settings.history_limit is None
    assert issues == (
        ConfigValidationIssue("cli: history_limit", "must be >= 0"),
        ConfigValidationIssue("cli: priority", "priority for 'sudo' must be an integer"),
    )


@pytest.mark.parametrize(
    ("key", "value"),
    [
        ("require_confirmation", 1),
        ("num_close_matches", True),
        ("slow_commands", ["gradle", ""]),
        ("env", {"LC_ALL": 1}),
    ],
)
def test_type_errors_are_reported(key: str, value: object) -> None:
    settings, issues = validate_settings({key: value})

    assert settings == Settings()
    assert [issue.path for issue in issues] == [key]


def test_with_overrides_returns_new_instance() -> None:
    base = Settings()
    changed = base.with_overrides(require_confirmation=False)

    assert base.require_confirmation is True
    assert changed.require_confirmation is False
