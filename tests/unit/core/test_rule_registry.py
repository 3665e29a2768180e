"""
shellfix — unit tests for the rule interface and registry

File: tests/unit/core/test_rule_registry.py

Purpose
- Verify the app-scoped wrapper forwards everything but ``is_match``.
- Verify deterministic registration, duplicate rejection, and factory checks.
"""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from shellfix.core.command import Command
from shellfix.core.rule import (
    DEFAULT_RULE_REGISTRY,
    ForAppRule,
    Rule,
    RuleRegistry,
    for_app,
    is_app,
    register_builtin_rule,
    register_external_rule,
)

pytestmark = [pytest.mark.unit]


class _AlwaysRule(Rule):
    name = "always"
    priority = 42
    enabled_by_default = False
    requires_output = False

    def __init__(self) -> None:
        self.side_effects: list[str] = []

    def is_match(self, command: Command) -> bool:
        return True

    def get_new_command(self, command: Command) -> Sequence[str]:
        return [f"{command.script} --fixed"]

    def side_effect(self, command: Command, new_script: str) -> None:
        self.side_effects.append(new_script)


class _PlainRule(Rule):
    name = "plain"

    def is_match(self, command: Command) -> bool:
        return False

    def get_new_command(self, command: Command) -> Sequence[str]:
        return []


class TestIsApp:
    def test_matches_basename_of_first_token(self) -> None:
        assert is_app(Command("/usr/local/bin/git push"), "git", "hub")
        assert is_app(Command("C:\\Tools\\git.exe push"), "git")
        assert not is_app(Command("gitk --all"), "git")

    def test_empty_command_never_matches(self) -> None:
        assert not is_app(Command(""), "git")


class TestForAppRule:
    def test_rejects_other_programs_even_when_inner_matches(self) -> None:
        wrapped = for_app("git")(_AlwaysRule())

        assert wrapped.is_match(Command("git status"))
        assert not wrapped.is_match(Command("hg status"))
        assert not wrapped.is_match(Command("gitx status"))

    def test_forwards_metadata_and_side_effect(self) -> None:
        inner = _AlwaysRule()
        wrapped = ForAppRule(inner, ("git",))

        assert wrapped.name == "always"
        assert wrapped.priority == 42
        assert wrapped.enabled_by_default is False
        assert wrapped.requires_output is False
        assert wrapped.has_side_effect()
        assert list(wrapped.get_new_command(Command("git push"))) == ["git push --fixed"]

        wrapped.side_effect(Command("git push"), "git push --fixed")
        assert inner.side_effects == ["git push --fixed"]

    def test_side_effect_detection_for_plain_rules(self) -> None:
        assert not _PlainRule().has_side_effect()
        assert not for_app("ls")(_PlainRule()).has_side_effect()

    def test_requires_at_least_one_app(self) -> None:
        with pytest.raises(ValueError, match="app_names"):
            for_app()
        with pytest.raises(ValueError, match="app_names"):
            ForAppRule(_PlainRule(), ())


class TestRuleRegistry:
    def test_registration_is_sorted_and_creates_instances(self) -> None:
        registry = RuleRegistry()
        registry.register_builtin("plain", _PlainRule)
        registry.register_external("always", _AlwaysRule)

        assert registry.registered_names() == ("always", "plain")
        assert [item.source for item in registry.registrations()] == ["external", "builtin"]
        assert [rule.name for rule in registry.create_all()] == ["always", "plain"]
        assert registry.contains(" plain ")

    def test_duplicate_names_are_rejected(self) -> None:
        registry = RuleRegistry()
        registry.register_builtin("plain", _PlainRule)

        with pytest.raises(ValueError, match="already registered by builtin"):
            registry.register_external("plain", _PlainRule)

    def test_unknown_rule_lists_known_names(self) -> None:
        registry = RuleRegistry()
        registry.register_builtin("plain", _PlainRule)

        with pytest.raises(ValueError, match=r"unknown rule 'missing'; registered: \[plain\]"):
            registry.create("missing")

    def test_factory_must_return_matching_rule(self) -> None:
        registry = RuleRegistry()
        registry.register_builtin("renamed", _PlainRule)
        registry.register_builtin("bogus", lambda: object())  # type: ignore[arg-type,return-value]

        with pytest.raises(ValueError, match="returned rule named 'plain'"):
            registry.create("renamed")
        with pytest.raises(ValueError, match="did not return a Rule"):
            registry.create("bogus")

    def test_empty_names_are_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            RuleRegistry().register_builtin("  ", _PlainRule)

    def test_external_plugins_register_in_sorted_order(self) -> None:
        registry = RuleRegistry()
        registry.register_external_plugins({"plain": _PlainRule, "always": _AlwaysRule})

        assert registry.registered_names() == ("always", "plain")
        assert all(item.source == "external" for item in registry.registrations())


class TestRegisterBuiltinRule:
    def test_decorator_applies_wrapper(self) -> None:
        registry = RuleRegistry()

        @register_builtin_rule(wrap=for_app("make"), registry=registry)
        class MakeRule(_PlainRule):
            name = "make_rule"

        rule = registry.create("make_rule")
        assert isinstance(rule, ForAppRule)
        assert rule.app_names == ("make",)
        assert MakeRule.name == "make_rule"

    def test_decorator_requires_zero_arg_constructor(self) -> None:
        registry = RuleRegistry()

        class NeedsArgs(_PlainRule):
            name = "needs_args"

            def __init__(self, threshold: int) -> None:
                self.threshold = threshold

        with pytest.raises(ValueError, match="zero-arg constructor"):
            register_builtin_rule(registry=registry)(NeedsArgs)

    def test_register_external_rule_targets_given_registry(self) -> None:
        registry = RuleRegistry()
        register_external_rule("always", _AlwaysRule, registry=registry)

        assert registry.get_registration("always").source == "external"


def test_bundled_rules_are_registered() -> None:
    import shellfix.rules  # noqa: F401

    names = DEFAULT_RULE_REGISTRY.registered_names()
    for expected in ("sudo", "cd_parent", "no_command", "git_not_command", "dirty_unzip"):
        assert expected in names
