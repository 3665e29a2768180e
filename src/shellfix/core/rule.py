"""
shellfix — rule interface, app-scoped wrapper, and rule registry.

File: src/shellfix/core/rule.py

Purpose
- Define the capability every correction heuristic implements.
- Provide the generic app-scoped wrapper that adds a program-name precondition
  to any rule without touching the wrapped rule.
- Hold the deterministic factory registry the corrector draws rules from.

What should be included in this file
- ``Rule`` base class with metadata defaults and a no-op side effect.
- ``is_app`` / ``ForAppRule`` / ``for_app``.
- ``RuleRegistry`` and the ``register_builtin_rule`` class decorator.

Functional requirements
- Wrappers forward every capability except the one they override.
- Duplicate rule names are rejected at registration time.
- ``is_match`` and ``get_new_command`` must not depend on another rule's state.
"""

from __future__ import annotations

import abc
import inspect
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal, NoReturn, TypeVar

from shellfix.constants import DEFAULT_PRIORITY
from shellfix.core.command import Command

RuleSource = Literal["builtin", "external"]
RuleFactory = Callable[[], "Rule"]
RuleWrapper = Callable[["Rule"], "Rule"]


class Rule(abc.ABC):
    """One correction heuristic: a predicate plus a script transform."""

    name: str = ""
    priority: int = DEFAULT_PRIORITY
    enabled_by_default: bool = True
    requires_output: bool = True

    @abc.abstractmethod
    def is_match(self, command: Command) -> bool:
        """Return whether this rule applies to ``command``."""

    @abc.abstractmethod
    def get_new_command(self, command: Command) -> Sequence[str]:
        """Return candidate replacement scripts; only called after a match."""

    def side_effect(self, command: Command, new_script: str) -> None:
        """Hook invoked after ``new_script`` has been executed successfully."""

    def has_side_effect(self) -> bool:
        return type(self).side_effect is not Rule.side_effect

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, priority={self.priority})"


def is_app(command: Command, *app_names: str) -> bool:
    """Return whether the first token of ``command`` names one of ``app_names``."""

    if not command.parts:
        return False
    return command.app_name in app_names


class ForAppRule(Rule):
    """Restrict ``inner`` to commands whose program is one of ``app_names``."""

    def __init__(self, inner: Rule, app_names: Iterable[str]) -> None:
        apps = tuple(app_names)
        if not apps:
            _fail("app_names", "at least one application name is required")
        self.inner = inner
        self.app_names = apps

    @property  # type: ignore[override]
    def name(self) -> str:
        return self.inner.name

    @property  # type: ignore[override]
    def priority(self) -> int:
        return self.inner.priority

    @property  # type: ignore[override]
    def enabled_by_default(self) -> bool:
        return self.inner.enabled_by_default

    @property  # type: ignore[override]
    def requires_output(self) -> bool:
        return self.inner.requires_output

    def is_match(self, command: Command) -> bool:
        return is_app(command, *self.app_names) and self.inner.is_match(command)

    def get_new_command(self, command: Command) -> Sequence[str]:
        return self.inner.get_new_command(command)

    def side_effect(self, command: Command, new_script: str) -> None:
        self.inner.side_effect(command, new_script)

    def has_side_effect(self) -> bool:
        return self.inner.has_side_effect()

    def __repr__(self) -> str:
        return f"ForAppRule({self.inner!r}, app_names={self.app_names!r})"


def for_app(*app_names: str) -> RuleWrapper:
    """Return a wrapper that scopes a rule to ``app_names``.

    ``for_app("git", "hub")(rule)`` is equivalent to
    ``ForAppRule(rule, ("git", "hub"))``.
    """

    if not app_names:
        _fail("app_names", "at least one application name is required")

    def wrap(rule: Rule) -> Rule:
        return ForAppRule(rule, app_names)

    return wrap


@dataclass(frozen=True, slots=True)
class RuleRegistration:
    name: str
    source: RuleSource
    factory: RuleFactory


class RuleRegistry:
    """Deterministic rule factory registry."""

    def __init__(self) -> None:
        self._registrations: dict[str, RuleRegistration] = {}

    def register(self, name: str, factory: RuleFactory, *, source: RuleSource) -> None:
        normalized = _as_rule_name(name)
        if not callable(factory):
            _fail("factory", "must be callable")

        existing = self._registrations.get(normalized)
        if existing is not None:
            _fail("name", f"already registered by {existing.source} rule '{existing.name}'")

        self._registrations[normalized] = RuleRegistration(
            name=normalized,
            source=source,
            factory=factory,
        )

    def register_builtin(self, name: str, factory: RuleFactory) -> None:
        self.register(name, factory, source="builtin")

    def register_external(self, name: str, factory: RuleFactory) -> None:
        self.register(name, factory, source="external")

    def register_external_plugins(self, plugins: Mapping[str, RuleFactory]) -> None:
        for name in sorted(plugins):
            self.register_external(name, plugins[name])

    def contains(self, name: str) -> bool:
        return _as_rule_name(name) in self._registrations

    def get_registration(self, name: str) -> RuleRegistration:
        normalized = _as_rule_name(name)
        registration = self._registrations.get(normalized)
        if registration is None:
            known = ", ".join(self.registered_names())
            _fail("name", f"unknown rule {normalized!r}; registered: [{known}]")
        return registration

    def create(self, name: str) -> Rule:
        rule = self.get_registration(name).factory()
        if not isinstance(rule, Rule):
            _fail("factory", f"'{name}' factory did not return a Rule")
        if rule.name != name:
            _fail("factory", f"'{name}' factory returned rule named {rule.name!r}")
        return rule

    def create_all(self) -> tuple[Rule, ...]:
        return tuple(self.create(name) for name in self.registered_names())

    def registered_names(self) -> tuple[str, ...]:
        return tuple(sorted(self._registrations))

    def registrations(self) -> tuple[RuleRegistration, ...]:
        return tuple(self._registrations[key] for key in sorted(self._registrations))


RuleType = TypeVar("RuleType", bound=Rule)

DEFAULT_RULE_REGISTRY = RuleRegistry()


def register_builtin_rule(
    *,
    wrap: RuleWrapper | None = None,
    registry: RuleRegistry | None = None,
) -> Callable[[type[RuleType]], type[RuleType]]:
    """Decorator that registers a rule class under its ``name`` attribute.

    ``wrap`` is applied to every instance the registry creates, which is how
    app-scoped and ecosystem-scoped rules are declared.
    """

    target = registry if registry is not None else DEFAULT_RULE_REGISTRY

    def decorator(rule_cls: type[RuleType]) -> type[RuleType]:
        name = _as_rule_name(getattr(rule_cls, "name", ""))
        _validate_zero_arg_constructor(rule_cls, name=name)

        def factory() -> Rule:
            instance = rule_cls()
            return wrap(instance) if wrap is not None else instance

        target.register_builtin(name, factory)
        return rule_cls

    return decorator


def register_external_rule(
    name: str,
    factory: RuleFactory,
    *,
    registry: RuleRegistry | None = None,
) -> None:
    """External plugin surface for dynamic rule registration."""

    target = registry if registry is not None else DEFAULT_RULE_REGISTRY
    target.register_external(name, factory)


def _validate_zero_arg_constructor(rule_cls: type[object], *, name: str) -> None:
    signature = inspect.signature(rule_cls)
    for parameter in signature.parameters.values():
        if (
            parameter.kind
            in {
                inspect.Parameter.POSITIONAL_ONLY,
                inspect.Parameter.POSITIONAL_OR_KEYWORD,
                inspect.Parameter.KEYWORD_ONLY,
            }
            and parameter.default is inspect.Signature.empty
        ):
            _fail(
                "rule_cls",
                (
                    f"{name!r} rule decorator requires a zero-arg constructor; "
                    f"parameter '{parameter.name}' is required"
                ),
            )


def _as_rule_name(value: object) -> str:
    if not isinstance(value, str):
        _fail("name", f"expected string, got {type(value).__name__}")
    normalized = value.strip()
    if not normalized:
        _fail("name", "must not be empty")
    return normalized


def _fail(path: str, message: str) -> NoReturn:
    raise ValueError(f"{path}: {message}")


__all__ = [
    "DEFAULT_RULE_REGISTRY",
    "ForAppRule",
    "Rule",
    "RuleFactory",
    "RuleRegistration",
    "RuleRegistry",
    "RuleSource",
    "RuleWrapper",
    "for_app",
    "is_app",
    "register_builtin_rule",
    "register_external_rule",
]
