"""
shellfix — corrector.

File: src/shellfix/core/corrector.py

Purpose
- Turn one failed ``Command`` into the ranked, deduplicated and truncated list
  of ``CorrectedCommand`` values, given explicit settings and rules.

What should be included in this file
- Rule enablement (exclusion wins, ``ALL`` enables default-on rules).
- Per-rule evaluation with failure containment.
- Sorting, deduplication by script, and truncation.
- A concurrent variant that evaluates rules on worker threads.

Functional requirements
- Rules with ``requires_output`` are never tested against empty output.
- Candidates identical to the original script are dropped.
- The result is independent of rule iteration order.
- One failing rule never aborts the pass.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final

from shellfix.config.settings import Settings
from shellfix.core.corrected import CorrectedCommand, SideEffect
from shellfix.observability.logging import correlation_scope
from shellfix.utils.concurrency import WorkerPool

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from shellfix.core.command import Command
    from shellfix.core.rule import Rule

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY: Final[int] = 8


def is_rule_enabled(rule: Rule, settings: Settings) -> bool:
    return settings.is_rule_enabled(rule.name, enabled_by_default=rule.enabled_by_default)


def organize_corrections(
    corrections: Iterable[CorrectedCommand],
    limit: int = 0,
) -> list[CorrectedCommand]:
    """Sort by ``(priority, script)``, keep the first of each script, then truncate.

    A non-positive ``limit`` keeps every correction.
    """

    seen: set[str] = set()
    organized: list[CorrectedCommand] = []
    for corrected in sorted(corrections, key=CorrectedCommand.sort_key):
        if corrected.script in seen:
            continue
        seen.add(corrected.script)
        organized.append(corrected)
    if limit > 0:
        del organized[limit:]
    return organized


def get_corrected_commands(
    command: Command,
    settings: Settings,
    rules: Sequence[Rule] | None = None,
) -> list[CorrectedCommand]:
    """Return the ranked corrections for ``command``; ``rules=None`` means all bundled rules."""

    candidates: list[CorrectedCommand] = []
    for rule in _active_rules(command, settings, rules):
        candidates.extend(_evaluate_rule(rule, command, settings))
    return organize_corrections(candidates, settings.num_close_matches)


async def get_corrected_commands_async(
    command: Command,
    settings: Settings,
    rules: Sequence[Rule] | None = None,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> list[CorrectedCommand]:
    """Concurrent twin of ``get_corrected_commands`` with an identical result."""

    active = _active_rules(command, settings, rules)
    pool: WorkerPool[list[CorrectedCommand]] = WorkerPool(max_concurrency=max_concurrency)
    per_rule = await pool.map_blocking(
        lambda rule: _evaluate_rule(rule, command, settings),
        active,
    )
    candidates = [corrected for batch in per_rule for corrected in batch]
    return organize_corrections(candidates, settings.num_close_matches)


def get_best_correction(
    command: Command,
    settings: Settings,
    rules: Sequence[Rule] | None = None,
) -> CorrectedCommand | None:
    corrections = get_corrected_commands(command, settings, rules)
    return corrections[0] if corrections else None


def match_rule(
    command: Command,
    rule_name: str,
    rules: Sequence[Rule] | None = None,
    settings: Settings | None = None,
) -> list[CorrectedCommand]:
    """Run one named rule regardless of whether it is enabled.

    Corrections keep the order the rule produced them in and carry the
    rule's priority (after ``settings.priority`` overrides) and side effect.
    Unknown names yield nothing.
    """

    for rule in _resolve_rules(rules):
        if rule.name == rule_name:
            return _evaluate_rule(rule, command, settings or Settings())
    return []


def _resolve_rules(rules: Sequence[Rule] | None) -> Sequence[Rule]:
    if rules is not None:
        return rules
    from shellfix.rules import get_all_rules

    return get_all_rules()


def _active_rules(
    command: Command,
    settings: Settings,
    rules: Sequence[Rule] | None,
) -> list[Rule]:
    active: list[Rule] = []
    for rule in _resolve_rules(rules):
        if not is_rule_enabled(rule, settings):
            continue
        if rule.requires_output and not command.output:
            continue
        active.append(rule)
    return active


def _evaluate_rule(rule: Rule, command: Command, settings: Settings) -> list[CorrectedCommand]:
    with correlation_scope(rule=rule.name):
        try:
            if not rule.is_match(command):
                return []
            scripts = list(rule.get_new_command(command))
        except Exception:
            logger.exception(
                "rule %s failed on %r; treating it as not matching", rule.name, command.script
            )
            return []

        priority = settings.get_rule_priority(rule.name, rule.priority)
        side_effect = SideEffect(rule=rule, command=command) if rule.has_side_effect() else None
        corrections = [
            CorrectedCommand(script=script, priority=priority, side_effect=side_effect)
            for script in scripts
            if script != command.script
        ]
        if corrections:
            logger.debug("rule %s proposed %d correction(s)", rule.name, len(corrections))
        return corrections


__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "get_best_correction",
    "get_corrected_commands",
    "get_corrected_commands_async",
    "is_rule_enabled",
    "match_rule",
    "organize_corrections",
]
