from __future__ import annotations

import logging
from typing import Iterable, Sequence

from .aggregator import aggregate_effects
from .dates import require_instant
from .models import Decision, Expense, Rule
from .resolver import resolve_steps

logger = logging.getLogger(__name__)


def evaluate(expense: Expense, rules: Iterable[Rule]) -> Decision:
    """Route an expense through the rule set.

    Raises InvalidExpenseDate when the expense date cannot be parsed; that check
    runs before anything else. Every other anomaly in rule data means the rule
    or effect simply does not apply.
    """
    at = require_instant(expense.date)

    acc = aggregate_effects(rules, expense, at)
    resolved = resolve_steps(acc.required_steps, acc.routed_steps, acc.skip_thresholds, expense)

    decision = Decision(
        steps=resolved.steps,
        skipped=resolved.skipped,
        rule_hits=[*acc.hits, *resolved.extra_hits],
    )
    logger.debug(
        "evaluated expense at %s: steps=%s skipped=%s hits=%d",
        at.isoformat(),
        decision.steps,
        decision.skipped,
        len(decision.rule_hits),
    )
    return decision


class PolicyEngine:
    """Evaluates expenses against one fixed rule-set snapshot."""

    def __init__(self, rules: Sequence[Rule]):
        self._rules: tuple[Rule, ...] = tuple(rules)

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def evaluate(self, expense: Expense) -> Decision:
        return evaluate(expense, self._rules)
