"""Fold applicable rules into routing accumulators and an audit trail.

Rules are applied in ascending priority. Ties keep the order the rule set was
supplied in (``sorted`` is stable), so callers that care about tie order must
pass rules in a meaningful order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from .applicability import applicable_rules
from .models import Expense, Money, Rule, RuleHit, format_amount


@dataclass(frozen=True)
class RetainedThreshold:
    step: str
    amount: Decimal
    currency: str
    rule_id: str


@dataclass
class EffectAccumulator:
    # dicts used as insertion-ordered sets
    required_steps: Dict[str, None] = field(default_factory=dict)
    routed_steps: Dict[str, None] = field(default_factory=dict)
    skip_thresholds: Dict[str, RetainedThreshold] = field(default_factory=dict)
    hits: List[RuleHit] = field(default_factory=list)

    def require(self, step: str, rule_id: str, reason: str) -> None:
        self.required_steps.setdefault(step, None)
        self.hits.append(RuleHit(rule_id=rule_id, reason=reason, step=step))

    def route(self, step: str, rule_id: str, reason: str) -> None:
        self.routed_steps.setdefault(step, None)
        self.hits.append(RuleHit(rule_id=rule_id, reason=reason, step=step))

    def offer_threshold(self, candidate: RetainedThreshold) -> None:
        existing = self.skip_thresholds.get(candidate.step)
        if existing is None or candidate.amount > existing.amount:
            self.skip_thresholds[candidate.step] = candidate


def amount_exceeds(total: Money, threshold: Optional[Money]) -> bool:
    """Strict ``>`` in the same currency; a currency mismatch never fires."""
    if threshold is None:
        return False
    if total.currency != threshold.currency:
        return False
    return total.amount > threshold.amount


def order_by_priority(rules: Iterable[Rule]) -> List[Rule]:
    return sorted(rules, key=lambda rule: rule.priority)


def apply_rule(acc: EffectAccumulator, rule: Rule, expense: Expense) -> None:
    effect = rule.effect
    total = expense.total

    for step in effect.always_require_steps or []:
        acc.require(step, rule.id, "always_require_steps")

    for requirement in effect.require_steps_if or []:
        threshold = requirement.when.amount_gt
        if not amount_exceeds(total, threshold):
            continue
        reason = f"require_steps_if.amount_gt(>{format_amount(threshold.amount)} {threshold.currency})"
        for step in requirement.steps:
            acc.require(step, rule.id, reason)

    if effect.category_routes:
        for step in effect.category_routes.get(expense.category) or []:
            acc.route(step, rule.id, f"category_routes.{expense.category}")

    # Thresholds only become audit hits when the resolver actually skips a step.
    for threshold in effect.skip_steps_below or []:
        if threshold.currency != total.currency:
            continue
        acc.offer_threshold(
            RetainedThreshold(
                step=threshold.step,
                amount=threshold.amount,
                currency=threshold.currency,
                rule_id=rule.id,
            )
        )


def aggregate_effects(rules: Iterable[Rule], expense: Expense, at: datetime) -> EffectAccumulator:
    acc = EffectAccumulator()
    for rule in order_by_priority(applicable_rules(rules, expense, at)):
        apply_rule(acc, rule, expense)
    return acc
