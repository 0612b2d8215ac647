from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from .aggregator import RetainedThreshold
from .models import (
    BASELINE_STEPS,
    CANONICAL_STEP_ORDER,
    Expense,
    RuleHit,
    format_amount,
    is_canonical_step,
)


@dataclass(frozen=True)
class ResolvedSteps:
    steps: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    extra_hits: List[RuleHit] = field(default_factory=list)


def baseline_steps(required: Mapping[str, None], routed: Mapping[str, None]) -> Dict[str, None]:
    base: Dict[str, None] = {}
    for step in (*routed, *required, *BASELINE_STEPS):
        base.setdefault(step, None)
    return base


def _should_skip(
    step: str,
    threshold: RetainedThreshold | None,
    required: Mapping[str, None],
    expense: Expense,
) -> bool:
    if threshold is None or step in required:
        return False
    total = expense.total
    return total.currency == threshold.currency and total.amount <= threshold.amount


def resolve_steps(
    required: Mapping[str, None],
    routed: Mapping[str, None],
    skip_thresholds: Mapping[str, RetainedThreshold],
    expense: Expense,
) -> ResolvedSteps:
    """Walk the canonical order, then append custom steps: routed ones, then required ones.

    A required step is never skipped. Custom steps are never skipped.
    """
    base = baseline_steps(required, routed)
    steps: List[str] = []
    skipped: List[str] = []
    hits: List[RuleHit] = []

    for step in CANONICAL_STEP_ORDER:
        if step not in base:
            continue
        threshold = skip_thresholds.get(step)
        if _should_skip(step, threshold, required, expense):
            skipped.append(step)
            hits.append(
                RuleHit(
                    rule_id=threshold.rule_id,
                    reason=f"skip_steps_below(<={format_amount(threshold.amount)} {threshold.currency})",
                    step=step,
                )
            )
            continue
        steps.append(step)

    steps.extend(step for step in base if not is_canonical_step(step))
    return ResolvedSteps(steps=steps, skipped=skipped, extra_hits=hits)
