from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from .dates import parse_instant
from .models import Expense, Rule


def within_effective_window(rule: Rule, at: datetime) -> bool:
    """effective_from <= at <= effective_to (open-ended when effective_to is unset).

    Unparsable bounds fail closed: the rule is treated as not in effect.
    """
    start = parse_instant(rule.effective_from)
    if start is None or at < start:
        return False
    if rule.effective_to is not None and rule.effective_to != "":
        end = parse_instant(rule.effective_to)
        if end is None or at > end:
            return False
    return True


def _selector_matches(selector: Optional[str], value: Optional[str]) -> bool:
    if not selector:
        return True
    return selector == value


def selectors_match(rule: Rule, expense: Expense) -> bool:
    selectors = rule.selectors
    return (
        _selector_matches(selectors.region, expense.region)
        and _selector_matches(selectors.department, expense.department)
        and _selector_matches(selectors.category, expense.category)
    )


def rule_applies(rule: Rule, expense: Expense, at: datetime) -> bool:
    return within_effective_window(rule, at) and selectors_match(rule, expense)


def applicable_rules(rules: Iterable[Rule], expense: Expense, at: datetime) -> List[Rule]:
    return [rule for rule in rules if rule_applies(rule, expense, at)]
