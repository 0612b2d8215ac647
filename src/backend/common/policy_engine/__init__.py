"""Deterministic approval-routing engine for expense policies.

This package intentionally contains only domain logic:
- Inputs are an expense and an already-loaded rule set.
- No file, network, or clock access lives here.
"""

from .dates import InvalidExpenseDate, parse_instant
from .engine import PolicyEngine, evaluate
from .models import (
    CANONICAL_STEP_ORDER,
    Decision,
    Expense,
    Money,
    Rule,
    RuleEffect,
    RuleHit,
    Selectors,
    Step,
)
