from __future__ import annotations

from common.policy_engine.dates import parse_instant
from common.policy_engine.models import Decision, Expense


def build_explanation(decision: Decision, expense: Expense) -> str:
    step_list = ", ".join(decision.steps) if decision.steps else "no approvers"
    skipped_list = ", ".join(decision.skipped) if decision.skipped else "none"
    hit_summary = "; ".join(f"{hit.rule_id} ({hit.reason})" for hit in decision.rule_hits)

    when = parse_instant(expense.date)
    date_text = when.date().isoformat() if when else str(expense.date)

    return (
        f"For the {expense.region} {expense.category} expense on {date_text}, "
        f"the workflow includes {step_list}. Skipped steps: {skipped_list}. "
        f"Rule hits: {hit_summary or 'n/a'}."
    )
