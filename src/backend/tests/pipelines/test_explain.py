from decimal import Decimal

from common.policy_engine.models import Decision, Expense, Money, RuleHit
from pipelines.explain import build_explanation


def _expense(**kwargs):
    data = dict(
        date="2024-09-15T12:00:00Z",
        region="US",
        category="ride_hail",
        total=Money(amount=Decimal("49"), currency="USD"),
    )
    data.update(kwargs)
    return Expense(**data)


def test_explanation_lists_steps_skips_and_hits():
    decision = Decision(
        steps=["finance"],
        skipped=["manager"],
        rule_hits=[RuleHit(rule_id="US-RIDE", reason="skip_steps_below(<=50 USD)", step="manager")],
    )
    text = build_explanation(decision, _expense())
    assert text == (
        "For the US ride_hail expense on 2024-09-15, the workflow includes finance. "
        "Skipped steps: manager. Rule hits: US-RIDE (skip_steps_below(<=50 USD))."
    )


def test_explanation_placeholders_when_empty():
    text = build_explanation(Decision(), _expense())
    assert "includes no approvers" in text
    assert "Skipped steps: none" in text
    assert "Rule hits: n/a." in text
