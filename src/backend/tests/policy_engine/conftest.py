from decimal import Decimal

import pytest

from common.policy_engine.models import Expense, Money, Rule


@pytest.fixture
def make_expense():
    def _make(
        *,
        amount="49",
        currency: str = "USD",
        date="2024-09-15T12:00:00Z",
        region: str = "US",
        department: str | None = "engineering",
        category: str = "ride_hail",
    ) -> Expense:
        return Expense(
            date=date,
            region=region,
            department=department,
            category=category,
            total=Money(amount=Decimal(str(amount)), currency=currency),
        )

    return _make


@pytest.fixture
def make_rule():
    def _make(
        rule_id: str,
        *,
        priority: int = 10,
        effective_from="2024-01-01T00:00:00Z",
        effective_to=None,
        selectors: dict | None = None,
        effect: dict | None = None,
        name: str = "",
    ) -> Rule:
        return Rule.model_validate(
            {
                "id": rule_id,
                "name": name or rule_id,
                "priority": priority,
                "effective_from": effective_from,
                "effective_to": effective_to,
                "selectors": selectors or {},
                "effect": effect or {},
            }
        )

    return _make


@pytest.fixture
def skip_below():
    def _make(step: str, amount, currency: str = "USD") -> dict:
        return {"skip_steps_below": [{"step": step, "amount": amount, "currency": currency}]}

    return _make
