from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from common.policy_engine.engine import evaluate
from common.policy_engine.models import Decision, Expense, Money
from connectors.policies.store import PolicyStore

from .audit import AuditSink
from .explain import build_explanation
from .region import region_from_country

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "ride_hail"


class ExtractionPayload(BaseModel):
    """Receipt fields produced upstream (OCR / extraction)."""

    model_config = ConfigDict(populate_by_name=True)

    amount: Decimal
    currency: str = Field(min_length=3, max_length=3)
    date: str = Field(alias="dateISO")
    vendor: str = ""
    country: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("country", "pickupCountry"),
    )
    category: Optional[str] = None
    inferred_department: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("inferred_department", "inferredDepartment"),
    )
    confidence: Dict[str, float] = Field(default_factory=dict)


class SubmitRequest(BaseModel):
    extraction: ExtractionPayload
    answers: Dict[str, Any] = Field(default_factory=dict)
    overrides: Dict[str, Any] = Field(default_factory=dict)


class SubmitResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    decision: Decision
    explanation: str


def build_expense(
    extraction: ExtractionPayload,
    answers: Optional[Dict[str, Any]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Expense:
    """Clarification answers win over extracted fields; overrides win over derived region."""
    answers = answers or {}
    overrides = overrides or {}

    category = answers.get("category") or extraction.category or DEFAULT_CATEGORY
    country = answers.get("country") or extraction.country
    department = answers.get("department") or extraction.inferred_department
    region = overrides.get("region") or region_from_country(country)

    return Expense(
        date=extraction.date,
        region=region,
        department=department,
        category=category,
        total=Money(amount=extraction.amount, currency=extraction.currency),
    )


class SubmitPipeline:
    def __init__(self, *, store: PolicyStore, audit: AuditSink):
        self._store = store
        self._audit = audit

    def submit(self, request: SubmitRequest) -> SubmitResult:
        expense = build_expense(request.extraction, request.answers, request.overrides)
        active = self._store.snapshot().active_rules(expense.date)
        decision = evaluate(expense, active)
        explanation = build_explanation(decision, expense)

        self._audit.append(
            {
                "ts": datetime.now(timezone.utc).isoformat(),
                "extraction": {"confidence": request.extraction.confidence},
                "clarifications": len(request.answers),
                "answers": request.answers,
                "decision": decision.model_dump(mode="json", by_alias=True),
            }
        )
        logger.info(
            "routed %s %s expense: steps=%s skipped=%s",
            expense.region,
            expense.category,
            decision.steps,
            decision.skipped,
        )
        return SubmitResult(decision=decision, explanation=explanation)
