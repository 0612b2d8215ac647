from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

# Raw instant as supplied by collaborators; parsed lazily by the engine.
Instant = Union[datetime, date, str]


class Step(str, Enum):
    COMPLIANCE = "compliance"
    HR = "hr"
    IT = "it"
    MANAGER = "manager"
    FINANCE = "finance"


# Fixed engine policy: canonical walk order and the steps every decision starts from.
CANONICAL_STEP_ORDER: tuple[str, ...] = tuple(step.value for step in Step)
BASELINE_STEPS: tuple[str, ...] = (Step.FINANCE.value, Step.MANAGER.value)


def is_canonical_step(step: str) -> bool:
    return step in CANONICAL_STEP_ORDER


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Money(_Frozen):
    amount: Decimal
    currency: str = Field(min_length=3, max_length=3)


class Expense(_Frozen):
    date: Optional[Instant] = Field(default=None, alias="dateISO")
    region: str
    department: Optional[str] = None
    category: str
    total: Money


class Selectors(_Frozen):
    region: Optional[str] = None
    department: Optional[str] = None
    category: Optional[str] = None


class AmountCondition(_Frozen):
    model_config = ConfigDict(frozen=True, extra="forbid")

    amount_gt: Optional[Money] = None


class ConditionalRequirement(_Frozen):
    when: AmountCondition
    steps: List[str] = Field(min_length=1)


class SkipThreshold(_Frozen):
    step: str
    amount: Decimal
    currency: str = Field(min_length=3, max_length=3)


class RuleEffect(_Frozen):
    """Independent effect kinds; any subset may be present on one rule."""

    always_require_steps: Optional[List[str]] = None
    require_steps_if: Optional[List[ConditionalRequirement]] = None
    skip_steps_below: Optional[List[SkipThreshold]] = None
    category_routes: Optional[Dict[str, List[str]]] = None

    def kinds(self) -> List[str]:
        return [name for name in EFFECT_KIND_ORDER if getattr(self, name)]


EFFECT_KIND_ORDER: tuple[str, ...] = (
    "always_require_steps",
    "require_steps_if",
    "category_routes",
    "skip_steps_below",
)


class Rule(_Frozen):
    id: str
    name: str
    priority: int
    effective_from: Optional[Instant] = None
    effective_to: Optional[Instant] = None
    selectors: Selectors = Field(default_factory=Selectors)
    effect: RuleEffect = Field(default_factory=RuleEffect)
    comment: Optional[str] = None


class RuleHit(_Frozen):
    rule_id: str = Field(alias="ruleId")
    reason: str
    step: Optional[str] = None


class Decision(_Frozen):
    steps: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)
    rule_hits: List[RuleHit] = Field(default_factory=list, alias="ruleHits")


def format_amount(amount: Decimal) -> str:
    # 500, not 5E+2 or 500.00
    return format(amount.normalize(), "f")
