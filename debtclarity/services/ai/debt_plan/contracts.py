"""Debt plan contracts: the typed shape every normalized model response takes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class DebtType(StrEnum):
    CREDIT_CARD = "credit_card"
    LOAN = "loan"
    UNKNOWN = "unknown"


class RiskTag(StrEnum):
    INFO = "info"
    PRESSURE = "pressure"
    INTIMIDATION = "intimidation"
    LEGAL_CLAIM = "legal_claim"


class ThreatClass(StrEnum):
    PSYCHOLOGICAL_PRESSURE = "psychological_pressure"
    HOUSE_VISIT_THREAT = "house_visit_threat"
    POLICE_THREAT = "police_threat"
    EMPLOYER_THREAT = "employer_threat"
    UNKNOWN = "unknown"


class RiskLevel(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    SEVERE = "severe"


PLAN_DAYS = 7
MAX_FOLLOW_UP_DAYS = 90


@dataclass(frozen=True)
class TrustedInputs:
    """Caller-supplied numbers; they outrank anything the model reports."""

    salary: float | None = None
    essentials: float | None = None


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class Debt(_Frozen):
    account_name: str = Field(min_length=1)
    type: DebtType = DebtType.UNKNOWN
    outstanding_balance: float | None = None
    minimum_due: float | None = None
    overdue_amount: float | None = None
    late_fees: float | None = None
    days_overdue: int | None = Field(default=None, ge=0)
    due_date: str | None = None


class CollectionMessage(_Frozen):
    text: str = Field(min_length=1)
    sender: str | None = None
    risk_tag: RiskTag = RiskTag.PRESSURE


class Extracted(_Frozen):
    salary: float | None = None
    essentials: float | None = None
    disposable_income: float | None = None
    currency: str | None = None
    debts: tuple[Debt, ...] = ()
    collection_messages: tuple[CollectionMessage, ...] = ()


class IntimidationFinding(_Frozen):
    classification: ThreatClass = ThreatClass.UNKNOWN
    evidence: str | None = None


class RiskAssessment(_Frozen):
    risk_level: RiskLevel = RiskLevel.MEDIUM
    collections_phase: int | None = Field(default=None, ge=0, le=4)
    stability_score_0_to_100: int = Field(ge=0, le=100)
    detected_intimidation: tuple[IntimidationFinding, ...] = ()
    summary: str


class PlanStep(_Frozen):
    day: int = Field(ge=1, le=PLAN_DAYS)
    action: str = Field(min_length=1)
    reason: str | None = None
    estimated_cost: float | None = None


class NegotiationScript(_Frozen):
    goal: str
    script: str
    what_not_to_say: tuple[str, ...]
    follow_up_window_days: int = Field(ge=1, le=MAX_FOLLOW_UP_DAYS)


class NormalizedResult(_Frozen):
    """Schema-conformant debt plan. Built fresh by ``normalize``; never mutated."""

    calm_summary: str
    extracted: Extracted
    risk_assessment: RiskAssessment
    next_7_days_plan: tuple[PlanStep, ...] = Field(default=(), max_length=PLAN_DAYS)
    negotiation_scripts: dict[str, NegotiationScript]
