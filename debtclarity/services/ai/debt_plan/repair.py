"""Collection repair: per-element coercion with identity-based dropping."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from .coercion import FieldSpec, coerce_enum, coerce_fields
from .contracts import (
    PLAN_DAYS,
    CollectionMessage,
    Debt,
    DebtType,
    IntimidationFinding,
    RiskTag,
    ThreatClass,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

EVIDENCE_MAX_CHARS = 300
ACCOUNT_NAME_MAX_CHARS = 120

DEBT_FIELDS: dict[str, FieldSpec] = {
    "account_name": FieldSpec("text", max_len=ACCOUNT_NAME_MAX_CHARS),
    "type": FieldSpec("enum", enum=DebtType, default=DebtType.UNKNOWN),
    "outstanding_balance": FieldSpec("number"),
    "minimum_due": FieldSpec("number"),
    "overdue_amount": FieldSpec("number"),
    "late_fees": FieldSpec("number"),
    "days_overdue": FieldSpec("integer", minimum=0),
    "due_date": FieldSpec("text", max_len=40),
}

MESSAGE_FIELDS: dict[str, FieldSpec] = {
    "text": FieldSpec("text", max_len=2000),
    "sender": FieldSpec("text", max_len=120),
    "risk_tag": FieldSpec("enum", enum=RiskTag, default=RiskTag.PRESSURE),
}

FINDING_FIELDS: dict[str, FieldSpec] = {
    "classification": FieldSpec("enum", enum=ThreatClass, default=ThreatClass.UNKNOWN),
    "evidence": FieldSpec("text", max_len=EVIDENCE_MAX_CHARS),
}

PLAN_STEP_FIELDS: dict[str, FieldSpec] = {
    "day": FieldSpec("integer", minimum=1, maximum=PLAN_DAYS),
    "action": FieldSpec("text", max_len=300),
    "reason": FieldSpec("text", max_len=600),
    "estimated_cost": FieldSpec("number"),
}


def repair_list(raw: Any, rule: Callable[[Any], T | None], *, label: str = "items") -> tuple[T, ...]:
    """Run *rule* over every element of *raw*, keeping non-``None`` results in order.

    Non-list input yields an empty tuple.
    """
    if not isinstance(raw, list):
        return ()
    repaired = [item for item in (rule(element) for element in raw) if item is not None]
    dropped = len(raw) - len(repaired)
    if dropped:
        logger.debug("Dropped %d of %d %s without identity", dropped, len(raw), label)
    return tuple(repaired)


def repair_debt(raw: Any) -> Debt | None:
    if not isinstance(raw, dict):
        return None
    fields = coerce_fields(raw, DEBT_FIELDS)
    if not fields["account_name"]:
        return None
    return Debt(**fields)


def repair_message(raw: Any) -> CollectionMessage | None:
    # A bare string is a message with no sender or tag.
    if isinstance(raw, str):
        raw = {"text": raw}
    if not isinstance(raw, dict):
        return None
    fields = coerce_fields(raw, MESSAGE_FIELDS)
    if not fields["text"]:
        return None
    return CollectionMessage(**fields)


def repair_finding(raw: Any) -> IntimidationFinding | None:
    if isinstance(raw, str):
        return IntimidationFinding(classification=coerce_enum(raw, ThreatClass, ThreatClass.UNKNOWN))
    if not isinstance(raw, dict):
        return None
    return IntimidationFinding(**coerce_fields(raw, FINDING_FIELDS))


def repair_plan_row(raw: Any) -> dict[str, Any] | None:
    """Coerce one plan entry; ``day`` stays ``None`` until the plan backfills it."""
    if not isinstance(raw, dict):
        return None
    fields = coerce_fields(raw, PLAN_STEP_FIELDS)
    if not fields["action"]:
        return None
    return fields
