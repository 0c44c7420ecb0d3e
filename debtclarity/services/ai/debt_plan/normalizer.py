"""Normalizer: turns an arbitrary model response into a ``NormalizedResult``.

``normalize`` is pure and total: no I/O, no shared state, and any JSON value
(``None``, a list, a scalar, a half-formed object) comes back as a valid
result. Stages run in dependency order:

1. field coercion and collection repair of the extracted data;
2. threat detection over collection message text;
3. disposable income and stability score;
4. the seven-day plan;
5. negotiation scripts.
"""

from __future__ import annotations

from typing import Any

from .coercion import FieldSpec, as_mapping, coerce_fields, coerce_number
from .contracts import (
    Extracted,
    NormalizedResult,
    RiskAssessment,
    RiskLevel,
    TrustedInputs,
)
from .plan import synthesize_plan
from .repair import repair_debt, repair_finding, repair_list, repair_message
from .risk import compute_stability_score, detect_threats, resolve_income
from .scripts import complete_scripts

DEFAULT_CALM_SUMMARY = (
    "Your accounts and messages are organised below. "
    "Start with the first step of the 7-day plan and take one day at a time."
)
DEFAULT_RISK_SUMMARY = "Review the detected pressure tactics below and keep all communication in writing."

ROOT_FIELDS: dict[str, FieldSpec] = {
    "calm_summary": FieldSpec("text", max_len=1000, default=DEFAULT_CALM_SUMMARY),
}

EXTRACTED_FIELDS: dict[str, FieldSpec] = {
    "currency": FieldSpec("text", max_len=10),
}

RISK_FIELDS: dict[str, FieldSpec] = {
    "risk_level": FieldSpec("enum", enum=RiskLevel, default=RiskLevel.MEDIUM),
    "collections_phase": FieldSpec("integer", minimum=0, maximum=4),
    "summary": FieldSpec("text", max_len=600, default=DEFAULT_RISK_SUMMARY),
}


def normalize(model_output: Any, trusted: TrustedInputs | None = None) -> NormalizedResult:
    trusted = trusted or TrustedInputs()
    root = as_mapping(model_output)
    raw_extracted = as_mapping(root.get("extracted"))
    raw_risk = as_mapping(root.get("risk_assessment"))

    debts = repair_list(raw_extracted.get("debts"), repair_debt, label="debts")
    messages = repair_list(raw_extracted.get("collection_messages"), repair_message, label="messages")
    findings = detect_threats(
        messages,
        repair_list(raw_risk.get("detected_intimidation"), repair_finding, label="findings"),
    )

    salary, essentials, disposable = resolve_income(raw_extracted, trusted)
    currency = coerce_fields(raw_extracted, EXTRACTED_FIELDS)["currency"]

    risk_fields = coerce_fields(raw_risk, RISK_FIELDS)
    risk = RiskAssessment(
        **risk_fields,
        stability_score_0_to_100=compute_stability_score(disposable, findings, debts),
        detected_intimidation=findings,
    )

    return NormalizedResult(
        calm_summary=coerce_fields(root, ROOT_FIELDS)["calm_summary"],
        extracted=Extracted(
            salary=salary,
            essentials=essentials,
            disposable_income=disposable,
            currency=currency.upper() if currency else None,
            debts=debts,
            collection_messages=messages,
        ),
        risk_assessment=risk,
        next_7_days_plan=synthesize_plan(root.get("next_7_days_plan"), debts, disposable),
        negotiation_scripts=complete_scripts(root.get("negotiation_scripts"), debts),
    )


def describe_repairs(model_output: Any, result: NormalizedResult) -> dict[str, Any]:
    """Counters for the audit log: how much the engine had to change."""
    root = as_mapping(model_output)
    raw_extracted = as_mapping(root.get("extracted"))
    raw_risk = as_mapping(root.get("risk_assessment"))

    def _length(value: Any) -> int:
        return len(value) if isinstance(value, list) else 0

    supplied_findings = len(repair_list(raw_risk.get("detected_intimidation"), repair_finding))
    return {
        "output_was_object": isinstance(model_output, dict),
        "debts_dropped": _length(raw_extracted.get("debts")) - len(result.extracted.debts),
        "messages_dropped": _length(raw_extracted.get("collection_messages"))
        - len(result.extracted.collection_messages),
        "plan_steps_in": _length(root.get("next_7_days_plan")),
        "plan_steps_out": len(result.next_7_days_plan),
        "findings_derived": len(result.risk_assessment.detected_intimidation) - supplied_findings,
        "score_reported": coerce_number(raw_risk.get("stability_score_0_to_100")),
        "score_computed": result.risk_assessment.stability_score_0_to_100,
    }
