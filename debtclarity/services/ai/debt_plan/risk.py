"""Derived risk figures: threat detection, disposable income, stability score.

The stability score is owned here. Whatever score the model reported is
ignored; the value is recomputed from disposable income, intimidation
findings and minimum dues so that identical inputs always give the same
integer.
"""

from __future__ import annotations

import math
import re
from typing import Any, Iterable, Mapping

from .coercion import coerce_number
from .contracts import CollectionMessage, Debt, IntimidationFinding, ThreatClass, TrustedInputs
from .repair import EVIDENCE_MAX_CHARS

SCORE_BASE_STABLE = 70
SCORE_BASE_STRAINED = 45
PENALTY_HOUSE_VISIT = 10
PENALTY_POLICE = 20
PENALTY_MINIMUMS_UNAFFORDABLE = 15

# Court, lawsuit and travel-ban wording is classified as a police threat.
THREAT_LEXICON: dict[ThreatClass, re.Pattern[str]] = {
    ThreatClass.HOUSE_VISIT_THREAT: re.compile(
        r"\b(?:house|home|residence|field)\s+visit"
        r"|\bvisit\s+(?:you\s+at\s+)?(?:your\s+)?(?:home|house|residence|address|family)"
        r"|\bcome\s+to\s+your\s+(?:home|house|door|address|residence)"
        r"|\bat\s+your\s+door(?:step)?\b",
        re.IGNORECASE,
    ),
    ThreatClass.POLICE_THREAT: re.compile(
        r"\bpolice\b"
        r"|\bcriminal\s+(?:case|complaint|charges?)"
        r"|\barrest"
        r"|\btravel\s+ban"
        r"|\bcourt\b"
        r"|\blawsuit\b"
        r"|\blegal\s+(?:action|proceedings?|case)"
        r"|\bcase\s+(?:will\s+be\s+|has\s+been\s+)?(?:filed|registered)",
        re.IGNORECASE,
    ),
    ThreatClass.EMPLOYER_THREAT: re.compile(
        r"\bemployer\b"
        r"|\bhr\s+department\b"
        r"|\bcontact\s+your\s+(?:company|office|workplace|manager|hr|colleagues)"
        r"|\bsalary\s+(?:block|freeze|attachment)",
        re.IGNORECASE,
    ),
}


def trusted_number(value: Any) -> float | None:
    """Only real, finite numbers count as caller-supplied."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def detect_threats(
    messages: Iterable[CollectionMessage],
    findings: tuple[IntimidationFinding, ...],
) -> tuple[IntimidationFinding, ...]:
    """Append one finding per lexicon class that matches a message but is not yet reported.

    Existing findings are kept as-is and in order.
    """
    present = {finding.classification for finding in findings}
    derived: list[IntimidationFinding] = []
    for message in messages:
        for classification, pattern in THREAT_LEXICON.items():
            if classification in present or not pattern.search(message.text):
                continue
            derived.append(
                IntimidationFinding(
                    classification=classification,
                    evidence=message.text[:EVIDENCE_MAX_CHARS].rstrip(),
                )
            )
            present.add(classification)
    return findings + tuple(derived)


def resolve_income(
    raw_extracted: Mapping[str, Any],
    trusted: TrustedInputs,
) -> tuple[float | None, float | None, float | None]:
    """Return ``(salary, essentials, disposable_income)``.

    Precedence: caller numbers > model-reported numbers > unknown. The
    disposable figure is ``salary - essentials`` when both are known,
    otherwise whatever the model reported directly.
    """
    salary = trusted_number(trusted.salary)
    if salary is None:
        salary = coerce_number(raw_extracted.get("salary"))
    essentials = trusted_number(trusted.essentials)
    if essentials is None:
        essentials = coerce_number(raw_extracted.get("essentials"))

    disposable: float | None = None
    if salary is not None and essentials is not None:
        disposable = salary - essentials
        if not math.isfinite(disposable):
            disposable = None
    if disposable is None:
        disposable = coerce_number(raw_extracted.get("disposable_income"))
    return salary, essentials, disposable


def minimum_due_total(debts: Iterable[Debt]) -> float:
    return sum(debt.minimum_due for debt in debts if debt.minimum_due is not None)


def compute_stability_score(
    disposable_income: float | None,
    findings: Iterable[IntimidationFinding],
    debts: Iterable[Debt],
) -> int:
    classifications = {finding.classification for finding in findings}

    score = SCORE_BASE_STABLE if disposable_income is not None and disposable_income >= 0 else SCORE_BASE_STRAINED
    if ThreatClass.HOUSE_VISIT_THREAT in classifications:
        score -= PENALTY_HOUSE_VISIT
    if ThreatClass.POLICE_THREAT in classifications:
        score -= PENALTY_POLICE

    min_sum = minimum_due_total(debts)
    if min_sum > 0 and disposable_income is not None and disposable_income < min_sum:
        score -= PENALTY_MINIMUMS_UNAFFORDABLE

    return max(0, min(100, score))
