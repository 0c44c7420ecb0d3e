"""Debt plan generation service.

One provider call per request, no retries. The provider answers in JSON
mode; the parsed value is treated as untrusted and always goes through
``normalize`` before it is returned. Caller-supplied salary and essentials
are passed to the model as context and then enforced again during
normalization.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any

from debtclarity.core.config import get_settings

from ..common import router as ai_router
from ..common.audit import log_ai_run
from ..common.errors import AIError, ProviderCallError
from ..common.json_tools import parse_model_json
from ..common.providers.base import ProviderResult
from .contracts import NormalizedResult, TrustedInputs
from .normalizer import describe_repairs, normalize
from .risk import trusted_number

logger = logging.getLogger(__name__)

DEBT_PLAN_SYSTEM_PROMPT = """You are a calm, practical assistant for a UAE debt-clarity tool.

From the user's raw financial text:
1) Extract salary, essential expenses, debts and collection messages.
2) Classify pressure and intimidation in the collection messages.
3) Propose a realistic plan for the next 7 days.
4) Write short negotiation scripts.

Output a single JSON object with exactly this structure:

{
  "calm_summary": string,
  "extracted": {
    "salary": number | null,
    "essentials": number | null,
    "disposable_income": number | null,
    "currency": string | null,
    "debts": [
      {
        "account_name": string,
        "type": "credit_card" | "loan" | "unknown",
        "outstanding_balance": number | null,
        "minimum_due": number | null,
        "overdue_amount": number | null,
        "late_fees": number | null,
        "days_overdue": number | null,
        "due_date": string | null
      }
    ],
    "collection_messages": [
      {
        "text": string,
        "sender": string | null,
        "risk_tag": "info" | "pressure" | "intimidation" | "legal_claim"
      }
    ]
  },
  "risk_assessment": {
    "risk_level": "low" | "medium" | "high" | "severe",
    "collections_phase": 0 | 1 | 2 | 3 | 4,
    "detected_intimidation": [
      {
        "classification": "psychological_pressure" | "house_visit_threat" | "police_threat" | "employer_threat" | "unknown",
        "evidence": string
      }
    ],
    "summary": string
  },
  "next_7_days_plan": [
    {"day": 1, "action": string, "reason": string, "estimated_cost": number | null}
  ],
  "negotiation_scripts": {
    "default": {
      "goal": string,
      "script": string,
      "what_not_to_say": [string],
      "follow_up_window_days": number
    },
    "<account_name>": { same fields as default }
  }
}

Rules:
- Output ONLY valid JSON. No explanations, no comments, no markdown.
- If a field is unknown, set it to null or [].
- Do not invent numbers or dates that are not clearly visible in the text.
- If salary and essentials are provided as numeric context, use them.
- Assume the user is in the UAE; use AED only when the text does not contradict it.
- Collections phase:
  0 = no collections, normal reminders
  1 = soft reminders, overdue but polite
  2 = hard collections, strong pressure
  3 = pre-legal, legal department, house-visit threats
  4 = explicit police case, travel ban, employer or court threats
- Protect essentials first (rent, food, transport, children).
- Never suggest new loans or borrowing.
- Scripts: no legal advice, no instructions to stop paying, no threats,
  no promises of outcomes; polite, short and neutral.
"""


@dataclass
class DebtPlanServiceResult:
    """Result from ``generate_debt_plan`` including provider metadata."""

    plan: NormalizedResult
    provider_result: ProviderResult
    total_latency_ms: float


def build_user_prompt(raw_text: str, trusted: TrustedInputs, *, max_chars: int) -> str:
    def _fmt(value: float | None) -> str:
        if value is None:
            return "unknown"
        return f"{value:.2f}".rstrip("0").rstrip(".")

    return (
        "RAW_TEXT:\n"
        f"{raw_text[:max_chars]}\n\n"
        "NUMERIC CONTEXT:\n"
        f"Salary (AED): {_fmt(trusted.salary)}\n"
        f"Essentials (AED): {_fmt(trusted.essentials)}\n"
    )


async def generate_debt_plan(
    raw_text: str,
    *,
    salary: Any = None,
    essentials: Any = None,
    override_provider: str | None = None,
    override_model: str | None = None,
) -> DebtPlanServiceResult:
    """Generate and normalize a debt plan for *raw_text*.

    Raises ``ProviderUnavailableError``, ``ProviderCallError`` or
    ``ModelOutputError``; a response that parses is never an error, however
    wrong its contents.
    """
    settings = get_settings()
    trusted = TrustedInputs(salary=trusted_number(salary), essentials=trusted_number(essentials))

    config = ai_router.resolve(
        "debt_plan",
        override_provider=override_provider,
        override_model=override_model,
    )
    prompt = build_user_prompt(raw_text, trusted, max_chars=settings.ai_max_input_chars)

    t0 = time.monotonic()
    try:
        result = await config.provider.generate(
            prompt,
            system_prompt=DEBT_PLAN_SYSTEM_PROMPT,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            timeout_seconds=config.timeout_seconds,
            json_mode=True,
        )
    except AIError:
        raise
    except Exception as exc:
        logger.exception("AI debt plan generation failed")
        raise ProviderCallError(str(exc)) from exc

    raw_value = parse_model_json(result.raw_text)
    plan = normalize(raw_value, trusted)
    total_ms = (time.monotonic() - t0) * 1000

    log_ai_run(
        scope="debt_plan",
        provider_result=result,
        prompt_text=prompt,
        extra_meta={
            "input_length": len(raw_text),
            "trusted_salary": trusted.salary is not None,
            "trusted_essentials": trusted.essentials is not None,
            **describe_repairs(raw_value, plan),
        },
    )

    return DebtPlanServiceResult(
        plan=plan,
        provider_result=result,
        total_latency_ms=round(total_ms, 2),
    )
