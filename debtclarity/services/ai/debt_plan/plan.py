"""Seven-day plan synthesis."""

from __future__ import annotations

from typing import Any, Iterable

from .contracts import PLAN_DAYS, Debt, PlanStep
from .repair import repair_list, repair_plan_row

CANONICAL_REASON = (
    "Paying the minimum due keeps the account current and eases collection pressure "
    "while the rest of the plan takes effect."
)


def canonical_action(account_name: str) -> str:
    return f"Pay the minimum due on {account_name}"


def first_minimum_due(debts: Iterable[Debt]) -> Debt | None:
    for debt in debts:
        if debt.minimum_due is not None:
            return debt
    return None


def synthesize_plan(
    raw_plan: Any,
    debts: tuple[Debt, ...],
    disposable_income: float | None,
) -> tuple[PlanStep, ...]:
    """Repair the model's plan and pin the minimum payment to day 1 when it is affordable.

    Steps without a usable ``day`` take their 1-based position. When the first
    debt with a known minimum due fits inside disposable income, every day-1
    step is replaced by the canonical payment step; other days are untouched.
    The result never exceeds seven steps.
    """
    rows = repair_list(raw_plan, repair_plan_row, label="plan steps")
    steps = [
        PlanStep(**{**row, "day": row["day"] or position})
        for position, row in enumerate(rows, start=1)
        if (row["day"] or position) <= PLAN_DAYS
    ]

    debt = first_minimum_due(debts)
    if debt is not None and disposable_income is not None and disposable_income >= debt.minimum_due:
        payment = PlanStep(
            day=1,
            action=canonical_action(debt.account_name),
            reason=CANONICAL_REASON,
            estimated_cost=debt.minimum_due,
        )
        steps = [payment] + [step for step in steps if step.day != 1]

    return tuple(steps[:PLAN_DAYS])
