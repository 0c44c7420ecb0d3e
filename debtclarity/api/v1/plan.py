"""Debt plan endpoint: raw financial text in, normalized plan out."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, HTTPException

from debtclarity.schemas.plan import ErrorResponse, GeneratePlanRequest
from debtclarity.services.ai.common.errors import AIError
from debtclarity.services.ai.debt_plan.contracts import NormalizedResult

router = APIRouter()

logger = logging.getLogger(__name__)


@router.post(
    "/generate-plan",
    response_model=NormalizedResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Generate a normalized 7-day debt plan from raw financial text",
)
async def generate_plan_endpoint(body: GeneratePlanRequest | None = Body(default=None)):
    if body is None or not (body.raw_text or "").strip():
        raise HTTPException(400, "rawText is required")

    from debtclarity.services.ai.debt_plan.service import generate_debt_plan

    try:
        result = await generate_debt_plan(
            body.raw_text,
            salary=body.salary,
            essentials=body.essentials,
            override_provider=body.override_provider,
            override_model=body.override_model,
        )
    except AIError as exc:
        logger.warning("Debt plan generation failed: %s: %s", type(exc).__name__, exc)
        raise HTTPException(500, str(exc)) from exc

    return result.plan
