"""Mock provider: deterministic responses for tests and local development."""

from __future__ import annotations

import json
import time

from .base import BaseProvider, ProviderResult

MOCK_RESPONSE: dict = {
    "calm_summary": "Mock plan: no model was called.",
    "extracted": {"debts": [], "collection_messages": []},
    "risk_assessment": {"risk_level": "low", "detected_intimidation": []},
    "next_7_days_plan": [
        {"day": 1, "action": "List every account and its minimum due", "reason": "Know the numbers first"},
    ],
    "negotiation_scripts": {},
}


class MockProvider(BaseProvider):
    name = "mock"

    def __init__(self, response: dict | None = None) -> None:
        self._response = response if response is not None else MOCK_RESPONSE

    async def generate(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        model: str = "",
        temperature: float = 0.2,
        max_tokens: int = 4096,
        timeout_seconds: float = 60.0,
        json_mode: bool = False,
    ) -> ProviderResult:
        t0 = time.monotonic()
        text = json.dumps(self._response)
        elapsed = (time.monotonic() - t0) * 1000
        return ProviderResult(
            raw_text=text,
            model=model or "mock-v1",
            provider=self.name,
            prompt_tokens=len(prompt.split()),
            completion_tokens=len(text.split()),
            latency_ms=round(elapsed, 2),
        )
