"""Tests for generate_debt_plan.

Covers:
- Happy path with a patched provider: normalized plan, trusted inputs in prompt
- Provider failures surface as ProviderCallError
- Unparseable model text surfaces as ModelOutputError
- Parseable but wrong output is repaired, never an error
"""

import asyncio
import json
import os
import unittest
from unittest.mock import AsyncMock, patch

_ENV = {
    "AI_DEBT_PLAN_PROVIDER": "mock",
    "AI_DEBT_PLAN_MODEL": "",
    "AI_ALLOWED_PROVIDERS": "mock",
    "ENABLE_AI_OVERRIDES": "false",
}


def _provider_returning(raw_text):
    from debtclarity.services.ai.common.providers.base import ProviderResult

    provider = AsyncMock()
    provider.name = "mock"
    provider.generate.return_value = ProviderResult(
        raw_text=raw_text,
        model="test-model",
        provider="mock",
        prompt_tokens=100,
        completion_tokens=50,
        latency_ms=12.0,
    )
    return provider


class DebtPlanServiceTests(unittest.TestCase):
    @patch.dict(os.environ, _ENV, clear=False)
    def test_plan_is_normalized_and_trusted_inputs_win(self):
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        model_json = json.dumps(
            {
                "extracted": {
                    "salary": 5000,
                    "essentials": 7000,
                    "debts": [{"account_name": "ENBD Card", "minimum_due": 300}],
                },
                "risk_assessment": {"stability_score_0_to_100": 5},
                "next_7_days_plan": [{"day": 1, "action": "Panic"}, {"day": 2, "action": "Call ENBD"}],
            }
        )
        provider = _provider_returning(f"Sure! ```json\n{model_json}\n```")

        with patch("debtclarity.services.ai.common.router.get_provider", return_value=provider):
            result = asyncio.run(generate_debt_plan("ENBD card min due 300", salary=10000, essentials=7000))

        plan = result.plan
        self.assertEqual(plan.extracted.salary, 10000.0)
        self.assertEqual(plan.extracted.disposable_income, 3000.0)
        self.assertEqual(plan.risk_assessment.stability_score_0_to_100, 70)
        self.assertEqual(plan.next_7_days_plan[0].estimated_cost, 300.0)
        self.assertEqual(plan.next_7_days_plan[1].action, "Call ENBD")
        self.assertEqual(list(plan.negotiation_scripts), ["default", "ENBD Card"])
        self.assertEqual(result.provider_result.model, "test-model")

        prompt = provider.generate.call_args.args[0]
        kwargs = provider.generate.call_args.kwargs
        self.assertIn("Salary (AED): 10000", prompt)
        self.assertIn("Essentials (AED): 7000", prompt)
        self.assertTrue(kwargs["json_mode"])
        self.assertIn("next_7_days_plan", kwargs["system_prompt"])

    @patch.dict(os.environ, _ENV, clear=False)
    def test_non_numeric_context_is_unknown(self):
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        provider = _provider_returning("{}")
        with patch("debtclarity.services.ai.common.router.get_provider", return_value=provider):
            result = asyncio.run(generate_debt_plan("text", salary="10000", essentials=True))

        prompt = provider.generate.call_args.args[0]
        self.assertIn("Salary (AED): unknown", prompt)
        self.assertIn("Essentials (AED): unknown", prompt)
        self.assertIsNone(result.plan.extracted.disposable_income)

    @patch.dict(os.environ, {**_ENV, "AI_MAX_INPUT_CHARS": "500"}, clear=False)
    def test_raw_text_is_truncated_in_prompt(self):
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        provider = _provider_returning("{}")
        with patch("debtclarity.services.ai.common.router.get_provider", return_value=provider):
            asyncio.run(generate_debt_plan("x" * 2000))

        prompt = provider.generate.call_args.args[0]
        self.assertIn("x" * 500, prompt)
        self.assertNotIn("x" * 501, prompt)

    @patch.dict(os.environ, _ENV, clear=False)
    def test_provider_exception_becomes_provider_call_error(self):
        from debtclarity.services.ai.common.errors import ProviderCallError
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        provider = AsyncMock()
        provider.name = "mock"
        provider.generate.side_effect = TimeoutError("too slow")
        with patch("debtclarity.services.ai.common.router.get_provider", return_value=provider):
            with self.assertRaises(ProviderCallError):
                asyncio.run(generate_debt_plan("text"))

    @patch.dict(os.environ, _ENV, clear=False)
    def test_unparseable_output_is_model_output_error(self):
        from debtclarity.services.ai.common.errors import ModelOutputError
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        provider = _provider_returning("I'm sorry, I can't help with that.")
        with patch("debtclarity.services.ai.common.router.get_provider", return_value=provider):
            with self.assertRaises(ModelOutputError):
                asyncio.run(generate_debt_plan("text"))

    @patch.dict(os.environ, _ENV, clear=False)
    def test_wrong_shape_is_repaired(self):
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        provider = _provider_returning('["not", "an", "object"]')
        with patch("debtclarity.services.ai.common.router.get_provider", return_value=provider):
            result = asyncio.run(generate_debt_plan("text"))

        self.assertEqual(result.plan.extracted.debts, ())
        self.assertIn("default", result.plan.negotiation_scripts)

    @patch.dict(os.environ, _ENV, clear=False)
    def test_builtin_mock_provider_end_to_end(self):
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        result = asyncio.run(generate_debt_plan("hello"))
        self.assertEqual(result.provider_result.provider, "mock")
        self.assertEqual(result.plan.next_7_days_plan[0].day, 1)
        self.assertGreaterEqual(result.total_latency_ms, 0)

    @patch.dict(os.environ, {**_ENV, "AI_DEBT_PLAN_PROVIDER": "openai", "OPENAI_API_KEY": ""}, clear=False)
    def test_missing_credential_is_unavailable(self):
        from debtclarity.services.ai.common.errors import ProviderUnavailableError
        from debtclarity.services.ai.debt_plan.service import generate_debt_plan

        with self.assertRaises(ProviderUnavailableError):
            asyncio.run(generate_debt_plan("text"))
