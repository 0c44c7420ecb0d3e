"""Provider factory: returns the configured provider instance."""

from __future__ import annotations

import logging

from debtclarity.core.config import get_settings

from ..errors import ProviderUnavailableError
from .base import BaseProvider, ProviderResult
from .mock import MockProvider

logger = logging.getLogger(__name__)

__all__ = ["get_provider", "BaseProvider", "ProviderResult", "MockProvider"]


def get_provider(provider_name: str) -> BaseProvider:
    """Return a provider instance for *provider_name*.

    Raises ``ProviderUnavailableError`` when the provider is not in the
    allowlist, is unknown, or has no API key configured.
    """
    settings = get_settings()
    name = provider_name.lower().strip()

    if name not in settings.ai_allowed_providers:
        logger.warning("Provider %r not in allowlist %r", name, settings.ai_allowed_providers)
        raise ProviderUnavailableError(f"provider {name!r} is not allowed")

    if name == "mock":
        return MockProvider()

    if name == "openai":
        if not settings.openai_api_key:
            logger.error("OPENAI_API_KEY not set")
            raise ProviderUnavailableError("OPENAI_API_KEY is not configured")
        from .openai import OpenAIProvider

        return OpenAIProvider(api_key=settings.openai_api_key)

    logger.warning("Unknown provider %r", name)
    raise ProviderUnavailableError(f"unknown provider {name!r}")
