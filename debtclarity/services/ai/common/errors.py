"""Errors raised by the AI service layer.

The normalizer itself never raises; these cover the collaborators around it.
"""

from __future__ import annotations


class AIError(Exception):
    pass


class ProviderUnavailableError(AIError):
    """Provider is not in the allowlist or has no credential configured."""


class ProviderCallError(AIError):
    """Transport or HTTP failure while calling the provider."""


class ModelOutputError(AIError):
    """No JSON object could be extracted from the model text."""
