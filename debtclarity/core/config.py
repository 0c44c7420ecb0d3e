from functools import lru_cache
import json
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _parse_list_value(value: str) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        raw = value.strip()
        if raw == "":
            return []
        try:
            parsed = json.loads(raw)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except json.JSONDecodeError:
            pass
        return [item.strip() for item in raw.split(",") if item.strip()]
    if isinstance(value, list):
        return [str(item).strip() for item in value if str(item).strip()]
    return []


def _parse_models_value(value: str) -> dict[str, list[str]]:
    """Parse ``{"openai": ["gpt-4.1", ...]}`` JSON; anything else is an empty allowlist."""
    if not value or not value.strip():
        return {}
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        return {}
    if not isinstance(parsed, dict):
        return {}
    models: dict[str, list[str]] = {}
    for provider, names in parsed.items():
        if isinstance(names, list):
            models[str(provider).lower()] = [str(n).strip() for n in names if str(n).strip()]
    return models


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="ignore",
        validate_by_name=True,
        populate_by_name=True,
    )

    openai_api_key: str = ""

    docs_enabled: bool = Field(default=True)
    openapi_enabled: bool = Field(default=True)
    expose_error_details: bool = Field(
        default=False,
        validation_alias=AliasChoices("EXPOSE_ERROR_DETAILS"),
    )
    log_level: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL"))

    ai_debt_plan_provider: str = "openai"
    ai_debt_plan_model: str = "gpt-4.1"
    ai_allowed_providers_raw: str = Field(
        default="openai,mock",
        validation_alias=AliasChoices("AI_ALLOWED_PROVIDERS"),
    )
    ai_allowed_models_raw: str = Field(
        default="",
        validation_alias=AliasChoices("AI_ALLOWED_MODELS"),
    )
    enable_ai_overrides: bool = False

    ai_temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    ai_max_tokens: int = Field(default=4096, ge=256)
    ai_timeout_seconds: float = Field(default=60.0, gt=0)
    ai_max_input_chars: int = Field(default=12000, ge=500)
    ai_debug_store_raw: bool = False

    cors_allow_origins_raw: str = Field(
        default="",
        validation_alias=AliasChoices("CORS_ALLOW_ORIGINS"),
    )

    @field_validator("ai_debt_plan_provider", mode="after")
    @classmethod
    def _normalize_provider(cls, value: str) -> str:
        return value.lower().strip()

    @property
    def ai_allowed_providers(self) -> list[str]:
        return [name.lower() for name in _parse_list_value(self.ai_allowed_providers_raw)]

    @property
    def ai_allowed_models(self) -> dict[str, list[str]]:
        return _parse_models_value(self.ai_allowed_models_raw)

    @property
    def cors_allow_origins(self) -> list[str]:
        return _parse_list_value(self.cors_allow_origins_raw)


@lru_cache
def get_settings() -> Settings:
    return Settings()
