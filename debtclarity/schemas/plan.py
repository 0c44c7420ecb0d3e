from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class GeneratePlanRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # rawText is checked in the handler so a missing value gets the 400 message.
    raw_text: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("rawText", "raw_text"),
    )
    # Non-numbers are ignored rather than rejected.
    salary: Any = None
    essentials: Any = None
    override_provider: Optional[str] = None
    override_model: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None
