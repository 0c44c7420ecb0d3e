"""Total leaf coercions for untrusted model output.

Every function here returns a value for any input and never raises. Each
entity declares its fields once in a coercion table (field name -> FieldSpec)
and ``coerce_fields`` decodes a raw mapping through it.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Mapping

_CURRENCY_AFFIX_RE = re.compile(
    r"^(?:aed|usd|eur|gbp|dhs?|[$€£])\.?\s*|\s*(?:aed|usd|eur|gbp|dhs?|[$€£])\.?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class FieldSpec:
    kind: str  # number | integer | text | enum | text_list
    max_len: int = 0
    enum: type[StrEnum] | None = None
    default: Any = None
    minimum: int | None = None
    maximum: int | None = None
    max_items: int = 0


def as_mapping(value: Any) -> Mapping[str, Any]:
    """Return *value* if it is a JSON object, else an empty mapping."""
    return value if isinstance(value, dict) else {}


def coerce_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None

    cleaned = _CURRENCY_AFFIX_RE.sub("", value.strip())
    cleaned = cleaned.replace(",", "").replace(" ", "")
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def coerce_int(value: Any, *, minimum: int | None = None, maximum: int | None = None) -> int | None:
    number = coerce_number(value)
    if number is None:
        return None
    result = int(number)
    if minimum is not None and result < minimum:
        return None
    if maximum is not None and result > maximum:
        return None
    return result


def coerce_text(value: Any, *, max_len: int = 0) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, str):
        text = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            text = str(value)
        except ValueError:
            # int exceeds the interpreter's digit limit for str()
            return None
    else:
        return None

    text = text.strip()
    if max_len and len(text) > max_len:
        text = text[:max_len].rstrip()
    return text or None


def coerce_enum(value: Any, enum_cls: type[StrEnum], default: StrEnum) -> StrEnum:
    if not isinstance(value, str):
        return default
    key = value.strip().lower().replace("-", "_").replace(" ", "_")
    try:
        return enum_cls(key)
    except ValueError:
        return default


def coerce_text_list(value: Any, *, max_len: int = 0, max_items: int = 0) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    items: list[str] = []
    for item in value:
        text = coerce_text(item, max_len=max_len)
        if text:
            items.append(text)
    if max_items:
        items = items[:max_items]
    return tuple(items)


def coerce(value: Any, spec: FieldSpec) -> Any:
    """Decode one field according to its declared kind."""
    if spec.kind == "number":
        return coerce_number(value)
    if spec.kind == "integer":
        return coerce_int(value, minimum=spec.minimum, maximum=spec.maximum)
    if spec.kind == "text":
        result = coerce_text(value, max_len=spec.max_len)
        return result if result is not None else spec.default
    if spec.kind == "enum":
        return coerce_enum(value, spec.enum, spec.default)
    if spec.kind == "text_list":
        return coerce_text_list(value, max_len=spec.max_len, max_items=spec.max_items)
    raise ValueError(f"unknown field kind {spec.kind!r}")


def coerce_fields(raw: Any, table: Mapping[str, FieldSpec]) -> dict[str, Any]:
    """Apply *table* to *raw*; unknown keys are ignored, missing ones get defaults."""
    source = as_mapping(raw)
    return {name: coerce(source.get(name), spec) for name, spec in table.items()}
