"""Tolerant JSON extraction from model text (code fences, chatter around the payload)."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from .errors import ModelOutputError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)
_CLOSERS = {"{": "}", "[": "]"}


def extract_json(text: str | None) -> Any | None:
    """Return the first JSON object or array found in *text*, or ``None``.

    Order of attempts:
    1. ``json.loads`` on the stripped text (or the body of a ```json fence).
    2. Scan for ``{`` / ``[`` and parse the first bracket-balanced span
       that is valid JSON.

    A bare scalar (``"42"``, ``"null"``) is only accepted on the fast path.
    """
    if not text or not text.strip():
        return None

    stripped = text.strip()
    fenced = _FENCE_RE.match(stripped)
    if fenced:
        stripped = fenced.group(1).strip()

    try:
        return json.loads(stripped)
    except ValueError:
        pass

    for i, ch in enumerate(stripped):
        if ch in _CLOSERS:
            candidate = _balanced_span(stripped, i)
            if candidate is None:
                continue
            try:
                return json.loads(candidate)
            except ValueError:
                continue

    return None


def parse_model_json(text: str | None) -> Any:
    """Like ``extract_json`` but raises ``ModelOutputError`` when nothing parses."""
    parsed = extract_json(text)
    if parsed is None:
        preview = (text or "")[:200]
        logger.warning("Model returned no parseable JSON: %r", preview)
        raise ModelOutputError("model response did not contain valid JSON")
    return parsed


def _balanced_span(text: str, start: int) -> str | None:
    """Return the bracket-balanced substring opening at *start*, ignoring brackets in strings."""
    open_ch = text[start]
    close_ch = _CLOSERS[open_ch]
    depth = 0
    in_string = False
    escape = False

    for i in range(start, len(text)):
        ch = text[i]

        if escape:
            escape = False
            continue
        if in_string:
            if ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None
