"""Turn raw model text into the structured answers the engine expects."""

from __future__ import annotations

import json
import re
from typing import Any

from ..core.errors import GenerationFormatError

__all__ = ["parse_best_emoji", "parse_json_object", "parse_noun_choices"]

_FENCED = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
_BRACED = re.compile(r"\{[\s\S]*\}")


def _loads_object(raw: str) -> dict[str, Any] | None:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return value if isinstance(value, dict) else None


def parse_json_object(content: str) -> dict[str, Any]:
    """Parse a JSON object from model output.

    Accepts a bare object, an object inside a fenced code block, or an object
    surrounded by prose.
    """

    text = (content or "").strip()
    parsed = _loads_object(text)
    if parsed is not None:
        return parsed

    match = _FENCED.search(text)
    if match:
        parsed = _loads_object(match.group(1))
        if parsed is not None:
            return parsed

    match = _BRACED.search(text)
    if match:
        parsed = _loads_object(match.group())
        if parsed is not None:
            return parsed

    raise GenerationFormatError(f"could not parse JSON object from response: {text[:200]!r}")


def _required_text(payload: dict[str, Any], field: str) -> str:
    value = payload.get(field)
    if not isinstance(value, str) or not value.strip():
        raise GenerationFormatError(f"response field '{field}' missing or not a non-empty string")
    return value.strip()


def parse_noun_choices(content: str) -> tuple[str, str]:
    """Return ``(obvious, exciting)`` labels from a noun-candidates answer."""

    payload = parse_json_object(content)
    return _required_text(payload, "obvious_choice"), _required_text(payload, "exciting_choice")


def parse_best_emoji(content: str) -> str:
    """Return the raw ``best_choice`` string from an emoji answer."""

    return _required_text(parse_json_object(content), "best_choice")
