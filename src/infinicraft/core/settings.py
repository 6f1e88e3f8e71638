"""Runtime configuration.

Everything is read from environment variables once, into an immutable
``Settings`` value that is threaded explicitly into the generation client and
the crafting engine.  Nothing here mutates the process environment.

Recognised variables::

    ANTHROPIC_API_KEY                 credential for the generation backend
    INFINICRAFT_MODEL                 model name
    INFINICRAFT_MAX_TOKENS            output length bound per call
    INFINICRAFT_NOUN_TEMPERATURE      randomness when inventing labels
    INFINICRAFT_EMOJI_TEMPERATURE     randomness when picking an emoji
    INFINICRAFT_GENERATION_TIMEOUT    seconds before a call is abandoned
    INFINICRAFT_EXCITING_WEIGHT       probability of the less expected label

Malformed values fall back to their defaults with a warning.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Final

__all__ = ["ChoiceWeights", "Settings", "load_settings"]

logger = logging.getLogger(__name__)

_PREFIX: Final = "INFINICRAFT_"

DEFAULT_MODEL: Final = "claude-3-haiku-20240307"


@dataclass(frozen=True)
class ChoiceWeights:
    """Relative odds of keeping the obvious label versus the exciting one."""

    obvious: float = 0.9
    exciting: float = 0.1

    def __post_init__(self) -> None:
        if self.obvious < 0.0 or self.exciting < 0.0:
            raise ValueError("choice weights must be non-negative")
        if self.obvious + self.exciting <= 0.0:
            raise ValueError("choice weights must not both be zero")

    @property
    def exciting_probability(self) -> float:
        return self.exciting / (self.obvious + self.exciting)


@dataclass(frozen=True)
class Settings:
    api_key: str | None = None
    model: str = DEFAULT_MODEL
    max_tokens: int = 200
    noun_temperature: float = 0.5
    emoji_temperature: float = 0.0
    generation_timeout: float = 30.0
    weights: ChoiceWeights = ChoiceWeights()

    @property
    def wait_timeout(self) -> float:
        """Upper bound for callers waiting on someone else's in-flight generation."""

        return 2.0 * self.generation_timeout

    def with_api_key(self, api_key: str | None) -> Settings:
        cleaned = (api_key or "").strip() or None
        return replace(self, api_key=cleaned)


def _float(env: Mapping[str, str], name: str, default: float, *, minimum: float = 0.0) -> float:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default
    if value != value or value < minimum:  # NaN or out of range
        logger.warning("Ignoring out-of-range %s=%r; using %s", name, raw, default)
        return default
    return value


def _int(env: Mapping[str, str], name: str, default: int, *, minimum: int = 1) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring malformed %s=%r; using %s", name, raw, default)
        return default
    if value < minimum:
        logger.warning("Ignoring out-of-range %s=%r; using %s", name, raw, default)
        return default
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ``)."""

    source = os.environ if env is None else env
    defaults = Settings()

    exciting = _float(source, f"{_PREFIX}EXCITING_WEIGHT", defaults.weights.exciting)
    if exciting > 1.0:
        logger.warning("Ignoring %sEXCITING_WEIGHT above 1.0; using %s", _PREFIX, defaults.weights.exciting)
        exciting = defaults.weights.exciting

    model = (source.get(f"{_PREFIX}MODEL") or "").strip() or defaults.model
    api_key = (source.get("ANTHROPIC_API_KEY") or "").strip() or None

    return Settings(
        api_key=api_key,
        model=model,
        max_tokens=_int(source, f"{_PREFIX}MAX_TOKENS", defaults.max_tokens),
        noun_temperature=_float(source, f"{_PREFIX}NOUN_TEMPERATURE", defaults.noun_temperature),
        emoji_temperature=_float(source, f"{_PREFIX}EMOJI_TEMPERATURE", defaults.emoji_temperature),
        generation_timeout=_float(
            source, f"{_PREFIX}GENERATION_TIMEOUT", defaults.generation_timeout, minimum=0.001
        ),
        weights=ChoiceWeights(obvious=1.0 - exciting, exciting=exciting),
    )
