from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import anthropic

from ..core.errors import GenerationFormatError, GenerationTimeout, GenerationTransportError
from ..core.settings import Settings
from . import prompts
from .parsing import parse_best_emoji, parse_noun_choices

__all__ = ["AnthropicGenerationClient", "GenerationClient", "NounChoices"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NounChoices:
    obvious: str
    exciting: str


class GenerationClient(Protocol):
    """What the crafting engine needs from a text generator."""

    def choose_noun_candidates(self, prompt_context: str) -> NounChoices: ...

    def choose_best_emoji(self, label: str) -> str: ...


def _first_text(message: Any) -> str:
    for block in getattr(message, "content", None) or ():
        if getattr(block, "type", None) == "text":
            return block.text
    raise GenerationFormatError("response contained no text block")


class AnthropicGenerationClient:
    """``GenerationClient`` backed by the Anthropic Messages API.

    The credential comes from ``settings`` at construction time; swapping keys
    means building a new client.  ``sdk`` can be supplied to reuse or fake the
    underlying ``anthropic.Anthropic`` instance.
    """

    def __init__(self, settings: Settings, *, sdk: Any | None = None) -> None:
        self.settings = settings
        if sdk is None and settings.api_key:
            # Retries would make each craft several stochastic generations.
            sdk = anthropic.Anthropic(
                api_key=settings.api_key,
                timeout=settings.generation_timeout,
                max_retries=0,
            )
        self._sdk = sdk

    @property
    def configured(self) -> bool:
        return self._sdk is not None

    def _complete(self, system: str, user_text: str, temperature: float) -> str:
        if self._sdk is None:
            raise GenerationTransportError("no API key configured for the generation backend")
        try:
            message = self._sdk.messages.create(
                model=self.settings.model,
                max_tokens=self.settings.max_tokens,
                temperature=temperature,
                system=system,
                messages=[{"role": "user", "content": [{"type": "text", "text": user_text}]}],
            )
        except anthropic.APITimeoutError as exc:
            logger.warning("generation timed out", extra={"prompt": user_text})
            raise GenerationTimeout(f"generation timed out after {self.settings.generation_timeout}s") from exc
        except anthropic.APIError as exc:
            logger.warning("generation failed: %s", exc, extra={"prompt": user_text})
            raise GenerationTransportError(str(exc)) from exc
        return _first_text(message)

    def choose_noun_candidates(self, prompt_context: str) -> NounChoices:
        text = self._complete(prompts.GENERATE_NEW_NOUN, prompt_context, self.settings.noun_temperature)
        obvious, exciting = parse_noun_choices(text)
        return NounChoices(obvious=obvious, exciting=exciting)

    def choose_best_emoji(self, label: str) -> str:
        text = self._complete(prompts.PICK_BEST_EMOJI, label, self.settings.emoji_temperature)
        return parse_best_emoji(text)
