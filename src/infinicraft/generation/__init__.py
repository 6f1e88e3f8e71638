"""Generation backend: the protocol the engine talks to and its Anthropic implementation."""

from .client import AnthropicGenerationClient, GenerationClient, NounChoices
from .parsing import parse_best_emoji, parse_json_object, parse_noun_choices

__all__ = [
    "AnthropicGenerationClient",
    "GenerationClient",
    "NounChoices",
    "parse_best_emoji",
    "parse_json_object",
    "parse_noun_choices",
]
