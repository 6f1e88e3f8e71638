"""Crafting engine.

Invents the item for a combination nobody has made yet: ask the generator for
an obvious and an exciting label, keep one of them by weighted chance, then
ask for the emoji that best fits the kept label.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from ...core.combo import describe_labels
from ...core.emoji import first_emoji
from ...core.errors import GenerationFormatError
from ...core.models import Item, has_control_chars
from ...core.settings import ChoiceWeights
from ...generation.client import GenerationClient, NounChoices

__all__ = ["CraftingEngine"]

logger = logging.getLogger(__name__)


@dataclass
class CraftingEngine:
    """Resolves cache misses through a ``GenerationClient``."""

    client: GenerationClient
    rng: random.Random = field(default_factory=random.Random)
    weights: ChoiceWeights = field(default_factory=ChoiceWeights)

    def choose_label(self, choices: NounChoices) -> tuple[str, str]:
        """Return ``(label, branch)`` where branch is ``"obvious"`` or ``"exciting"``."""

        if self.rng.random() < self.weights.exciting_probability:
            return choices.exciting, "exciting"
        return choices.obvious, "obvious"

    def resolve(self, combo_key: str, label_a: str, label_b: str) -> Item:
        """Invent the item for ``combo_key``.

        The generator is prompted with a readable form of the key (``"Fire + Water"``)
        rather than the separator-joined key itself.
        """

        prompt_context = describe_labels(label_a, label_b)
        choices = self.client.choose_noun_candidates(prompt_context)
        label, branch = self.choose_label(choices)
        if not label.strip():
            raise GenerationFormatError(f"empty {branch} label for {prompt_context!r}")
        if has_control_chars(label):
            raise GenerationFormatError(f"{branch} label {label!r} contains control characters")

        raw_emoji = self.client.choose_best_emoji(label)
        glyph = first_emoji(raw_emoji)
        if not glyph:
            raise GenerationFormatError(f"no emoji found in best choice {raw_emoji!r}")

        item = Item(text=label, emoji=glyph)
        logger.info(
            "new combination %s -> %s %s",
            prompt_context,
            item.emoji,
            item.text,
            extra={"combo_key": combo_key, "branch": branch},
        )
        return item
