"""Canonical keys for unordered item pairs."""

from __future__ import annotations

from .models import Item

__all__ = ["KEY_SEPARATOR", "describe_labels", "describe_pair", "make_key"]

# ASCII unit separator; never typed into a label.
KEY_SEPARATOR = "\x1f"


def make_key(a: Item, b: Item) -> str:
    """Return the cache key for ``a`` combined with ``b``.

    Only the labels participate, so ``make_key(a, b) == make_key(b, a)`` and two
    items with the same text but different emoji share a key.
    """

    first, second = sorted((a.text, b.text))
    return f"{first}{KEY_SEPARATOR}{second}"


def describe_labels(label_a: str, label_b: str) -> str:
    """Human-readable rendering of a pair, used as the generation prompt."""

    first, second = sorted((label_a, label_b))
    return f"{first} + {second}"


def describe_pair(a: Item, b: Item) -> str:
    return describe_labels(a.text, b.text)
