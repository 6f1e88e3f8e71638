from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field

__all__ = ["CraftResult", "Item", "RoomInfo", "STARTER_ITEMS", "has_control_chars"]


def has_control_chars(text: str) -> bool:
    """True when ``text`` contains a C0/C1 control character (combo keys use one as separator)."""

    return any(unicodedata.category(char) == "Cc" for char in text)


@dataclass(frozen=True)
class Item:
    text: str
    # Items are interchangeable when their labels match; the glyph is payload.
    emoji: str = field(compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str) or not self.text.strip():
            raise ValueError("item text must be a non-empty string")
        if has_control_chars(self.text):
            raise ValueError("item text must not contain control characters")

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "emoji": self.emoji}


@dataclass(frozen=True)
class CraftResult:
    """Outcome of combining two items inside a room."""

    item: Item
    is_new: bool
    # Position of the already-owned item when ``is_new`` is False.
    existing_index: int | None = None


@dataclass(frozen=True)
class RoomInfo:
    id: str
    name: str


STARTER_ITEMS: tuple[Item, ...] = (
    Item("Water", "💧"),
    Item("Fire", "🔥"),
    Item("Wind", "🌬️"),
    Item("Earth", "🌍"),
)
