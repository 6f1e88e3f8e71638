"""Pick the first rendered emoji out of a string.

Generation answers sometimes carry several emoji, or an emoji with trailing
prose.  Only the first glyph is kept, and a glyph may span several code points
(variation selectors, skin tones, ZWJ sequences, flags, keycaps), so slicing
by code point would corrupt it.
"""

from __future__ import annotations

__all__ = ["first_emoji", "is_pictographic"]

_ZWJ = 0x200D
_KEYCAP = 0x20E3
_VARIATION_SELECTORS = (0xFE0E, 0xFE0F)
_SKIN_TONES = range(0x1F3FB, 0x1F400)
_TAGS = range(0xE0020, 0xE0080)
_REGIONAL_INDICATORS = range(0x1F1E6, 0x1F200)
_KEYCAP_BASES = frozenset("0123456789#*")

_PICTOGRAPHIC_RANGES: tuple[tuple[int, int], ...] = (
    (0x00A9, 0x00A9),
    (0x00AE, 0x00AE),
    (0x203C, 0x203C),
    (0x2049, 0x2049),
    (0x2122, 0x2122),
    (0x2139, 0x2139),
    (0x2194, 0x21AA),
    (0x231A, 0x23FF),
    (0x24C2, 0x24C2),
    (0x25AA, 0x25FE),
    (0x2600, 0x27BF),
    (0x2934, 0x2935),
    (0x2B05, 0x2B55),
    (0x3030, 0x3030),
    (0x303D, 0x303D),
    (0x3297, 0x3299),
    (0x1F000, 0x1F1E5),
    (0x1F201, 0x1F3FA),
    (0x1F400, 0x1FAFF),
)


def is_pictographic(char: str) -> bool:
    code = ord(char)
    return any(lo <= code <= hi for lo, hi in _PICTOGRAPHIC_RANGES)


def _is_regional(char: str) -> bool:
    return ord(char) in _REGIONAL_INDICATORS


def _keycap_end(text: str, start: int) -> int | None:
    """Return the end index of a keycap sequence starting at ``start``."""

    idx = start + 1
    if idx < len(text) and ord(text[idx]) in _VARIATION_SELECTORS:
        idx += 1
    if idx < len(text) and ord(text[idx]) == _KEYCAP:
        return idx + 1
    return None


def _extend(text: str, idx: int) -> int:
    """Consume modifiers and ZWJ continuations following a base pictograph."""

    length = len(text)
    while idx < length:
        code = ord(text[idx])
        if code in _VARIATION_SELECTORS or code in _SKIN_TONES or code in _TAGS or code == _KEYCAP:
            idx += 1
            continue
        if code == _ZWJ and idx + 1 < length and is_pictographic(text[idx + 1]):
            idx += 2
            continue
        break
    return idx


def first_emoji(text: str) -> str:
    """Return the first emoji glyph in ``text``, or ``""`` when there is none."""

    length = len(text)
    for start, char in enumerate(text):
        if char in _KEYCAP_BASES:
            end = _keycap_end(text, start)
            if end is not None:
                return text[start:end]
            continue
        if _is_regional(char):
            if start + 1 < length and _is_regional(text[start + 1]):
                return text[start : start + 2]
            return char
        if is_pictographic(char):
            return text[start : _extend(text, start + 1)]
    return ""
