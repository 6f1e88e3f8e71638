from __future__ import annotations

__all__ = [
    "GenerationError",
    "GenerationFormatError",
    "GenerationTimeout",
    "GenerationTransportError",
    "InfinicraftError",
    "NotFound",
]


class InfinicraftError(Exception):
    """Base class for all errors raised by the game engine."""


class NotFound(InfinicraftError, KeyError):
    """A referenced room id or cache key does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep messages readable.
        return str(self.args[0]) if self.args else ""


class GenerationError(InfinicraftError):
    """The generation backend could not produce a usable answer."""


class GenerationTransportError(GenerationError):
    """The generation call could not be completed (network, auth, service)."""


class GenerationFormatError(GenerationError):
    """The generation call completed but its response had the wrong shape."""


class GenerationTimeout(GenerationError):
    """The generation call exceeded its time bound."""
