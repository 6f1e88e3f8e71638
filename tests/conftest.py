from __future__ import annotations

import random
import sys
import threading
from pathlib import Path
from types import SimpleNamespace
from typing import Any

import pytest

# Ensure "src" is on sys.path for imports in tests
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from infinicraft.core.settings import Settings  # noqa: E402
from infinicraft.features.session import GameContext, RoomManager  # noqa: E402
from infinicraft.generation import NounChoices  # noqa: E402


class FixedRandom(random.Random):
    """RNG whose ``random()`` always returns the same value."""

    def __init__(self, value: float) -> None:
        super().__init__(0)
        self.value = value

    def random(self) -> float:
        return self.value


class FakeMessages:
    """Stands in for ``anthropic.Anthropic().messages``; replays canned replies."""

    def __init__(self, replies: list[Any]) -> None:
        self.replies = list(replies)
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=reply)])


OBVIOUS = 0.99
EXCITING = 0.0


class StubClient:
    """Scripted generation client that records every call."""

    def __init__(
        self,
        choices: tuple[str, str] = ("Steam", "Smoke"),
        emoji: str = "💨",
        *,
        noun_error: Exception | None = None,
        emoji_error: Exception | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.choices = choices
        self.emoji = emoji
        self.noun_error = noun_error
        self.emoji_error = emoji_error
        self.gate = gate
        self.started = threading.Event()
        self.noun_calls: list[str] = []
        self.emoji_calls: list[str] = []
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        return len(self.noun_calls) + len(self.emoji_calls)

    def choose_noun_candidates(self, prompt_context: str) -> NounChoices:
        with self._lock:
            self.noun_calls.append(prompt_context)
        self.started.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.noun_error is not None:
            raise self.noun_error
        return NounChoices(obvious=self.choices[0], exciting=self.choices[1])

    def choose_best_emoji(self, label: str) -> str:
        with self._lock:
            self.emoji_calls.append(label)
        if self.emoji_error is not None:
            raise self.emoji_error
        return self.emoji


def make_manager(client: StubClient, *, roll: float = OBVIOUS) -> RoomManager:
    return RoomManager(GameContext.create(Settings(), client=client, rng=FixedRandom(roll)))


@pytest.fixture
def stub_client() -> StubClient:
    return StubClient()


@pytest.fixture
def manager(stub_client: StubClient) -> RoomManager:
    return make_manager(stub_client)
