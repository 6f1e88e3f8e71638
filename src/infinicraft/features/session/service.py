from __future__ import annotations

import logging
import random
import secrets
import string
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import partial

from ...core.cache import CombinationCache
from ...core.combo import make_key
from ...core.errors import NotFound
from ...core.models import STARTER_ITEMS, CraftResult, Item, RoomInfo
from ...core.settings import Settings, load_settings
from ...generation.client import AnthropicGenerationClient, GenerationClient
from .concurrency import run_blocking
from .engine import CraftingEngine

__all__ = [
    "GameContext",
    "Room",
    "RoomManager",
]

logger = logging.getLogger(__name__)


@dataclass
class GameContext:
    """Process-wide state shared by every room: the combination cache and the engine."""

    settings: Settings
    engine: CraftingEngine
    cache: CombinationCache = field(default_factory=CombinationCache)

    @classmethod
    def create(
        cls,
        settings: Settings | None = None,
        *,
        client: GenerationClient | None = None,
        rng: random.Random | None = None,
    ) -> GameContext:
        settings = settings if settings is not None else load_settings()
        engine = CraftingEngine(
            client=client if client is not None else AnthropicGenerationClient(settings),
            rng=rng if rng is not None else random.Random(),
            weights=settings.weights,
        )
        return cls(settings=settings, engine=engine)

    def set_api_key(self, api_key: str | None) -> None:
        """Rebuild the generation client around a new credential."""

        self.settings = self.settings.with_api_key(api_key)
        self.engine.client = AnthropicGenerationClient(self.settings)
        logger.info("generation credential updated", extra={"configured": self.settings.api_key is not None})


class Room:
    """One game instance with its own insertion-ordered, label-unique item list."""

    def __init__(
        self,
        context: GameContext,
        *,
        room_id: str | None = None,
        name: str = "",
        starter_items: Sequence[Item] = STARTER_ITEMS,
    ) -> None:
        self._context = context
        self._id = room_id or _sid()
        self._name = name
        self._items: list[Item] = list(starter_items)
        self._lock = threading.Lock()

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    def set_name(self, name: str) -> None:
        self._name = name

    def info(self) -> RoomInfo:
        return RoomInfo(id=self._id, name=self._name)

    def items(self) -> tuple[Item, ...]:
        with self._lock:
            return tuple(self._items)

    def craft(self, a: Item, b: Item) -> CraftResult:
        """Combine ``a`` and ``b``; add the result to this room if it is new here.

        Generation errors propagate unchanged and leave both the shared cache and
        this room untouched.
        """

        key = make_key(a, b)
        context = self._context
        item, hit = context.cache.resolve(
            key,
            partial(context.engine.resolve, key, a.text, b.text),
            wait_timeout=context.settings.wait_timeout,
        )

        # Generation happens outside the room lock; only check-then-append is serialized.
        with self._lock:
            existing = next((idx for idx, owned in enumerate(self._items) if owned.text == item.text), None)
            if existing is None:
                self._items.append(item)
        logger.debug(
            "crafted %s",
            item.text,
            extra={"room_id": self._id, "combo_key": key, "cache_hit": hit, "is_new": existing is None},
        )
        return CraftResult(item=item, is_new=existing is None, existing_index=existing)

    async def craft_async(self, a: Item, b: Item) -> CraftResult:
        return await run_blocking(self.craft, a, b)


class RoomManager:
    """Creates rooms and looks them up by id; rooms live as long as the process."""

    def __init__(self, context: GameContext | None = None) -> None:
        self.context = context if context is not None else GameContext.create()
        self._rooms: dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def create_room(self, name: str = "") -> str:
        with self._lock:
            room_id = _sid()
            while room_id in self._rooms:
                room_id = _sid()
            self._rooms[room_id] = Room(self.context, room_id=room_id, name=name)
        logger.debug("room created", extra={"room_id": room_id})
        return room_id

    async def create_room_async(self, name: str = "") -> str:
        return await run_blocking(self.create_room, name)

    def room_exists(self, room_id: str) -> bool:
        with self._lock:
            return room_id in self._rooms

    def get_room(self, room_id: str) -> Room:
        with self._lock:
            return self._require_room(room_id)

    def get_room_info(self, room_id: str) -> RoomInfo:
        return self.get_room(room_id).info()

    async def get_room_info_async(self, room_id: str) -> RoomInfo:
        return await run_blocking(self.get_room_info, room_id)

    def set_room_name(self, room_id: str, name: str) -> RoomInfo:
        room = self.get_room(room_id)
        room.set_name(name)
        return room.info()

    async def set_room_name_async(self, room_id: str, name: str) -> RoomInfo:
        return await run_blocking(self.set_room_name, room_id, name)

    def get_items(self, room_id: str) -> tuple[Item, ...]:
        return self.get_room(room_id).items()

    async def get_items_async(self, room_id: str) -> tuple[Item, ...]:
        return await run_blocking(self.get_items, room_id)

    def craft(self, room_id: str, a: Item, b: Item) -> CraftResult:
        return self.get_room(room_id).craft(a, b)

    async def craft_async(self, room_id: str, a: Item, b: Item) -> CraftResult:
        return await run_blocking(self.craft, room_id, a, b)

    def set_api_key(self, api_key: str | None) -> None:
        self.context.set_api_key(api_key)

    async def set_api_key_async(self, api_key: str | None) -> None:
        await run_blocking(self.set_api_key, api_key)

    def cache_stats(self) -> dict[str, int]:
        return {"rooms": len(self), "combinations": len(self.context.cache)}

    async def cache_stats_async(self) -> dict[str, int]:
        return await run_blocking(self.cache_stats)

    def _require_room(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise NotFound(f"room '{room_id}' not found")
        return room


def _sid(length: int = 10) -> str:
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
