"""Room feature: crafting engine, room service, schemas, and API router."""

from .engine import CraftingEngine
from .router import create_room_routers
from .schemas import (
    ApiKeyRequest,
    CraftRequest,
    CraftResponse,
    CreateRoomRequest,
    ItemPayload,
    ItemsResponse,
    RenameRoomRequest,
    RoomInfoPayload,
    StatsPayload,
)
from .service import GameContext, Room, RoomManager

__all__ = [
    "ApiKeyRequest",
    "CraftRequest",
    "CraftResponse",
    "CraftingEngine",
    "CreateRoomRequest",
    "GameContext",
    "ItemPayload",
    "ItemsResponse",
    "RenameRoomRequest",
    "Room",
    "RoomInfoPayload",
    "RoomManager",
    "StatsPayload",
    "create_room_routers",
]
