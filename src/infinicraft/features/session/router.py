from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse, Response

from ...core.errors import GenerationError, GenerationTimeout, NotFound
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
from .service import RoomManager

__all__ = ["create_room_routers"]

logger = logging.getLogger(__name__)


class _RoomController:
    def __init__(self, manager: RoomManager) -> None:
        self.manager = manager

    def _json_response(self, data: dict[str, object]) -> JSONResponse:
        return JSONResponse(data)

    async def _info(self, rid: str) -> RoomInfoPayload:
        try:
            return RoomInfoPayload.from_info(await self.manager.get_room_info_async(rid))
        except NotFound as exc:
            raise HTTPException(404, str(exc)) from exc

    # ------------------------------------------------------------------ actions
    async def create(self, body: CreateRoomRequest) -> Response:
        room_id = await self.manager.create_room_async(body.name or "")
        return self._json_response({"room": room_id})

    async def info(self, rid: str) -> Response:
        return self._json_response((await self._info(rid)).to_dict())

    async def rename(self, rid: str, body: RenameRoomRequest) -> Response:
        try:
            info = await self.manager.set_room_name_async(rid, body.name)
        except NotFound as exc:
            raise HTTPException(404, str(exc)) from exc
        return self._json_response(RoomInfoPayload.from_info(info).to_dict())

    async def items(self, rid: str) -> Response:
        try:
            items = await self.manager.get_items_async(rid)
        except NotFound as exc:
            raise HTTPException(404, str(exc)) from exc
        payload = ItemsResponse(items=[ItemPayload.from_item(item) for item in items])
        return self._json_response(payload.to_dict())

    async def craft(self, rid: str, body: CraftRequest) -> Response:
        try:
            result = await self.manager.craft_async(rid, body.a.to_item(), body.b.to_item())
        except NotFound as exc:
            raise HTTPException(404, str(exc)) from exc
        except GenerationTimeout as exc:
            raise HTTPException(504, str(exc)) from exc
        except GenerationError as exc:
            logger.warning("craft failed in room %s: %s", rid, exc)
            raise HTTPException(502, str(exc)) from exc
        return self._json_response(CraftResponse.from_result(result).to_dict())

    async def set_api_key(self, body: ApiKeyRequest) -> Response:
        await self.manager.set_api_key_async(body.api_key)
        return Response(status_code=204)

    async def stats(self) -> Response:
        return self._json_response(StatsPayload(**(await self.manager.cache_stats_async())).to_dict())


def create_room_routers(manager: RoomManager) -> tuple[APIRouter, APIRouter]:
    controller = _RoomController(manager)

    rooms = APIRouter(prefix="/api/v1/rooms", tags=["rooms"])
    admin = APIRouter(prefix="/api/v1", tags=["admin"])

    @rooms.post("")
    async def create_room(body: CreateRoomRequest) -> Response:
        return await controller.create(body)

    @rooms.get("/{rid}")
    async def get_room(rid: str) -> Response:
        return await controller.info(rid)

    @rooms.put("/{rid}/name")
    async def rename_room(rid: str, body: RenameRoomRequest) -> Response:
        return await controller.rename(rid, body)

    @rooms.get("/{rid}/items")
    async def get_items(rid: str) -> Response:
        return await controller.items(rid)

    @rooms.post("/{rid}/craft")
    async def craft(rid: str, body: CraftRequest) -> Response:
        return await controller.craft(rid, body)

    @admin.post("/settings/api-key")
    async def set_api_key(body: ApiKeyRequest) -> Response:
        return await controller.set_api_key(body)

    @admin.get("/stats")
    async def stats() -> Response:
        return await controller.stats()

    return rooms, admin
