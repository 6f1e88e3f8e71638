from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core.models import CraftResult, Item, RoomInfo, has_control_chars

__all__ = [
    "ApiKeyRequest",
    "CraftRequest",
    "CraftResponse",
    "CreateRoomRequest",
    "ItemPayload",
    "ItemsResponse",
    "RenameRoomRequest",
    "RoomInfoPayload",
    "StatsPayload",
]


class _APIModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class ItemPayload(_APIModel):
    text: str = Field(..., min_length=1)
    emoji: str = ""

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("text must not be blank")
        if has_control_chars(cleaned):
            raise ValueError("text must not contain control characters")
        return cleaned

    @classmethod
    def from_item(cls, item: Item) -> ItemPayload:
        return cls(text=item.text, emoji=item.emoji)

    def to_item(self) -> Item:
        return Item(text=self.text, emoji=self.emoji)


class ItemsResponse(_APIModel):
    items: list[ItemPayload]


class CraftRequest(_APIModel):
    a: ItemPayload
    b: ItemPayload


class CraftResponse(_APIModel):
    text: str
    emoji: str
    is_new: bool
    existing_index: int | None = None

    @classmethod
    def from_result(cls, result: CraftResult) -> CraftResponse:
        return cls(
            text=result.item.text,
            emoji=result.item.emoji,
            is_new=result.is_new,
            existing_index=result.existing_index,
        )


class CreateRoomRequest(BaseModel):
    name: str | None = None

    @field_validator("name")
    @classmethod
    def _normalize(cls, value: str | None) -> str | None:
        return value.strip() if isinstance(value, str) else value


class RenameRoomRequest(BaseModel):
    name: str

    @field_validator("name")
    @classmethod
    def _normalize(cls, value: str) -> str:
        return value.strip()


class RoomInfoPayload(_APIModel):
    id: str
    name: str

    @classmethod
    def from_info(cls, info: RoomInfo) -> RoomInfoPayload:
        return cls(id=info.id, name=info.name)


class ApiKeyRequest(BaseModel):
    api_key: str = Field(..., min_length=1)


class StatsPayload(_APIModel):
    rooms: int
    combinations: int
