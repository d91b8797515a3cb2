"""Catalog Accessor - read-only lookups of room types and rooms"""
from typing import Iterable, List
from uuid import UUID

from domain.entities import Room, RoomType
from domain.errors import NotFound
from domain.repositories import RoomRepository, RoomTypeRepository


class CatalogAccessor:
    """Read-only view of the room catalog used by the booking engine"""

    def __init__(self, room_type_repo: RoomTypeRepository, room_repo: RoomRepository):
        self.room_type_repo = room_type_repo
        self.room_repo = room_repo

    async def get_room_type(self, type_id: UUID) -> RoomType:
        room_type = await self.room_type_repo.find_by_id(type_id)
        if not room_type:
            raise NotFound("TypeRoom", type_id)
        return room_type

    async def get_room_types(self, type_ids: Iterable[UUID]) -> List[RoomType]:
        """Every requested room type, in request order"""
        type_ids = list(type_ids)
        found = {t.type_id: t for t in await self.room_type_repo.find_by_ids(type_ids)}
        missing = [str(t) for t in type_ids if t not in found]
        if missing:
            raise NotFound("TypeRoom", ", ".join(missing), details={"missing_type_ids": missing})
        return [found[t] for t in type_ids]

    async def get_room(self, room_id: UUID) -> Room:
        room = await self.room_repo.find_by_id(room_id)
        if not room:
            raise NotFound("Room", room_id)
        return room

    async def get_rooms(self, room_ids: Iterable[UUID]) -> List[Room]:
        """Every requested room, in request order"""
        room_ids = list(room_ids)
        found = {r.room_id: r for r in await self.room_repo.find_by_ids(room_ids)}
        missing = [str(r) for r in room_ids if r not in found]
        if missing:
            raise NotFound("Room", ", ".join(missing), details={"missing_room_ids": missing})
        return [found[r] for r in room_ids]

    async def active_rooms_of_type(self, type_id: UUID) -> List[Room]:
        """Active rooms of a type in stable room-number order"""
        return await self.room_repo.find_by_type(type_id, active_only=True)
