"""
Availability Resolver

Decides which physical rooms are free for a stay. A booking occupies its
rooms for its effective interval: check-in up to check-out plus a
turnover buffer. Only Reserved bookings block rooms.
"""
import logging
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Set
from uuid import UUID

from pydantic import BaseModel

from application.catalog import CatalogAccessor
from application.pricing import ReservationLine
from domain.entities import Room
from domain.errors import InsufficientAvailability, ValidationError
from domain.repositories import BookingRepository
from domain.value_objects import StayWindow, TypeRoomRequest

logger = logging.getLogger(__name__)


class ResolvedRooms(BaseModel):
    """Rooms picked for a request, plus the per-type lines used for pricing"""
    room_ids: List[UUID]
    lines: List[ReservationLine]


def ensure_unique(values: Sequence, label: str) -> None:
    """Duplicates in one request are rejected, never silently merged"""
    duplicates = sorted(str(v) for v, n in Counter(values).items() if n > 1)
    if duplicates:
        raise ValidationError(
            f"Duplicate {label} found in request.",
            details={"duplicates": duplicates},
        )


class AvailabilityResolver:
    """Conflict detection and deterministic room selection"""

    def __init__(self, booking_repo: BookingRepository, catalog: CatalogAccessor, buffer_hours: int = 2):
        self.booking_repo = booking_repo
        self.catalog = catalog
        self.buffer_hours = buffer_hours

    async def booked_room_ids(self, stay: StayWindow, exclude_booking_id: Optional[UUID] = None) -> Set[UUID]:
        """Every room held by a reserved booking overlapping the stay"""
        bookings = await self.booking_repo.find_reserved_overlapping(
            stay, self.buffer_hours, exclude_booking_id=exclude_booking_id
        )
        return {room_id for booking in bookings for room_id in booking.room_ids}

    async def find_conflicts(
        self,
        room_ids: Iterable[UUID],
        stay: StayWindow,
        exclude_booking_id: Optional[UUID] = None,
    ) -> Set[UUID]:
        """Subset of room_ids already reserved for an overlapping effective interval"""
        room_ids = set(room_ids)
        bookings = await self.booking_repo.find_reserved_overlapping(
            stay, self.buffer_hours, room_ids=room_ids, exclude_booking_id=exclude_booking_id
        )
        return {room_id for booking in bookings for room_id in booking.room_ids if room_id in room_ids}

    async def find_available_rooms(self, type_id: UUID, stay: StayWindow, exclude_booked: bool = True) -> List[UUID]:
        """Active rooms of a type, in stable order, optionally minus booked ones"""
        await self.catalog.get_room_type(type_id)
        rooms = await self.catalog.active_rooms_of_type(type_id)
        if not exclude_booked:
            return [room.room_id for room in rooms]

        booked = await self.booked_room_ids(stay)
        return [room.room_id for room in rooms if room.room_id not in booked]

    async def resolve_type_rooms(self, requests: Sequence[TypeRoomRequest], stay: StayWindow) -> ResolvedRooms:
        """Pick exactly the requested number of free rooms for each type"""
        ensure_unique([r.type_id for r in requests], "typeId")
        room_types = await self.catalog.get_room_types(r.type_id for r in requests)
        booked = await self.booked_room_ids(stay)

        selected: List[UUID] = []
        lines: List[ReservationLine] = []
        for request, room_type in zip(requests, room_types):
            rooms = await self.catalog.active_rooms_of_type(room_type.type_id)
            free = [room.room_id for room in rooms if room.room_id not in booked]
            if len(free) < request.number_of_rooms:
                raise InsufficientAvailability(
                    f"There isn't enough rooms for typeId {room_type.type_id}. "
                    f"Request: {request.number_of_rooms}, available: {len(free)}",
                    details={
                        "type_id": str(room_type.type_id),
                        "requested": request.number_of_rooms,
                        "available": len(free),
                    },
                )
            selected.extend(free[:request.number_of_rooms])
            lines.append(ReservationLine(room_type=room_type, quantity=request.number_of_rooms))

        logger.debug("Selected rooms %s for %s", selected, stay)
        return ResolvedRooms(room_ids=selected, lines=lines)

    async def resolve_explicit_rooms(
        self,
        room_ids: Sequence[UUID],
        stay: StayWindow,
        exclude_booking_id: Optional[UUID] = None,
    ) -> ResolvedRooms:
        """Check that each named room exists, is active and is free"""
        rooms = await self.require_active_rooms(room_ids)
        await self.ensure_rooms_free(room_ids, stay, exclude_booking_id)
        return ResolvedRooms(room_ids=list(room_ids), lines=await self._lines_for(rooms))

    async def require_active_rooms(self, room_ids: Sequence[UUID]) -> List[Room]:
        ensure_unique(room_ids, "roomId")
        rooms = await self.catalog.get_rooms(room_ids)

        inactive = [str(room.room_id) for room in rooms if not room.status]
        if inactive:
            raise ValidationError(
                "One or more requested rooms are not in service.",
                details={"inactive_room_ids": inactive},
            )
        return rooms

    async def ensure_rooms_free(
        self,
        room_ids: Iterable[UUID],
        stay: StayWindow,
        exclude_booking_id: Optional[UUID] = None,
    ) -> None:
        conflicts = await self.find_conflicts(room_ids, stay, exclude_booking_id)
        if conflicts:
            raise InsufficientAvailability(
                "One or more rooms requested are unavailable for the selected booking time.",
                details={"conflicting_room_ids": sorted(str(r) for r in conflicts)},
            )

    async def _lines_for(self, rooms: Sequence[Room]) -> List[ReservationLine]:
        counts = Counter(room.type_id for room in rooms)
        room_types = await self.catalog.get_room_types(counts)
        return [ReservationLine(room_type=t, quantity=counts[t.type_id]) for t in room_types]
