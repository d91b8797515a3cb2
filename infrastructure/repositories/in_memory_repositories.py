"""In-Memory Repository Implementations"""
import copy
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from domain.auth import User
from domain.entities import Booking, OverOccupancyCharge, Rating, Room, RoomType, Voucher
from domain.enums import BookingStatus, CUSTOMER_ROLES
from domain.errors import ConcurrentBookingConflict, NotFound, ValidationError
from domain.repositories import (
    BookingRepository, OverOccupancyChargeRepository, RatingRepository,
    RoomRepository, RoomTypeRepository, UserRepository, VoucherRepository,
)
from domain.value_objects import StayWindow


class SnapshotMixin:
    """Lets a unit of work capture and restore the whole storage"""

    _storage: Dict

    def snapshot(self) -> Dict:
        return copy.deepcopy(self._storage)

    def restore(self, snapshot: Dict) -> None:
        self._storage = snapshot


class InMemoryRoomTypeRepository(SnapshotMixin, RoomTypeRepository):
    """In-memory implementation of RoomTypeRepository"""

    def __init__(self):
        self._storage: Dict[UUID, RoomType] = {}

    async def save(self, room_type: RoomType) -> RoomType:
        self._storage[room_type.type_id] = room_type
        return room_type

    async def find_by_id(self, type_id: UUID) -> Optional[RoomType]:
        return self._storage.get(type_id)

    async def find_by_ids(self, type_ids: Iterable[UUID]) -> List[RoomType]:
        return [self._storage[t] for t in type_ids if t in self._storage]

    async def find_all(self) -> List[RoomType]:
        return sorted(self._storage.values(), key=lambda t: t.typename)

    async def update(self, room_type: RoomType) -> RoomType:
        if room_type.type_id in self._storage:
            self._storage[room_type.type_id] = room_type
            return room_type
        raise NotFound("TypeRoom", room_type.type_id)

    async def delete(self, type_id: UUID) -> bool:
        if type_id in self._storage:
            del self._storage[type_id]
            return True
        return False


def _room_order(room: Room):
    return (room.room_number, str(room.room_id))


class InMemoryRoomRepository(SnapshotMixin, RoomRepository):
    """In-memory implementation of RoomRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Room] = {}

    async def save(self, room: Room) -> Room:
        existing = await self.find_by_room_number(room.room_number)
        if existing and existing.room_id != room.room_id:
            raise ValidationError(f"Duplicate value for field 'room_number': {room.room_number}")
        self._storage[room.room_id] = room
        return room

    async def find_by_id(self, room_id: UUID) -> Optional[Room]:
        return self._storage.get(room_id)

    async def find_by_ids(self, room_ids: Iterable[UUID]) -> List[Room]:
        return [self._storage[r] for r in room_ids if r in self._storage]

    async def find_by_room_number(self, room_number: str) -> Optional[Room]:
        for room in self._storage.values():
            if room.room_number == room_number:
                return room
        return None

    async def find_by_type(self, type_id: UUID, active_only: bool = True) -> List[Room]:
        rooms = [
            r for r in self._storage.values()
            if r.type_id == type_id and (r.status or not active_only)
        ]
        return sorted(rooms, key=_room_order)

    async def find_all(self, type_id: Optional[UUID] = None, status: Optional[bool] = None) -> List[Room]:
        rooms = [
            r for r in self._storage.values()
            if (type_id is None or r.type_id == type_id) and (status is None or r.status == status)
        ]
        return sorted(rooms, key=_room_order)

    async def update(self, room: Room) -> Room:
        if room.room_id not in self._storage:
            raise NotFound("Room", room.room_id)
        return await self.save(room)

    async def delete(self, room_id: UUID) -> bool:
        if room_id in self._storage:
            del self._storage[room_id]
            return True
        return False


class InMemoryBookingRepository(SnapshotMixin, BookingRepository):
    """
    In-memory implementation of BookingRepository.

    Refuses to store a reserved booking whose effective interval overlaps
    another reserved booking on a shared room, the same guarantee a
    database exclusion constraint would give.
    """

    def __init__(self, buffer_hours: int = 2):
        self._storage: Dict[UUID, Booking] = {}
        self.buffer_hours = buffer_hours

    def _assert_no_overlap(self, booking: Booking) -> None:
        clashing = [
            other for other in self._storage.values()
            if booking.conflicts_with(other, self.buffer_hours)
        ]
        if clashing:
            raise ConcurrentBookingConflict(
                "Another booking reserved one of these rooms for an overlapping time. Please retry.",
                details={"conflicting_booking_ids": [str(b.booking_id) for b in clashing]},
            )

    async def save(self, booking: Booking) -> Booking:
        self._assert_no_overlap(booking)
        self._storage[booking.booking_id] = booking
        return booking

    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        return self._storage.get(booking_id)

    async def find_reserved_overlapping(
        self,
        stay: StayWindow,
        buffer_hours: int,
        room_ids: Optional[Iterable[UUID]] = None,
        exclude_booking_id: Optional[UUID] = None,
    ) -> List[Booking]:
        wanted = set(room_ids) if room_ids is not None else None
        return [
            b for b in self._storage.values()
            if b.is_reserved()
            and b.booking_id != exclude_booking_id
            and (wanted is None or b.shares_room_with(wanted))
            and b.stay.conflicts_with(stay, buffer_hours)
        ]

    async def find_by_room(self, room_id: UUID, ending_after: Optional[datetime] = None) -> List[Booking]:
        bookings = [
            b for b in self._storage.values()
            if room_id in b.room_ids and (ending_after is None or b.check_out_time > ending_after)
        ]
        return sorted(bookings, key=lambda b: b.check_in_time)

    async def search(
        self,
        user_id: Optional[UUID] = None,
        room_id: Optional[UUID] = None,
        current_status: Optional[BookingStatus] = None,
        check_in_from: Optional[datetime] = None,
        check_out_until: Optional[datetime] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> Tuple[List[Booking], int]:
        matches = [
            b for b in self._storage.values()
            if (user_id is None or b.user_id == user_id)
            and (room_id is None or room_id in b.room_ids)
            and (current_status is None or b.current_status == current_status)
            and (check_in_from is None or b.check_in_time >= check_in_from)
            and (check_out_until is None or b.check_out_time <= check_out_until)
        ]
        matches.sort(key=lambda b: (b.check_in_time, b.created_at, str(b.booking_id)))
        end = None if limit is None else offset + limit
        return matches[offset:end], len(matches)

    async def update(self, booking: Booking) -> Booking:
        if booking.booking_id not in self._storage:
            raise NotFound("Booking", booking.booking_id)
        return await self.save(booking)


class InMemoryVoucherRepository(SnapshotMixin, VoucherRepository):
    """In-memory implementation of VoucherRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Voucher] = {}

    async def save(self, voucher: Voucher) -> Voucher:
        existing = await self.find_by_code(voucher.code)
        if existing and existing.voucher_id != voucher.voucher_id:
            raise ValidationError(f"Duplicate value for field 'code': {voucher.code}")
        self._storage[voucher.voucher_id] = voucher
        return voucher

    async def find_by_id(self, voucher_id: UUID) -> Optional[Voucher]:
        return self._storage.get(voucher_id)

    async def find_by_code(self, code: str) -> Optional[Voucher]:
        for voucher in self._storage.values():
            if voucher.code == code:
                return voucher
        return None

    async def find_all(self) -> List[Voucher]:
        return sorted(self._storage.values(), key=lambda v: v.code)

    async def update(self, voucher: Voucher) -> Voucher:
        if voucher.voucher_id not in self._storage:
            raise NotFound("Voucher", voucher.voucher_id)
        return await self.save(voucher)

    async def delete(self, voucher_id: UUID) -> bool:
        if voucher_id in self._storage:
            del self._storage[voucher_id]
            return True
        return False


class InMemoryOverOccupancyChargeRepository(SnapshotMixin, OverOccupancyChargeRepository):
    """In-memory implementation of OverOccupancyChargeRepository"""

    def __init__(self):
        self._storage: Dict[UUID, OverOccupancyCharge] = {}

    async def save(self, charge: OverOccupancyCharge) -> OverOccupancyCharge:
        existing = await self.find_by_excess_guests(charge.excess_guests)
        if existing and existing.charge_id != charge.charge_id:
            raise ValidationError(f"Duplicate value for field 'excess_guests': {charge.excess_guests}")
        self._storage[charge.charge_id] = charge
        return charge

    async def find_by_id(self, charge_id: UUID) -> Optional[OverOccupancyCharge]:
        return self._storage.get(charge_id)

    async def find_by_excess_guests(self, excess_guests: int) -> Optional[OverOccupancyCharge]:
        for charge in self._storage.values():
            if charge.excess_guests == excess_guests:
                return charge
        return None

    async def find_all(self) -> List[OverOccupancyCharge]:
        return sorted(self._storage.values(), key=lambda c: c.excess_guests)

    async def update(self, charge: OverOccupancyCharge) -> OverOccupancyCharge:
        if charge.charge_id not in self._storage:
            raise NotFound("Charge", charge.charge_id)
        return await self.save(charge)

    async def delete(self, charge_id: UUID) -> bool:
        if charge_id in self._storage:
            del self._storage[charge_id]
            return True
        return False


class InMemoryUserRepository(SnapshotMixin, UserRepository):
    """In-memory implementation of UserRepository"""

    def __init__(self):
        self._storage: Dict[UUID, User] = {}

    async def save(self, user: User) -> User:
        existing = await self.find_by_email(user.email)
        if existing and existing.user_id != user.user_id:
            raise ValidationError(f"Duplicate value for field 'email': {user.email}")
        self._storage[user.user_id] = user
        return user

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        return self._storage.get(user_id)

    async def find_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        for user in self._storage.values():
            if user.email == email:
                return user
        return None

    async def find_customers(self) -> List[User]:
        return [u for u in self._storage.values() if u.role in CUSTOMER_ROLES]

    async def update(self, user: User) -> User:
        if user.user_id not in self._storage:
            raise NotFound("User", user.user_id)
        return await self.save(user)


class InMemoryRatingRepository(SnapshotMixin, RatingRepository):
    """In-memory implementation of RatingRepository"""

    def __init__(self):
        self._storage: Dict[UUID, Rating] = {}

    async def save(self, rating: Rating) -> Rating:
        existing = await self.find_by_booking_and_type(rating.booking_id, rating.type_room_id)
        if existing and existing.rating_id != rating.rating_id:
            raise ValidationError("This typeRoom in this booking has been rated")
        self._storage[rating.rating_id] = rating
        return rating

    async def find_by_id(self, rating_id: UUID) -> Optional[Rating]:
        return self._storage.get(rating_id)

    async def find_by_booking_and_type(self, booking_id: UUID, type_room_id: UUID) -> Optional[Rating]:
        for rating in self._storage.values():
            if rating.booking_id == booking_id and rating.type_room_id == type_room_id:
                return rating
        return None

    async def find_all(
        self,
        score: Optional[int] = None,
        type_room_id: Optional[UUID] = None,
        booking_id: Optional[UUID] = None,
    ) -> List[Rating]:
        ratings = [
            r for r in self._storage.values()
            if (score is None or r.score == score)
            and (type_room_id is None or r.type_room_id == type_room_id)
            and (booking_id is None or r.booking_id == booking_id)
        ]
        return sorted(ratings, key=lambda r: r.created_at)

    async def update(self, rating: Rating) -> Rating:
        if rating.rating_id not in self._storage:
            raise NotFound("Rating", rating.rating_id)
        return await self.save(rating)

    async def delete(self, rating_id: UUID) -> bool:
        if rating_id in self._storage:
            del self._storage[rating_id]
            return True
        return False
