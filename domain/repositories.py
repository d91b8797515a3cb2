"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from domain.auth import User
from domain.entities import Booking, OverOccupancyCharge, Rating, Room, RoomType, Voucher
from domain.enums import BookingStatus
from domain.value_objects import StayWindow


class RoomTypeRepository(ABC):
    """Repository interface for RoomType"""

    @abstractmethod
    async def save(self, room_type: RoomType) -> RoomType:
        pass

    @abstractmethod
    async def find_by_id(self, type_id: UUID) -> Optional[RoomType]:
        pass

    @abstractmethod
    async def find_by_ids(self, type_ids: Iterable[UUID]) -> List[RoomType]:
        """Find every room type whose id is in type_ids"""
        pass

    @abstractmethod
    async def find_all(self) -> List[RoomType]:
        pass

    @abstractmethod
    async def update(self, room_type: RoomType) -> RoomType:
        pass

    @abstractmethod
    async def delete(self, type_id: UUID) -> bool:
        pass


class RoomRepository(ABC):
    """Repository interface for Room"""

    @abstractmethod
    async def save(self, room: Room) -> Room:
        pass

    @abstractmethod
    async def find_by_id(self, room_id: UUID) -> Optional[Room]:
        pass

    @abstractmethod
    async def find_by_ids(self, room_ids: Iterable[UUID]) -> List[Room]:
        pass

    @abstractmethod
    async def find_by_room_number(self, room_number: str) -> Optional[Room]:
        pass

    @abstractmethod
    async def find_by_type(self, type_id: UUID, active_only: bool = True) -> List[Room]:
        """Rooms of a type, ordered by room number then id"""
        pass

    @abstractmethod
    async def find_all(self, type_id: Optional[UUID] = None, status: Optional[bool] = None) -> List[Room]:
        pass

    @abstractmethod
    async def update(self, room: Room) -> Room:
        pass

    @abstractmethod
    async def delete(self, room_id: UUID) -> bool:
        pass


class BookingRepository(ABC):
    """Repository interface for Booking Aggregate"""

    @abstractmethod
    async def save(self, booking: Booking) -> Booking:
        """Save booking; a reserved booking must not overlap another on a shared room"""
        pass

    @abstractmethod
    async def find_by_id(self, booking_id: UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def find_reserved_overlapping(
        self,
        stay: StayWindow,
        buffer_hours: int,
        room_ids: Optional[Iterable[UUID]] = None,
        exclude_booking_id: Optional[UUID] = None,
    ) -> List[Booking]:
        """Reserved bookings whose effective interval overlaps the stay"""
        pass

    @abstractmethod
    async def find_by_room(self, room_id: UUID, ending_after: Optional[datetime] = None) -> List[Booking]:
        pass

    @abstractmethod
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
        """Filtered page of bookings plus the total number of matches"""
        pass

    @abstractmethod
    async def update(self, booking: Booking) -> Booking:
        pass


class VoucherRepository(ABC):
    """Repository interface for Voucher Aggregate"""

    @abstractmethod
    async def save(self, voucher: Voucher) -> Voucher:
        pass

    @abstractmethod
    async def find_by_id(self, voucher_id: UUID) -> Optional[Voucher]:
        pass

    @abstractmethod
    async def find_by_code(self, code: str) -> Optional[Voucher]:
        pass

    @abstractmethod
    async def find_all(self) -> List[Voucher]:
        pass

    @abstractmethod
    async def update(self, voucher: Voucher) -> Voucher:
        pass

    @abstractmethod
    async def delete(self, voucher_id: UUID) -> bool:
        pass


class OverOccupancyChargeRepository(ABC):
    """Repository interface for the over-occupancy charge table"""

    @abstractmethod
    async def save(self, charge: OverOccupancyCharge) -> OverOccupancyCharge:
        pass

    @abstractmethod
    async def find_by_id(self, charge_id: UUID) -> Optional[OverOccupancyCharge]:
        pass

    @abstractmethod
    async def find_by_excess_guests(self, excess_guests: int) -> Optional[OverOccupancyCharge]:
        pass

    @abstractmethod
    async def find_all(self) -> List[OverOccupancyCharge]:
        """All charges ordered by excess_guests"""
        pass

    @abstractmethod
    async def update(self, charge: OverOccupancyCharge) -> OverOccupancyCharge:
        pass

    @abstractmethod
    async def delete(self, charge_id: UUID) -> bool:
        pass


class UserRepository(ABC):
    """Repository interface for User"""

    @abstractmethod
    async def save(self, user: User) -> User:
        pass

    @abstractmethod
    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def find_customers(self) -> List[User]:
        pass

    @abstractmethod
    async def update(self, user: User) -> User:
        pass


class RatingRepository(ABC):
    """Repository interface for Rating"""

    @abstractmethod
    async def save(self, rating: Rating) -> Rating:
        pass

    @abstractmethod
    async def find_by_id(self, rating_id: UUID) -> Optional[Rating]:
        pass

    @abstractmethod
    async def find_by_booking_and_type(self, booking_id: UUID, type_room_id: UUID) -> Optional[Rating]:
        pass

    @abstractmethod
    async def find_all(
        self,
        score: Optional[int] = None,
        type_room_id: Optional[UUID] = None,
        booking_id: Optional[UUID] = None,
    ) -> List[Rating]:
        pass

    @abstractmethod
    async def update(self, rating: Rating) -> Rating:
        pass

    @abstractmethod
    async def delete(self, rating_id: UUID) -> bool:
        pass


class UnitOfWork(ABC):
    """Commit-or-rollback scope spanning every repository"""

    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager:
        """
        Async context manager. Commits when the block exits normally and
        rolls every repository back when it raises.
        """
        pass
