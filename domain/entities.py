"""Domain Entities - Aggregates"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, validator

from domain.enums import BookingStatus
from domain.errors import ValidationError, VoucherAlreadyUsedByUser
from domain.value_objects import PaidAmount, PriceTier, StayWindow, as_utc, utcnow


class RoomType(BaseModel):
    """Room type: occupancy limit and price tiers shared by its rooms"""
    type_id: UUID = Field(default_factory=uuid4)
    typename: str
    description: str = ""
    limit: int = Field(ge=1)
    price: PriceTier
    images: List[str] = []

    class Config:
        from_attributes = True


class Room(BaseModel):
    """Physical room. Inactive rooms are never offered for booking."""
    room_id: UUID = Field(default_factory=uuid4)
    room_number: str
    type_id: UUID
    description: str = ""
    status: bool = True
    images: List[str] = []

    class Config:
        from_attributes = True


class OverOccupancyCharge(BaseModel):
    """Surcharge bracket for guests beyond the summed occupancy limit"""
    charge_id: UUID = Field(default_factory=uuid4)
    excess_guests: int = Field(ge=1)
    extra_charge: int = Field(ge=0)

    class Config:
        from_attributes = True


class Voucher(BaseModel):
    """Voucher Aggregate: discount terms plus the ledger of users who redeemed it"""

    voucher_id: UUID = Field(default_factory=uuid4)
    code: str
    description: str = ""
    discount_percentage: Decimal = Field(ge=0, le=100)
    start_date: datetime
    end_date: datetime
    min_spend: int = Field(ge=0)
    max_discount: int = Field(ge=0)
    limit_use: int = Field(ge=0)
    user_used_voucher: List[UUID] = []

    class Config:
        from_attributes = True

    @validator('start_date')
    def normalize_start(cls, v):
        return as_utc(v)

    @validator('end_date')
    def end_after_start(cls, v, values):
        v = as_utc(v)
        if 'start_date' in values and v < values['start_date']:
            raise ValueError('Voucher end date must not be before its start date')
        return v

    # ==================== QUERY METHODS ====================
    @property
    def used_count(self) -> int:
        return len(self.user_used_voucher)

    def is_active_at(self, moment: datetime) -> bool:
        return self.start_date <= moment <= self.end_date

    def is_exhausted(self) -> bool:
        return self.used_count >= self.limit_use

    def has_been_used_by(self, user_id: UUID) -> bool:
        return user_id in self.user_used_voucher

    def discount_for(self, base_price: int) -> Decimal:
        """Percentage discount on the base price, capped at max_discount"""
        return min(
            Decimal(base_price) * self.discount_percentage / Decimal(100),
            Decimal(self.max_discount),
        )

    # ==================== MODIFICATION METHODS ====================
    def record_usage(self, user_id: UUID) -> None:
        """Append a redeeming user; a user id may appear only once"""
        if self.has_been_used_by(user_id):
            raise VoucherAlreadyUsedByUser(
                f"User with id {user_id} has already used voucher with code {self.code}.",
                details={"code": self.code, "user_id": str(user_id)},
            )
        self.user_used_voucher = [*self.user_used_voucher, user_id]


# Lifecycle transitions a booking may take
BOOKING_TRANSITIONS = {
    BookingStatus.RESERVED: {BookingStatus.CANCELLED, BookingStatus.LEFT},
    BookingStatus.CANCELLED: {BookingStatus.RESERVED},
    BookingStatus.LEFT: set(),
}


class Booking(BaseModel):
    """Booking Aggregate Root Entity"""

    # Identity
    booking_id: UUID = Field(default_factory=uuid4)

    # References to other aggregates
    user_id: UUID
    room_ids: List[UUID]

    # Value Objects
    stay: StayWindow
    paid_amount: PaidAmount

    number_of_guests: int = Field(ge=1)
    total_amount: int
    payment_method: str
    current_status: BookingStatus = BookingStatus.RESERVED

    # Metadata
    created_at: datetime = Field(default_factory=utcnow)
    modified_at: datetime = Field(default_factory=utcnow)
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        user_id: UUID,
        room_ids: List[UUID],
        stay: StayWindow,
        number_of_guests: int,
        total_amount: int,
        paid_amount: int,
        payment_method: str,
        now: datetime,
    ) -> "Booking":
        """Create new reserved booking with validation"""
        Booking._validate_room_ids(room_ids)
        Booking._validate_not_in_past(stay, now)

        return Booking(
            user_id=user_id,
            room_ids=list(room_ids),
            stay=stay,
            number_of_guests=number_of_guests,
            total_amount=total_amount,
            paid_amount=PaidAmount(amount=paid_amount, last_paid_at=now),
            payment_method=payment_method,
            current_status=BookingStatus.RESERVED,
            created_at=now,
            modified_at=now,
        )

    # ==================== QUERY METHODS ====================
    @property
    def check_in_time(self) -> datetime:
        return self.stay.check_in

    @property
    def check_out_time(self) -> datetime:
        return self.stay.check_out

    def is_reserved(self) -> bool:
        return self.current_status == BookingStatus.RESERVED

    def shares_room_with(self, room_ids) -> bool:
        return bool(set(self.room_ids) & set(room_ids))

    def conflicts_with(self, other: "Booking", buffer_hours: int) -> bool:
        """Two reserved bookings on a shared room with overlapping effective intervals"""
        return (
            self.booking_id != other.booking_id
            and self.is_reserved()
            and other.is_reserved()
            and self.shares_room_with(other.room_ids)
            and self.stay.conflicts_with(other.stay, buffer_hours)
        )

    # ==================== MODIFICATION METHODS ====================
    def change_status(self, new_status: BookingStatus) -> None:
        if new_status == self.current_status:
            return
        if new_status not in BOOKING_TRANSITIONS[self.current_status]:
            raise ValidationError(
                f"Cannot change booking status from {self.current_status.value} to {new_status.value}",
                details={"current_status": self.current_status.value, "requested_status": new_status.value},
            )
        self.current_status = new_status
        self._touch()

    def reschedule(self, stay: StayWindow, now: datetime) -> None:
        Booking._validate_not_in_past(stay, now)
        self.stay = stay
        self._touch()

    def reassign_rooms(self, room_ids: List[UUID]) -> None:
        Booking._validate_room_ids(room_ids)
        self.room_ids = list(room_ids)
        self._touch()

    def amend(
        self,
        user_id: Optional[UUID] = None,
        number_of_guests: Optional[int] = None,
        total_amount: Optional[int] = None,
        payment_method: Optional[str] = None,
    ) -> None:
        """Administrative edit of plain booking fields"""
        if number_of_guests is not None and number_of_guests < 1:
            raise ValidationError("numberOfGuests must be a positive integer")
        if user_id is not None:
            self.user_id = user_id
        if number_of_guests is not None:
            self.number_of_guests = number_of_guests
        if total_amount is not None:
            self.total_amount = total_amount
        if payment_method is not None:
            self.payment_method = payment_method
        self._touch()

    def record_payment(self, amount: int, now: datetime) -> None:
        self.paid_amount = PaidAmount(amount=amount, last_paid_at=now)
        self._touch()

    def _touch(self) -> None:
        self.modified_at = utcnow()
        self.version += 1

    # ==================== PRIVATE VALIDATION METHODS ====================
    @staticmethod
    def _validate_room_ids(room_ids: List[UUID]) -> None:
        if not room_ids:
            raise ValidationError("A booking needs at least one room")
        if len(set(room_ids)) != len(room_ids):
            raise ValidationError("Duplicate room id found in roomIds")

    @staticmethod
    def _validate_not_in_past(stay: StayWindow, now: datetime) -> None:
        if stay.check_in < now:
            raise ValidationError(
                "checkInTime must be before checkOutTime and be a date in future",
                details={"check_in_time": stay.check_in.isoformat(), "now": now.isoformat()},
            )


class Rating(BaseModel):
    """Guest rating of one room type within a booking"""
    rating_id: UUID = Field(default_factory=uuid4)
    booking_id: UUID
    type_room_id: UUID
    score: int = Field(default=1, ge=1, le=5)
    feedback: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True
