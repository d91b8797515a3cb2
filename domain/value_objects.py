"""Domain Value Objects"""
import math
from decimal import Decimal
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, validator


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StayWindow(BaseModel):
    """Value Object for a check-in/check-out time window"""
    check_in: datetime
    check_out: datetime

    @validator('check_in')
    def normalize_check_in(cls, v):
        return as_utc(v)

    @validator('check_out')
    def check_out_after_check_in(cls, v, values):
        v = as_utc(v)
        if 'check_in' in values and v <= values['check_in']:
            raise ValueError('Check-out time must be after check-in time')
        return v

    def hours(self) -> int:
        """Billable hours, rounded up to the next whole hour"""
        seconds = (self.check_out - self.check_in).total_seconds()
        return math.ceil(seconds / 3600)

    def days_and_hours(self) -> tuple:
        """Split billable hours into whole days and the remaining hours"""
        hours = self.hours()
        days = hours // 24
        return days, hours - days * 24

    def effective_end(self, buffer_hours: int) -> datetime:
        """Check-out extended by the post-checkout turnover buffer"""
        return self.check_out + timedelta(hours=buffer_hours)

    def conflicts_with(self, other: "StayWindow", buffer_hours: int) -> bool:
        """Check whether the effective intervals of two windows overlap"""
        return (
            other.check_in < self.effective_end(buffer_hours)
            and other.effective_end(buffer_hours) > self.check_in
        )

    class Config:
        frozen = True


class PriceTier(BaseModel):
    """Value Object for a room type's hourly and daily rates"""
    hourly_rate: int = Field(ge=0)
    daily_rate: int = Field(ge=0)

    class Config:
        frozen = True


class PaidAmount(BaseModel):
    """Value Object recording what has been paid so far"""
    amount: int = Field(ge=0)
    last_paid_at: datetime = Field(default_factory=utcnow)

    class Config:
        frozen = True


class TypeRoomRequest(BaseModel):
    """Value Object for a requested quantity of one room type"""
    type_id: UUID
    number_of_rooms: int = Field(gt=0)

    class Config:
        frozen = True


class PriceBreakdown(BaseModel):
    """Value Object with every component of a booking price"""
    base_price: int
    extra_charge: int = 0
    discount: Decimal = Decimal(0)
    redeemed_amount: int = 0
    total: int
    required_deposit: int
    voucher_code: Optional[str] = None

    class Config:
        frozen = True
