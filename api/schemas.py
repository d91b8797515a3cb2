"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import BookingStatus, Gender, Role


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class TypeRoomRequestBody(BaseModel):
    """Requested quantity of one room type"""
    type_id: UUID
    number_of_rooms: int = Field(gt=0)


class CreateBookingRequest(BaseModel):
    """Create booking request DTO. Give either type_rooms or room_ids."""
    user_id: UUID
    check_in_time: datetime
    check_out_time: datetime
    number_of_guests: int = Field(ge=1)
    paid_amount: int = Field(ge=0)
    payment_method: str
    type_rooms: Optional[List[TypeRoomRequestBody]] = None
    room_ids: Optional[List[UUID]] = None
    redeemed_point: Optional[int] = Field(None, ge=0)
    voucher_code: Optional[str] = None


class QuoteBookingRequest(BaseModel):
    """Quote request DTO"""
    user_id: UUID
    check_in_time: datetime
    check_out_time: datetime
    number_of_guests: int = Field(ge=1)
    type_rooms: Optional[List[TypeRoomRequestBody]] = None
    room_ids: Optional[List[UUID]] = None
    redeemed_point: Optional[int] = Field(None, ge=0)
    voucher_code: Optional[str] = None


class UpdateBookingRequest(BaseModel):
    """Partial booking update. Only fields that are set are applied."""
    user_id: Optional[UUID] = None
    room_ids: Optional[List[UUID]] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    number_of_guests: Optional[int] = Field(None, ge=1)
    total_amount: Optional[int] = None
    paid_amount: Optional[int] = Field(None, ge=0)
    payment_method: Optional[str] = None
    current_status: Optional[BookingStatus] = None


class PaidAmountResponse(BaseModel):
    """Paid amount response DTO"""
    amount: int
    last_paid_at: datetime


class BookingResponse(BaseModel):
    """Booking response DTO"""
    booking_id: UUID
    user_id: UUID
    room_ids: List[UUID]
    check_in_time: datetime
    check_out_time: datetime
    number_of_guests: int
    total_amount: int
    paid_amount: PaidAmountResponse
    payment_method: str
    current_status: str
    created_at: datetime
    modified_at: datetime
    version: int


class PriceBreakdownResponse(BaseModel):
    """Price breakdown response DTO"""
    base_price: int
    extra_charge: int
    discount: Decimal
    redeemed_amount: int
    total: int
    required_deposit: int
    voucher_code: Optional[str] = None


class QuoteResponse(BaseModel):
    """Quote response DTO"""
    room_ids: List[UUID]
    breakdown: PriceBreakdownResponse


class BookingPageResponse(BaseModel):
    """Paginated booking list DTO"""
    items: List[BookingResponse]
    page: int
    size: int
    total_pages: int
    total_items: int


# ============================================================================
# CATALOG SCHEMAS
# ============================================================================

class PriceTierBody(BaseModel):
    hourly_rate: int = Field(ge=0)
    daily_rate: int = Field(ge=0)


class CreateRoomTypeRequest(BaseModel):
    """Create room type request DTO"""
    typename: str
    description: str = ""
    limit: int = Field(ge=1)
    price: PriceTierBody
    images: List[str] = []


class UpdateRoomTypeRequest(BaseModel):
    typename: Optional[str] = None
    description: Optional[str] = None
    limit: Optional[int] = Field(None, ge=1)
    price: Optional[PriceTierBody] = None
    images: Optional[List[str]] = None


class RoomTypeResponse(BaseModel):
    """Room type response DTO"""
    type_id: UUID
    typename: str
    description: str
    limit: int
    price: PriceTierBody
    images: List[str]


class CreateRoomRequest(BaseModel):
    """Create room request DTO"""
    room_number: str
    type_id: UUID
    description: str = ""
    status: bool = True
    images: List[str] = []


class UpdateRoomRequest(BaseModel):
    room_number: Optional[str] = None
    type_id: Optional[UUID] = None
    description: Optional[str] = None
    status: Optional[bool] = None
    images: Optional[List[str]] = None


class RoomResponse(BaseModel):
    """Room response DTO"""
    room_id: UUID
    room_number: str
    type_id: UUID
    description: str
    status: bool
    images: List[str]


class AvailableRoomsResponse(BaseModel):
    """Available rooms of a type for a stay"""
    type_id: UUID
    check_in_time: datetime
    check_out_time: datetime
    room_ids: List[UUID]


class BookedTimeResponse(BaseModel):
    check_in_time: datetime
    check_out_time: datetime


# ============================================================================
# VOUCHER & CHARGE SCHEMAS
# ============================================================================

class CreateVoucherRequest(BaseModel):
    """Create voucher request DTO"""
    code: str
    description: str = ""
    discount_percentage: Decimal = Field(ge=0, le=100)
    start_date: datetime
    end_date: datetime
    min_spend: int = Field(ge=0)
    max_discount: int = Field(ge=0)
    limit_use: int = Field(ge=0)


class UpdateVoucherRequest(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None
    discount_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_spend: Optional[int] = Field(None, ge=0)
    max_discount: Optional[int] = Field(None, ge=0)
    limit_use: Optional[int] = Field(None, ge=0)
    user_used_voucher: Optional[List[UUID]] = None


class VoucherResponse(BaseModel):
    """Voucher response DTO"""
    voucher_id: UUID
    code: str
    description: str
    discount_percentage: Decimal
    start_date: datetime
    end_date: datetime
    min_spend: int
    max_discount: int
    limit_use: int
    user_used_voucher: List[UUID]


class ValidateVoucherRequest(BaseModel):
    """Read-only voucher eligibility check"""
    code: str
    user_id: UUID
    base_price: int = Field(ge=0)


class ValidateVoucherResponse(BaseModel):
    valid: bool
    code: str
    discount: Decimal


class CreateChargeRequest(BaseModel):
    """Create over-occupancy charge request DTO"""
    excess_guests: int = Field(ge=1)
    extra_charge: int = Field(ge=0)


class UpdateChargeRequest(BaseModel):
    excess_guests: Optional[int] = Field(None, ge=1)
    extra_charge: Optional[int] = Field(None, ge=0)


class ChargeResponse(BaseModel):
    """Over-occupancy charge response DTO"""
    charge_id: UUID
    excess_guests: int
    extra_charge: int


# ============================================================================
# RATING SCHEMAS
# ============================================================================

class CreateRatingRequest(BaseModel):
    """Create rating request DTO"""
    booking_id: UUID
    type_room_id: UUID
    score: int = Field(1, ge=1, le=5)
    feedback: Optional[str] = None


class UpdateRatingRequest(BaseModel):
    score: Optional[int] = Field(None, ge=1, le=5)
    feedback: Optional[str] = None


class RatingResponse(BaseModel):
    """Rating response DTO"""
    rating_id: UUID
    booking_id: UUID
    type_room_id: UUID
    score: int
    feedback: Optional[str] = None
    created_at: datetime


# ============================================================================
# AUTH & USER SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str

class TokenData(BaseModel):
    """Token payload DTO"""
    user_id: Optional[UUID] = None

class RegisterRequest(BaseModel):
    """Customer self-registration DTO"""
    email: str
    password: str
    full_name: str
    gender: Gender = Gender.OTHER
    birth_date: Optional[date] = None
    phone_number: Optional[str] = None

class CreateUserRequest(RegisterRequest):
    """Staff/admin user creation DTO"""
    role: Role
    point: int = Field(0, ge=0)
    salary: Optional[int] = Field(None, ge=0)

class UpdateCustomerRequest(BaseModel):
    """Partial customer update; fields outside the caller's allow-list are ignored"""
    full_name: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    phone_number: Optional[str] = None
    password: Optional[str] = None
    point: Optional[int] = Field(None, ge=0)
    status: Optional[bool] = None

class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    email: str
    full_name: str
    gender: str
    birth_date: Optional[date] = None
    phone_number: Optional[str] = None
    status: bool
    role: str
    point: Optional[int] = None
    salary: Optional[int] = None
    created_at: datetime
