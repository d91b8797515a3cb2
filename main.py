import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Bookings
    CreateBookingRequest, QuoteBookingRequest, UpdateBookingRequest,
    BookingResponse, BookingPageResponse, QuoteResponse,
    # Catalog
    CreateRoomTypeRequest, UpdateRoomTypeRequest, RoomTypeResponse,
    CreateRoomRequest, UpdateRoomRequest, RoomResponse,
    AvailableRoomsResponse, BookedTimeResponse,
    # Vouchers & charges
    CreateVoucherRequest, UpdateVoucherRequest, VoucherResponse,
    ValidateVoucherRequest, ValidateVoucherResponse,
    CreateChargeRequest, UpdateChargeRequest, ChargeResponse,
    # Ratings
    CreateRatingRequest, UpdateRatingRequest, RatingResponse,
    # Auth & users
    Token, RegisterRequest, CreateUserRequest, UpdateCustomerRequest, UserResponse,
)

from api.dependencies import get_current_active_user, get_current_identity, seed_admin, user_repo
from infrastructure.config import settings
from infrastructure.logging_config import setup_logging
from infrastructure.security import verify_password, create_access_token, get_password_hash
from domain.auth import Identity, User

from application.availability import AvailabilityResolver
from application.catalog import CatalogAccessor
from application.pricing import PricingCalculator
from application.voucher_ledger import VoucherLedger
from application.services import (
    BookingService, CatalogService, OverOccupancyChargeService,
    RatingService, UserService, VoucherService, build_stay,
)
from infrastructure.repositories.in_memory_repositories import (
    InMemoryBookingRepository, InMemoryOverOccupancyChargeRepository, InMemoryRatingRepository,
    InMemoryRoomRepository, InMemoryRoomTypeRepository, InMemoryVoucherRepository,
)
from infrastructure.unit_of_work import InMemoryUnitOfWork
from domain.enums import BookingStatus, Role
from domain.errors import DomainError
from domain.value_objects import TypeRoomRequest

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await seed_admin(user_repo)
    logger.info("%s %s started (%s)", settings.APP_NAME, settings.API_VERSION, settings.ENVIRONMENT)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    description="Hotel booking engine: availability, pricing, vouchers and loyalty points",
    version=settings.API_VERSION,
    lifespan=lifespan,
)

# Initialize repositories
room_type_repo = InMemoryRoomTypeRepository()
room_repo = InMemoryRoomRepository()
booking_repo = InMemoryBookingRepository(buffer_hours=settings.BOOKING_BUFFER_HOURS)
voucher_repo = InMemoryVoucherRepository()
charge_repo = InMemoryOverOccupancyChargeRepository()
rating_repo = InMemoryRatingRepository()

unit_of_work = InMemoryUnitOfWork(
    room_type_repo, room_repo, booking_repo, voucher_repo, charge_repo, user_repo, rating_repo
)

# Dependency injection
def get_catalog() -> CatalogAccessor:
    return CatalogAccessor(room_type_repo, room_repo)

def get_voucher_ledger() -> VoucherLedger:
    return VoucherLedger(voucher_repo)

def get_booking_service() -> BookingService:
    catalog = get_catalog()
    return BookingService(
        booking_repo=booking_repo,
        user_repo=user_repo,
        charge_repo=charge_repo,
        resolver=AvailabilityResolver(booking_repo, catalog, settings.BOOKING_BUFFER_HOURS),
        pricing=PricingCalculator(settings.DEPOSIT_RATE, settings.POINT_VALUE),
        ledger=get_voucher_ledger(),
        uow=unit_of_work,
        max_page_size=settings.MAX_PAGE_SIZE,
    )

def get_resolver() -> AvailabilityResolver:
    return AvailabilityResolver(booking_repo, get_catalog(), settings.BOOKING_BUFFER_HOURS)

def get_catalog_service() -> CatalogService:
    return CatalogService(room_type_repo, room_repo, booking_repo, get_catalog())

def get_voucher_service() -> VoucherService:
    return VoucherService(voucher_repo, get_voucher_ledger())

def get_charge_service() -> OverOccupancyChargeService:
    return OverOccupancyChargeService(charge_repo)

def get_rating_service() -> RatingService:
    return RatingService(rating_repo, booking_repo, get_catalog())

def get_user_service() -> UserService:
    return UserService(user_repo, get_password_hash, verify_password)

# ============================================================================
# ERROR HANDLERS
# ============================================================================

def _error_body(request: Request, status_code: int, code: str, message: str, details: dict) -> dict:
    return {
        "error": {
            "status": status_code,
            "code": code,
            "message": message,
            "details": details,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
        }
    }

@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    body = _error_body(request, exc.status_code, exc.code, exc.message, exc.details)
    return JSONResponse(status_code=exc.status_code, content=body, headers={"X-Error-Code": exc.code})

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    body = _error_body(request, 500, "INTERNAL_ERROR", "Internal server error", {})
    return JSONResponse(status_code=500, content=body)

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

@app.get("/api/enums/booking-status", tags=["Enum Reference"])
async def get_booking_statuses():
    """Get all BookingStatus enum values"""
    return {
        "values": [item.value for item in BookingStatus],
        "description": "Booking status values: Reserved, Cancelled, Left"
    }

@app.get("/api/enums/roles", tags=["Enum Reference"])
async def get_roles():
    """Get all Role enum values"""
    return {
        "values": [item.value for item in Role],
        "description": "User roles: Customer, OnSiteCustomer, Staff, Admin"
    }

# ============================================================================
# AUTH & USER ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: UserService = Depends(get_user_service)
):
    user = await service.authenticate(form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token_expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    access_token = create_access_token(
        data={"sub": str(user.user_id), "role": user.role.value}, expires_delta=access_token_expires
    )
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return _user_to_response(current_user)

@app.post("/api/auth/register", response_model=UserResponse, status_code=201, tags=["Auth"])
async def register_customer(
    request: RegisterRequest,
    service: UserService = Depends(get_user_service)
):
    """Self-registration of a customer account"""
    user = await service.register_customer(**request.model_dump())
    return _user_to_response(user)

@app.post("/api/users", response_model=UserResponse, status_code=201, tags=["Users"])
async def create_user(
    request: CreateUserRequest,
    service: UserService = Depends(get_user_service),
    identity: Identity = Depends(get_current_identity)
):
    """Create a user of any role (staff/admin only)"""
    fields = request.model_dump()
    user = await service.create_user(
        identity, fields.pop("email"), fields.pop("password"), fields.pop("full_name"), fields.pop("role"), **fields
    )
    return _user_to_response(user)

@app.get("/api/users", response_model=List[UserResponse], tags=["Users"])
async def get_customers(
    service: UserService = Depends(get_user_service),
    identity: Identity = Depends(get_current_identity)
):
    """List customers (staff/admin only)"""
    return [_user_to_response(u) for u in await service.get_customers(identity)]

@app.get("/api/customers/{user_id}", response_model=UserResponse, tags=["Users"])
async def get_customer(
    user_id: UUID,
    service: UserService = Depends(get_user_service),
    identity: Identity = Depends(get_current_identity)
):
    """Get a customer profile"""
    return _user_to_response(await service.get_customer(identity, user_id))

@app.put("/api/customers/{user_id}", response_model=UserResponse, tags=["Users"])
async def update_customer(
    user_id: UUID,
    request: UpdateCustomerRequest,
    service: UserService = Depends(get_user_service),
    identity: Identity = Depends(get_current_identity)
):
    """Update a customer profile"""
    try:
        user = await service.update_customer(identity, user_id, request.model_dump(exclude_unset=True))
        return _user_to_response(user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingResponse, status_code=201, tags=["Bookings"])
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    identity: Identity = Depends(get_current_identity)
):
    """Create a reserved booking"""
    booking = await service.create_booking(
        actor=identity,
        user_id=request.user_id,
        check_in=request.check_in_time,
        check_out=request.check_out_time,
        number_of_guests=request.number_of_guests,
        paid_amount=request.paid_amount,
        payment_method=request.payment_method,
        type_rooms=_type_room_requests(request.type_rooms),
        room_ids=request.room_ids,
        redeemed_point=request.redeemed_point,
        voucher_code=request.voucher_code,
    )
    return _booking_to_response(booking)

@app.post("/api/bookings/quote", response_model=QuoteResponse, tags=["Bookings"])
async def quote_booking(
    request: QuoteBookingRequest,
    service: BookingService = Depends(get_booking_service),
    identity: Identity = Depends(get_current_identity)
):
    """Price a booking request without reserving anything"""
    quote = await service.quote_booking(
        actor=identity,
        user_id=request.user_id,
        check_in=request.check_in_time,
        check_out=request.check_out_time,
        number_of_guests=request.number_of_guests,
        type_rooms=_type_room_requests(request.type_rooms),
        room_ids=request.room_ids,
        redeemed_point=request.redeemed_point,
        voucher_code=request.voucher_code,
    )
    return quote.model_dump()

@app.get("/api/bookings", response_model=BookingPageResponse, tags=["Bookings"])
async def list_bookings(
    response: Response,
    page: int = Query(1),
    size: int = Query(10),
    user_id: Optional[UUID] = None,
    room_id: Optional[UUID] = None,
    current_status: Optional[BookingStatus] = None,
    check_in_time: Optional[datetime] = None,
    check_out_time: Optional[datetime] = None,
    service: BookingService = Depends(get_booking_service),
    identity: Identity = Depends(get_current_identity)
):
    """List bookings with filters and pagination"""
    result = await service.list_bookings(
        identity, page, size,
        user_id=user_id,
        room_id=room_id,
        current_status=current_status,
        check_in_time=check_in_time,
        check_out_time=check_out_time,
    )
    response.headers["X-Total-Count"] = str(result.total_pages)
    return BookingPageResponse(
        items=[_booking_to_response(b) for b in result.items],
        page=result.page,
        size=result.size,
        total_pages=result.total_pages,
        total_items=result.total_items,
    )

@app.get("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    identity: Identity = Depends(get_current_identity)
):
    """Get booking by ID"""
    return _booking_to_response(await service.get_booking(identity, booking_id))

@app.put("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def update_booking(
    booking_id: UUID,
    request: UpdateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    identity: Identity = Depends(get_current_identity)
):
    """Partially update a booking"""
    booking = await service.update_booking(identity, booking_id, request.model_dump(exclude_unset=True))
    return _booking_to_response(booking)

# ============================================================================
# ROOM TYPE ENDPOINTS
# ============================================================================

@app.post("/api/room-types", response_model=RoomTypeResponse, status_code=201, tags=["Room Types"])
async def create_room_type(
    request: CreateRoomTypeRequest,
    service: CatalogService = Depends(get_catalog_service),
    identity: Identity = Depends(get_current_identity)
):
    """Create room type"""
    return (await service.create_room_type(identity, **request.model_dump())).model_dump()

@app.get("/api/room-types", response_model=List[RoomTypeResponse], tags=["Room Types"])
async def get_room_types(
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all room types"""
    return [t.model_dump() for t in await service.get_room_types()]

@app.get("/api/room-types/{type_id}", response_model=RoomTypeResponse, tags=["Room Types"])
async def get_room_type(
    type_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get room type by ID"""
    return (await service.get_room_type(type_id)).model_dump()

@app.put("/api/room-types/{type_id}", response_model=RoomTypeResponse, tags=["Room Types"])
async def update_room_type(
    type_id: UUID,
    request: UpdateRoomTypeRequest,
    service: CatalogService = Depends(get_catalog_service),
    identity: Identity = Depends(get_current_identity)
):
    """Update room type"""
    try:
        room_type = await service.update_room_type(identity, type_id, request.model_dump(exclude_unset=True))
        return room_type.model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.delete("/api/room-types/{type_id}", status_code=204, tags=["Room Types"])
async def delete_room_type(
    type_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    identity: Identity = Depends(get_current_identity)
):
    """Delete room type that no room references"""
    await service.delete_room_type(identity, type_id)
    return Response(status_code=204)

# ============================================================================
# ROOM ENDPOINTS
# ============================================================================

@app.post("/api/rooms", response_model=RoomResponse, status_code=201, tags=["Rooms"])
async def create_room(
    request: CreateRoomRequest,
    service: CatalogService = Depends(get_catalog_service),
    identity: Identity = Depends(get_current_identity)
):
    """Create room"""
    return (await service.create_room(identity, **request.model_dump())).model_dump()

@app.get("/api/rooms", response_model=List[RoomResponse], tags=["Rooms"])
async def get_rooms(
    type_id: Optional[UUID] = None,
    status: Optional[bool] = None,
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get rooms, optionally filtered by type and status"""
    return [r.model_dump() for r in await service.get_rooms(type_id=type_id, status=status)]

@app.get("/api/rooms/available", response_model=AvailableRoomsResponse, tags=["Rooms"])
async def get_available_rooms(
    type_id: UUID,
    check_in_time: datetime,
    check_out_time: datetime,
    resolver: AvailabilityResolver = Depends(get_resolver),
    current_user: User = Depends(get_current_active_user)
):
    """Active rooms of a type that are free for the whole stay"""
    stay = build_stay(check_in_time, check_out_time)
    room_ids = await resolver.find_available_rooms(type_id, stay)
    return AvailableRoomsResponse(
        type_id=type_id,
        check_in_time=stay.check_in,
        check_out_time=stay.check_out,
        room_ids=room_ids,
    )

@app.get("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def get_room(
    room_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get room by ID"""
    return (await service.get_room(room_id)).model_dump()

@app.get("/api/rooms/{room_id}/booked-times", response_model=List[BookedTimeResponse], tags=["Rooms"])
async def get_booked_times(
    room_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    current_user: User = Depends(get_current_active_user)
):
    """Upcoming reserved stays of a room"""
    stays = await service.get_booked_times(room_id)
    return [BookedTimeResponse(check_in_time=s.check_in, check_out_time=s.check_out) for s in stays]

@app.put("/api/rooms/{room_id}", response_model=RoomResponse, tags=["Rooms"])
async def update_room(
    room_id: UUID,
    request: UpdateRoomRequest,
    service: CatalogService = Depends(get_catalog_service),
    identity: Identity = Depends(get_current_identity)
):
    """Update room"""
    try:
        room = await service.update_room(identity, room_id, request.model_dump(exclude_unset=True))
        return room.model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.delete("/api/rooms/{room_id}", status_code=204, tags=["Rooms"])
async def delete_room(
    room_id: UUID,
    service: CatalogService = Depends(get_catalog_service),
    identity: Identity = Depends(get_current_identity)
):
    """Delete room that no booking references"""
    await service.delete_room(identity, room_id)
    return Response(status_code=204)

# ============================================================================
# VOUCHER ENDPOINTS
# ============================================================================

@app.post("/api/vouchers", response_model=VoucherResponse, status_code=201, tags=["Vouchers"])
async def create_voucher(
    request: CreateVoucherRequest,
    service: VoucherService = Depends(get_voucher_service),
    identity: Identity = Depends(get_current_identity)
):
    """Create voucher"""
    try:
        return (await service.create_voucher(identity, **request.model_dump())).model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.get("/api/vouchers", response_model=List[VoucherResponse], tags=["Vouchers"])
async def get_vouchers(
    service: VoucherService = Depends(get_voucher_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all vouchers"""
    return [v.model_dump() for v in await service.get_vouchers()]

@app.post("/api/vouchers/validate", response_model=ValidateVoucherResponse, tags=["Vouchers"])
async def validate_voucher(
    request: ValidateVoucherRequest,
    service: VoucherService = Depends(get_voucher_service),
    identity: Identity = Depends(get_current_identity)
):
    """Check whether a voucher applies, without redeeming it"""
    voucher, discount = await service.check_voucher(identity, request.code, request.user_id, request.base_price)
    return ValidateVoucherResponse(valid=True, code=voucher.code, discount=discount)

@app.get("/api/vouchers/{voucher_id}", response_model=VoucherResponse, tags=["Vouchers"])
async def get_voucher(
    voucher_id: UUID,
    service: VoucherService = Depends(get_voucher_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get voucher by ID"""
    return (await service.get_voucher(voucher_id)).model_dump()

@app.put("/api/vouchers/{voucher_id}", response_model=VoucherResponse, tags=["Vouchers"])
async def update_voucher(
    voucher_id: UUID,
    request: UpdateVoucherRequest,
    service: VoucherService = Depends(get_voucher_service),
    identity: Identity = Depends(get_current_identity)
):
    """Update voucher"""
    try:
        voucher = await service.update_voucher(identity, voucher_id, request.model_dump(exclude_unset=True))
        return voucher.model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.delete("/api/vouchers/{voucher_id}", status_code=204, tags=["Vouchers"])
async def delete_voucher(
    voucher_id: UUID,
    service: VoucherService = Depends(get_voucher_service),
    identity: Identity = Depends(get_current_identity)
):
    """Delete voucher"""
    await service.delete_voucher(identity, voucher_id)
    return Response(status_code=204)

# ============================================================================
# OVER-OCCUPANCY CHARGE ENDPOINTS
# ============================================================================

@app.post("/api/over-occupancy-charges", response_model=ChargeResponse, status_code=201, tags=["Charges"])
async def create_charge(
    request: CreateChargeRequest,
    service: OverOccupancyChargeService = Depends(get_charge_service),
    identity: Identity = Depends(get_current_identity)
):
    """Create over-occupancy charge bracket"""
    charge = await service.create_charge(identity, request.excess_guests, request.extra_charge)
    return charge.model_dump()

@app.get("/api/over-occupancy-charges", response_model=List[ChargeResponse], tags=["Charges"])
async def get_charges(
    service: OverOccupancyChargeService = Depends(get_charge_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get all charge brackets ordered by excess guests"""
    return [c.model_dump() for c in await service.get_charges()]

@app.get("/api/over-occupancy-charges/{charge_id}", response_model=ChargeResponse, tags=["Charges"])
async def get_charge(
    charge_id: UUID,
    service: OverOccupancyChargeService = Depends(get_charge_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get charge bracket by ID"""
    return (await service.get_charge(charge_id)).model_dump()

@app.put("/api/over-occupancy-charges/{charge_id}", response_model=ChargeResponse, tags=["Charges"])
async def update_charge(
    charge_id: UUID,
    request: UpdateChargeRequest,
    service: OverOccupancyChargeService = Depends(get_charge_service),
    identity: Identity = Depends(get_current_identity)
):
    """Update charge bracket"""
    try:
        charge = await service.update_charge(identity, charge_id, request.model_dump(exclude_unset=True))
        return charge.model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.delete("/api/over-occupancy-charges/{charge_id}", status_code=204, tags=["Charges"])
async def delete_charge(
    charge_id: UUID,
    service: OverOccupancyChargeService = Depends(get_charge_service),
    identity: Identity = Depends(get_current_identity)
):
    """Delete charge bracket"""
    await service.delete_charge(identity, charge_id)
    return Response(status_code=204)

# ============================================================================
# RATING ENDPOINTS
# ============================================================================

@app.post("/api/ratings", response_model=RatingResponse, status_code=201, tags=["Ratings"])
async def create_rating(
    request: CreateRatingRequest,
    service: RatingService = Depends(get_rating_service),
    identity: Identity = Depends(get_current_identity)
):
    """Rate a room type of a booking"""
    rating = await service.create_rating(
        identity, request.booking_id, request.type_room_id, request.score, request.feedback
    )
    return rating.model_dump()

@app.get("/api/ratings", response_model=List[RatingResponse], tags=["Ratings"])
async def get_ratings(
    score: Optional[int] = None,
    type_room_id: Optional[UUID] = None,
    booking_id: Optional[UUID] = None,
    service: RatingService = Depends(get_rating_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get ratings, optionally filtered"""
    ratings = await service.get_ratings(score=score, type_room_id=type_room_id, booking_id=booking_id)
    return [r.model_dump() for r in ratings]

@app.get("/api/ratings/{rating_id}", response_model=RatingResponse, tags=["Ratings"])
async def get_rating(
    rating_id: UUID,
    service: RatingService = Depends(get_rating_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get rating by ID"""
    return (await service.get_rating(rating_id)).model_dump()

@app.put("/api/ratings/{rating_id}", response_model=RatingResponse, tags=["Ratings"])
async def update_rating(
    rating_id: UUID,
    request: UpdateRatingRequest,
    service: RatingService = Depends(get_rating_service),
    identity: Identity = Depends(get_current_identity)
):
    """Update rating score or feedback"""
    try:
        rating = await service.update_rating(identity, rating_id, request.score, request.feedback)
        return rating.model_dump()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

@app.delete("/api/ratings/{rating_id}", status_code=204, tags=["Ratings"])
async def delete_rating(
    rating_id: UUID,
    service: RatingService = Depends(get_rating_service),
    identity: Identity = Depends(get_current_identity)
):
    """Delete rating"""
    await service.delete_rating(identity, rating_id)
    return Response(status_code=204)

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _type_room_requests(items) -> Optional[List[TypeRoomRequest]]:
    """Convert request bodies to TypeRoomRequest value objects"""
    if items is None:
        return None
    return [TypeRoomRequest(type_id=i.type_id, number_of_rooms=i.number_of_rooms) for i in items]

def _booking_to_response(booking) -> BookingResponse:
    """Convert Booking entity to BookingResponse"""
    return BookingResponse(
        booking_id=booking.booking_id,
        user_id=booking.user_id,
        room_ids=booking.room_ids,
        check_in_time=booking.check_in_time,
        check_out_time=booking.check_out_time,
        number_of_guests=booking.number_of_guests,
        total_amount=booking.total_amount,
        paid_amount=booking.paid_amount.model_dump(),
        payment_method=booking.payment_method,
        current_status=booking.current_status.value,
        created_at=booking.created_at,
        modified_at=booking.modified_at,
        version=booking.version
    )

def _user_to_response(user) -> UserResponse:
    """Convert User entity to UserResponse"""
    return UserResponse(
        user_id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        gender=user.gender.value,
        birth_date=user.birth_date,
        phone_number=user.phone_number,
        status=user.status,
        role=user.role.value,
        point=user.point if user.is_customer() else None,
        salary=getattr(user.profile, "salary", None),
        created_at=user.created_at
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
