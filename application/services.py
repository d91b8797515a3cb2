"""Application Services - Business use cases"""
import logging
import math
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel

from application.availability import AvailabilityResolver, ResolvedRooms
from application.catalog import CatalogAccessor
from application.pricing import PricingCalculator
from application.voucher_ledger import VoucherLedger
from domain.auth import (
    Identity, User, editable_booking_fields, editable_customer_fields,
    ensure_elevated, ensure_owner_or_elevated, validate_password_strength,
)
from domain.entities import Booking, OverOccupancyCharge, Rating, Room, RoomType, Voucher
from domain.enums import BookingStage, BookingStatus, CUSTOMER_ROLES, Role
from domain.errors import (
    DomainError, Forbidden, InsufficientPoints, NotFound, ValidationError,
)
from domain.repositories import (
    BookingRepository, OverOccupancyChargeRepository, RatingRepository,
    RoomRepository, RoomTypeRepository, UnitOfWork, UserRepository, VoucherRepository,
)
from domain.value_objects import PriceBreakdown, StayWindow, TypeRoomRequest, utcnow

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class BookingPage(BaseModel):
    """One page of a booking search"""
    items: List[Booking]
    page: int
    size: int
    total_pages: int
    total_items: int


class BookingQuote(BaseModel):
    """Price of a booking request and the rooms it would get"""
    room_ids: List[UUID]
    breakdown: PriceBreakdown


def build_stay(check_in: datetime, check_out: datetime) -> StayWindow:
    try:
        return StayWindow(check_in=check_in, check_out=check_out)
    except ValueError:
        raise ValidationError(
            "checkInTime must be before checkOutTime and be a date in future",
            details={"check_in_time": check_in.isoformat(), "check_out_time": check_out.isoformat()},
        )


class BookingService:
    """
    Booking Transaction Coordinator plus the booking query/update use cases.

    Creation walks VALIDATING -> RESOLVING_AVAILABILITY -> PRICING ->
    RESERVING_VOUCHER -> DEBITING_POINTS -> PERSISTING -> COMMITTED inside
    one unit of work. Any failure rolls every repository back and the
    originating error is re-raised with the failing stage in its details.
    """

    def __init__(
        self,
        booking_repo: BookingRepository,
        user_repo: UserRepository,
        charge_repo: OverOccupancyChargeRepository,
        resolver: AvailabilityResolver,
        pricing: PricingCalculator,
        ledger: VoucherLedger,
        uow: UnitOfWork,
        clock: Clock = utcnow,
        max_page_size: int = 10,
    ):
        self.booking_repo = booking_repo
        self.user_repo = user_repo
        self.charge_repo = charge_repo
        self.resolver = resolver
        self.pricing = pricing
        self.ledger = ledger
        self.uow = uow
        self.clock = clock
        self.max_page_size = max_page_size

    # ==================== CREATION ====================
    async def create_booking(
        self,
        actor: Identity,
        user_id: UUID,
        check_in: datetime,
        check_out: datetime,
        number_of_guests: int,
        paid_amount: int,
        payment_method: str,
        type_rooms: Optional[List[TypeRoomRequest]] = None,
        room_ids: Optional[List[UUID]] = None,
        redeemed_point: Optional[int] = None,
        voucher_code: Optional[str] = None,
    ) -> Booking:
        """Create a reserved booking with all side effects committed atomically"""
        stage = BookingStage.VALIDATING
        now = self.clock()
        try:
            stay = self._validate_request(actor, user_id, check_in, check_out, number_of_guests,
                                          type_rooms, room_ids, redeemed_point, now)
            async with self.uow.transaction():
                user = await self._require_customer(user_id)
                self._check_point_balance(user, redeemed_point)

                stage = BookingStage.RESOLVING_AVAILABILITY
                logger.debug("Booking for user %s entering %s", user_id, stage.value)
                resolved = await self._resolve_rooms(stay, type_rooms, room_ids)

                stage = BookingStage.PRICING
                voucher, breakdown = await self._price(
                    resolved, stay, number_of_guests, user_id, voucher_code, redeemed_point, now
                )
                self.pricing.check_deposit(paid_amount, breakdown)

                stage = BookingStage.RESERVING_VOUCHER
                if voucher:
                    await self.ledger.commit_usage(voucher, user_id)

                stage = BookingStage.DEBITING_POINTS
                if redeemed_point:
                    user.debit_points(redeemed_point)
                    await self.user_repo.update(user)

                stage = BookingStage.PERSISTING
                booking = Booking.create(
                    user_id=user_id,
                    room_ids=resolved.room_ids,
                    stay=stay,
                    number_of_guests=number_of_guests,
                    total_amount=breakdown.total,
                    paid_amount=paid_amount,
                    payment_method=payment_method,
                    now=now,
                )
                booking = await self.booking_repo.save(booking)
        except Exception as exc:
            if isinstance(exc, DomainError):
                exc.details.setdefault("stage", stage.value)
            logger.warning(
                "Booking for user %s %s at stage %s: %s",
                user_id, BookingStage.ROLLED_BACK.value, stage.value, exc,
                extra={"user_id": user_id, "stage": stage.value},
            )
            raise

        logger.info(
            "Booking %s %s for user %s, rooms %s, total %s",
            booking.booking_id, BookingStage.COMMITTED.value, user_id,
            [str(r) for r in booking.room_ids], booking.total_amount,
            extra={"booking_id": booking.booking_id, "user_id": user_id, "stage": BookingStage.COMMITTED.value},
        )
        return booking

    async def quote_booking(
        self,
        actor: Identity,
        user_id: UUID,
        check_in: datetime,
        check_out: datetime,
        number_of_guests: int,
        type_rooms: Optional[List[TypeRoomRequest]] = None,
        room_ids: Optional[List[UUID]] = None,
        redeemed_point: Optional[int] = None,
        voucher_code: Optional[str] = None,
    ) -> BookingQuote:
        """Price a booking request without reserving anything"""
        now = self.clock()
        stay = self._validate_request(actor, user_id, check_in, check_out, number_of_guests,
                                      type_rooms, room_ids, redeemed_point, now)
        user = await self._require_customer(user_id)
        self._check_point_balance(user, redeemed_point)
        resolved = await self._resolve_rooms(stay, type_rooms, room_ids)
        _, breakdown = await self._price(
            resolved, stay, number_of_guests, user_id, voucher_code, redeemed_point, now
        )
        return BookingQuote(room_ids=resolved.room_ids, breakdown=breakdown)

    def _validate_request(
        self,
        actor: Identity,
        user_id: UUID,
        check_in: datetime,
        check_out: datetime,
        number_of_guests: int,
        type_rooms: Optional[List[TypeRoomRequest]],
        room_ids: Optional[List[UUID]],
        redeemed_point: Optional[int],
        now: datetime,
    ) -> StayWindow:
        """Checks that need no stored state; runs before any read or write"""
        ensure_owner_or_elevated(actor, user_id)

        if bool(type_rooms) == bool(room_ids):
            raise ValidationError("Provide either typeRooms or roomIds, not both or neither")
        if number_of_guests < 1:
            raise ValidationError("numberOfGuests must be a positive integer")
        if redeemed_point is not None and redeemed_point < 0:
            raise ValidationError("redeemedPoint must not be negative")

        stay = build_stay(check_in, check_out)
        if stay.check_in < now:
            raise ValidationError(
                "checkInTime must be before checkOutTime and be a date in future",
                details={"check_in_time": stay.check_in.isoformat(), "now": now.isoformat()},
            )
        return stay

    async def _require_customer(self, user_id: UUID) -> User:
        user = await self.user_repo.find_by_id(user_id)
        if not user or user.role not in CUSTOMER_ROLES:
            raise NotFound("User", user_id)
        return user

    @staticmethod
    def _check_point_balance(user: User, redeemed_point: Optional[int]) -> None:
        if redeemed_point and user.point < redeemed_point:
            raise InsufficientPoints(
                "This user's points are not enough to fulfill the request.",
                details={"balance": user.point, "requested": redeemed_point},
            )

    async def _resolve_rooms(
        self,
        stay: StayWindow,
        type_rooms: Optional[List[TypeRoomRequest]],
        room_ids: Optional[List[UUID]],
    ) -> ResolvedRooms:
        if type_rooms:
            return await self.resolver.resolve_type_rooms(type_rooms, stay)
        return await self.resolver.resolve_explicit_rooms(room_ids, stay)

    async def _price(
        self,
        resolved: ResolvedRooms,
        stay: StayWindow,
        number_of_guests: int,
        user_id: UUID,
        voucher_code: Optional[str],
        redeemed_point: Optional[int],
        now: datetime,
    ) -> Tuple[Optional[Voucher], PriceBreakdown]:
        voucher = None
        if voucher_code:
            base_price = self.pricing.base_price(resolved.lines, stay)
            voucher = await self.ledger.validate(voucher_code, user_id, base_price, now)

        charges = await self.charge_repo.find_all()
        breakdown = self.pricing.price(
            resolved.lines, stay, number_of_guests, charges,
            voucher=voucher, redeemed_point=redeemed_point,
        )
        return voucher, breakdown

    # ==================== QUERIES ====================
    async def list_bookings(
        self,
        actor: Identity,
        page: int,
        size: int,
        user_id: Optional[UUID] = None,
        room_id: Optional[UUID] = None,
        current_status: Optional[BookingStatus] = None,
        check_in_time: Optional[datetime] = None,
        check_out_time: Optional[datetime] = None,
    ) -> BookingPage:
        """Filtered, paginated bookings. Customers only see their own."""
        if page < 1 or size < 1:
            raise ValidationError("page and size must be positive integers")
        size = min(size, self.max_page_size)

        if not actor.is_elevated:
            if user_id is not None and user_id != actor.user_id:
                raise Forbidden()
            user_id = actor.user_id

        items, total = await self.booking_repo.search(
            user_id=user_id,
            room_id=room_id,
            current_status=current_status,
            check_in_from=check_in_time,
            check_out_until=check_out_time,
            offset=size * (page - 1),
            limit=size,
        )
        total_pages = math.ceil(total / size)
        if total and page > total_pages:
            raise ValidationError(
                "Excess page limit",
                details={"page": page, "total_pages": total_pages},
            )
        return BookingPage(items=items, page=page, size=size, total_pages=total_pages, total_items=total)

    async def get_booking(self, actor: Identity, booking_id: UUID) -> Booking:
        booking = await self._require_booking(booking_id)
        ensure_owner_or_elevated(actor, booking.user_id)
        return booking

    async def _require_booking(self, booking_id: UUID) -> Booking:
        booking = await self.booking_repo.find_by_id(booking_id)
        if not booking:
            raise NotFound("Booking", booking_id)
        return booking

    # ==================== UPDATES ====================
    async def update_booking(self, actor: Identity, booking_id: UUID, changes: Dict[str, Any]) -> Booking:
        """
        Apply a partial update. The caller's role decides which fields may
        change; moving the stay or the rooms, or reinstating a booking,
        re-checks the no-double-booking rule against every other booking.
        """
        forbidden_fields = sorted(set(changes) - editable_booking_fields(actor.role))
        if forbidden_fields:
            raise Forbidden(
                "You are not allowed to update these booking fields",
                details={"fields": forbidden_fields},
            )
        null_fields = sorted(field for field, value in changes.items() if value is None)
        if null_fields:
            raise ValidationError(
                "Booking fields cannot be set to null",
                details={"fields": null_fields},
            )

        now = self.clock()
        async with self.uow.transaction():
            booking = await self._require_booking(booking_id)
            ensure_owner_or_elevated(actor, booking.user_id)
            was_reserved = booking.is_reserved()
            moved = False

            if "user_id" in changes:
                await self._require_customer(changes["user_id"])

            if "room_ids" in changes:
                await self.resolver.require_active_rooms(changes["room_ids"])
                booking.reassign_rooms(changes["room_ids"])
                moved = True

            if "check_in_time" in changes or "check_out_time" in changes:
                stay = build_stay(
                    changes.get("check_in_time") or booking.check_in_time,
                    changes.get("check_out_time") or booking.check_out_time,
                )
                booking.reschedule(stay, now)
                moved = True

            if "current_status" in changes:
                new_status = BookingStatus(changes["current_status"])
                if not actor.is_elevated and not (
                    booking.current_status == BookingStatus.RESERVED
                    and new_status in (BookingStatus.RESERVED, BookingStatus.CANCELLED)
                ):
                    raise Forbidden("Customers may only cancel a reserved booking")
                booking.change_status(new_status)

            if changes.keys() & {"user_id", "number_of_guests", "total_amount", "payment_method"}:
                booking.amend(
                    user_id=changes.get("user_id"),
                    number_of_guests=changes.get("number_of_guests"),
                    total_amount=changes.get("total_amount"),
                    payment_method=changes.get("payment_method"),
                )

            if changes.get("paid_amount") is not None:
                booking.record_payment(changes["paid_amount"], now)

            reinstated = booking.is_reserved() and not was_reserved
            if booking.is_reserved() and (moved or reinstated):
                await self.resolver.ensure_rooms_free(booking.room_ids, booking.stay, booking.booking_id)

            booking = await self.booking_repo.update(booking)

        logger.info("Booking %s updated by %s: %s", booking_id, actor.role.value, sorted(changes))
        return booking


class CatalogService:
    """Service for room type and room management"""

    def __init__(
        self,
        room_type_repo: RoomTypeRepository,
        room_repo: RoomRepository,
        booking_repo: BookingRepository,
        catalog: CatalogAccessor,
        clock: Clock = utcnow,
    ):
        self.room_type_repo = room_type_repo
        self.room_repo = room_repo
        self.booking_repo = booking_repo
        self.catalog = catalog
        self.clock = clock

    # ---- Room types ----
    async def create_room_type(self, actor: Identity, **fields) -> RoomType:
        ensure_elevated(actor)
        return await self.room_type_repo.save(RoomType(**fields))

    async def get_room_types(self) -> List[RoomType]:
        return await self.room_type_repo.find_all()

    async def get_room_type(self, type_id: UUID) -> RoomType:
        return await self.catalog.get_room_type(type_id)

    async def update_room_type(self, actor: Identity, type_id: UUID, changes: Dict[str, Any]) -> RoomType:
        ensure_elevated(actor)
        room_type = await self.catalog.get_room_type(type_id)
        updated = RoomType(**{**room_type.model_dump(), **changes, "type_id": type_id})
        return await self.room_type_repo.update(updated)

    async def delete_room_type(self, actor: Identity, type_id: UUID) -> None:
        ensure_elevated(actor)
        await self.catalog.get_room_type(type_id)
        if await self.room_repo.find_by_type(type_id, active_only=False):
            raise ValidationError(f"TypeRoom with id {type_id} still has rooms")
        await self.room_type_repo.delete(type_id)

    # ---- Rooms ----
    async def create_room(self, actor: Identity, **fields) -> Room:
        ensure_elevated(actor)
        room = Room(**fields)
        await self.catalog.get_room_type(room.type_id)
        return await self.room_repo.save(room)

    async def get_rooms(self, type_id: Optional[UUID] = None, status: Optional[bool] = None) -> List[Room]:
        return await self.room_repo.find_all(type_id=type_id, status=status)

    async def get_room(self, room_id: UUID) -> Room:
        return await self.catalog.get_room(room_id)

    async def update_room(self, actor: Identity, room_id: UUID, changes: Dict[str, Any]) -> Room:
        ensure_elevated(actor)
        room = await self.catalog.get_room(room_id)
        updated = Room(**{**room.model_dump(), **changes, "room_id": room_id})
        await self.catalog.get_room_type(updated.type_id)
        return await self.room_repo.update(updated)

    async def delete_room(self, actor: Identity, room_id: UUID) -> None:
        """Rooms referenced by a booking are only ever disabled"""
        ensure_elevated(actor)
        await self.catalog.get_room(room_id)
        if await self.booking_repo.find_by_room(room_id):
            raise ValidationError(
                f"Room with id {room_id} is referenced by bookings; disable it instead",
            )
        await self.room_repo.delete(room_id)

    async def get_booked_times(self, room_id: UUID) -> List[StayWindow]:
        """Upcoming or ongoing reserved stays of a room"""
        await self.catalog.get_room(room_id)
        bookings = await self.booking_repo.find_by_room(room_id, ending_after=self.clock())
        return [b.stay for b in bookings if b.is_reserved()]


class VoucherService:
    """Service for voucher management"""

    def __init__(self, voucher_repo: VoucherRepository, ledger: VoucherLedger, clock: Clock = utcnow):
        self.voucher_repo = voucher_repo
        self.ledger = ledger
        self.clock = clock

    async def create_voucher(self, actor: Identity, **fields) -> Voucher:
        ensure_elevated(actor)
        return await self.voucher_repo.save(Voucher(**fields))

    async def get_vouchers(self) -> List[Voucher]:
        return await self.voucher_repo.find_all()

    async def get_voucher(self, voucher_id: UUID) -> Voucher:
        voucher = await self.voucher_repo.find_by_id(voucher_id)
        if not voucher:
            raise NotFound("Voucher", voucher_id)
        return voucher

    async def update_voucher(self, actor: Identity, voucher_id: UUID, changes: Dict[str, Any]) -> Voucher:
        ensure_elevated(actor)
        voucher = await self.get_voucher(voucher_id)
        updated = Voucher(**{**voucher.model_dump(), **changes, "voucher_id": voucher_id})
        if len(set(updated.user_used_voucher)) != len(updated.user_used_voucher):
            raise ValidationError("A user may appear only once in the voucher usage list")
        return await self.voucher_repo.update(updated)

    async def delete_voucher(self, actor: Identity, voucher_id: UUID) -> None:
        ensure_elevated(actor)
        if not await self.voucher_repo.delete(voucher_id):
            raise NotFound("Voucher", voucher_id)

    async def check_voucher(self, actor: Identity, code: str, user_id: UUID, base_price: int) -> Tuple[Voucher, int]:
        """Read-only eligibility check; returns the voucher and its discount"""
        ensure_owner_or_elevated(actor, user_id)
        voucher = await self.ledger.validate(code, user_id, base_price, self.clock())
        return voucher, voucher.discount_for(base_price)


class OverOccupancyChargeService:
    """Service for the over-occupancy charge table"""

    def __init__(self, repository: OverOccupancyChargeRepository):
        self.repository = repository

    async def create_charge(self, actor: Identity, excess_guests: int, extra_charge: int) -> OverOccupancyCharge:
        ensure_elevated(actor)
        charge = OverOccupancyCharge(excess_guests=excess_guests, extra_charge=extra_charge)
        return await self.repository.save(charge)

    async def get_charges(self) -> List[OverOccupancyCharge]:
        return await self.repository.find_all()

    async def get_charge(self, charge_id: UUID) -> OverOccupancyCharge:
        charge = await self.repository.find_by_id(charge_id)
        if not charge:
            raise NotFound("Charge", charge_id)
        return charge

    async def update_charge(self, actor: Identity, charge_id: UUID, changes: Dict[str, Any]) -> OverOccupancyCharge:
        ensure_elevated(actor)
        charge = await self.get_charge(charge_id)
        updated = OverOccupancyCharge(**{**charge.model_dump(), **changes, "charge_id": charge_id})
        return await self.repository.update(updated)

    async def delete_charge(self, actor: Identity, charge_id: UUID) -> None:
        ensure_elevated(actor)
        if not await self.repository.delete(charge_id):
            raise NotFound("Charge", charge_id)


class RatingService:
    """Service for guest ratings of booked room types"""

    def __init__(self, rating_repo: RatingRepository, booking_repo: BookingRepository, catalog: CatalogAccessor):
        self.rating_repo = rating_repo
        self.booking_repo = booking_repo
        self.catalog = catalog

    async def create_rating(
        self,
        actor: Identity,
        booking_id: UUID,
        type_room_id: UUID,
        score: int,
        feedback: Optional[str] = None,
    ) -> Rating:
        booking = await self.booking_repo.find_by_id(booking_id)
        if not booking:
            raise NotFound("Booking", booking_id)
        ensure_owner_or_elevated(actor, booking.user_id)

        rooms = await self.catalog.get_rooms(booking.room_ids)
        if type_room_id not in {room.type_id for room in rooms}:
            raise ValidationError(f"Booking with id {booking_id} doesn't have typeId {type_room_id}")

        rating = Rating(booking_id=booking_id, type_room_id=type_room_id, score=score, feedback=feedback)
        return await self.rating_repo.save(rating)

    async def get_ratings(
        self,
        score: Optional[int] = None,
        type_room_id: Optional[UUID] = None,
        booking_id: Optional[UUID] = None,
    ) -> List[Rating]:
        return await self.rating_repo.find_all(score=score, type_room_id=type_room_id, booking_id=booking_id)

    async def get_rating(self, rating_id: UUID) -> Rating:
        rating = await self.rating_repo.find_by_id(rating_id)
        if not rating:
            raise NotFound("Rating", rating_id)
        return rating

    async def update_rating(
        self,
        actor: Identity,
        rating_id: UUID,
        score: Optional[int] = None,
        feedback: Optional[str] = None,
    ) -> Rating:
        rating = await self._owned_rating(actor, rating_id)
        changes = {k: v for k, v in {"score": score, "feedback": feedback}.items() if v is not None}
        updated = Rating(**{**rating.model_dump(), **changes})
        return await self.rating_repo.update(updated)

    async def delete_rating(self, actor: Identity, rating_id: UUID) -> None:
        await self._owned_rating(actor, rating_id)
        await self.rating_repo.delete(rating_id)

    async def _owned_rating(self, actor: Identity, rating_id: UUID) -> Rating:
        rating = await self.get_rating(rating_id)
        booking = await self.booking_repo.find_by_id(rating.booking_id)
        if booking:
            ensure_owner_or_elevated(actor, booking.user_id)
        else:
            ensure_elevated(actor)
        return rating


class UserService:
    """Service for registration, login and customer profiles"""

    def __init__(
        self,
        user_repo: UserRepository,
        hasher: Callable[[str], str],
        verifier: Callable[[str, str], bool],
    ):
        self.user_repo = user_repo
        self.hasher = hasher
        self.verifier = verifier

    async def register_customer(self, email: str, password: str, full_name: str, **profile) -> User:
        """Public self-registration; always creates a Customer"""
        user = User.register(email, password, full_name, Role.CUSTOMER, self.hasher, **profile)
        return await self.user_repo.save(user)

    async def create_user(self, actor: Identity, email: str, password: str, full_name: str, role: Role, **profile) -> User:
        ensure_elevated(actor)
        if role in (Role.STAFF, Role.ADMIN) and actor.role != Role.ADMIN:
            raise Forbidden("Only an admin can create staff or admin accounts")
        user = User.register(email, password, full_name, role, self.hasher, **profile)
        return await self.user_repo.save(user)

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        user = await self.user_repo.find_by_email(email)
        if not user or not self.verifier(password, user.hashed_password):
            return None
        return user

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return await self.user_repo.find_by_id(user_id)

    async def get_customers(self, actor: Identity) -> List[User]:
        ensure_elevated(actor)
        return await self.user_repo.find_customers()

    async def get_customer(self, actor: Identity, user_id: UUID) -> User:
        ensure_owner_or_elevated(actor, user_id)
        user = await self.user_repo.find_by_id(user_id)
        if not user or not user.is_customer():
            raise NotFound("Customer", user_id)
        return user

    async def update_customer(self, actor: Identity, user_id: UUID, changes: Dict[str, Any]) -> User:
        """Fields outside the caller's allow-list are ignored"""
        user = await self.get_customer(actor, user_id)
        allowed = editable_customer_fields(actor.role)
        changes = {k: v for k, v in changes.items() if k in allowed}

        if "password" in changes:
            password = changes.pop("password")
            validate_password_strength(password)
            changes["hashed_password"] = self.hasher(password)
        if "point" in changes:
            changes["profile"] = user.profile.model_copy(update={"point": changes.pop("point")})
            if changes["profile"].point < 0:
                raise ValidationError("Point balance must not be negative")

        updated = User(**{**user.model_dump(), **changes})
        return await self.user_repo.update(updated)
