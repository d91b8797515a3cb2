"""Domain Entities - Users, Identity and role-based permissions"""
import re
from datetime import date, datetime
from typing import Annotated, Callable, FrozenSet, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from domain.enums import CUSTOMER_ROLES, ELEVATED_ROLES, Gender, Role
from domain.errors import Forbidden, InsufficientPoints, ValidationError
from domain.value_objects import utcnow

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


# ==================== ROLE PROFILES ====================
class CustomerProfile(BaseModel):
    role: Literal[Role.CUSTOMER] = Role.CUSTOMER
    point: int = Field(default=0, ge=0)


class OnSiteCustomerProfile(BaseModel):
    role: Literal[Role.ONSITE_CUSTOMER] = Role.ONSITE_CUSTOMER
    point: int = Field(default=0, ge=0)


class StaffProfile(BaseModel):
    role: Literal[Role.STAFF] = Role.STAFF
    salary: Optional[int] = Field(default=None, ge=0)


class AdminProfile(BaseModel):
    role: Literal[Role.ADMIN] = Role.ADMIN


Profile = Annotated[
    Union[CustomerProfile, OnSiteCustomerProfile, StaffProfile, AdminProfile],
    Field(discriminator="role"),
]

PROFILE_BY_ROLE = {
    Role.CUSTOMER: CustomerProfile,
    Role.ONSITE_CUSTOMER: OnSiteCustomerProfile,
    Role.STAFF: StaffProfile,
    Role.ADMIN: AdminProfile,
}


class Identity(BaseModel):
    """The authenticated caller as seen by the services"""
    user_id: UUID
    role: Role

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    class Config:
        frozen = True


class User(BaseModel):
    """User Entity: common base record plus a role-specific profile"""
    user_id: UUID = Field(default_factory=uuid4)
    email: str
    full_name: str
    gender: Gender = Gender.OTHER
    birth_date: Optional[date] = None
    phone_number: Optional[str] = None
    status: bool = True
    hashed_password: str
    profile: Profile
    created_at: datetime = Field(default_factory=utcnow)

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def register(
        email: str,
        password: str,
        full_name: str,
        role: Role,
        hasher: Callable[[str], str],
        gender: Gender = Gender.OTHER,
        birth_date: Optional[date] = None,
        phone_number: Optional[str] = None,
        point: int = 0,
        salary: Optional[int] = None,
    ) -> "User":
        """Create a user, validating and hashing the password up front"""
        validate_password_strength(password)
        if not EMAIL_PATTERN.match(email):
            raise ValidationError(f"Invalid email address: {email}")

        if role in CUSTOMER_ROLES:
            profile = PROFILE_BY_ROLE[role](point=point)
        elif role == Role.STAFF:
            profile = StaffProfile(salary=salary)
        else:
            profile = AdminProfile()

        return User(
            email=email.lower(),
            full_name=full_name,
            gender=gender,
            birth_date=birth_date,
            phone_number=phone_number,
            hashed_password=hasher(password),
            profile=profile,
        )

    # ==================== QUERY METHODS ====================
    @property
    def role(self) -> Role:
        return self.profile.role

    @property
    def point(self) -> int:
        return getattr(self.profile, "point", 0)

    def is_customer(self) -> bool:
        return self.role in CUSTOMER_ROLES

    def identity(self) -> Identity:
        return Identity(user_id=self.user_id, role=self.role)

    # ==================== MODIFICATION METHODS ====================
    def debit_points(self, points: int) -> None:
        """Deduct redeemed loyalty points"""
        if not self.is_customer():
            raise ValidationError(f"User with id {self.user_id} has no point balance")
        if points < 0:
            raise ValidationError("Redeemed points must not be negative")
        if self.point < points:
            raise InsufficientPoints(
                "This user's points are not enough to fulfill the request.",
                details={"balance": self.point, "requested": points},
            )
        self.profile = self.profile.model_copy(update={"point": self.point - points})


def validate_password_strength(password: str) -> None:
    """Password must be at least 8 characters with letters and digits"""
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters long")
    if not re.search(r"[A-Za-z]", password) or not re.search(r"\d", password):
        raise ValidationError("Password must contain both letters and digits")


# ==================== PERMISSIONS ====================
def ensure_owner_or_elevated(identity: Identity, owner_id: UUID) -> None:
    """Not an admin nor staff nor the resource owner"""
    if not identity.is_elevated and identity.user_id != owner_id:
        raise Forbidden()


def ensure_elevated(identity: Identity) -> None:
    if not identity.is_elevated:
        raise Forbidden("Access denied. You are not allowed to do this action")


BOOKING_FIELDS: FrozenSet[str] = frozenset({
    "user_id", "room_ids", "check_in_time", "check_out_time", "number_of_guests",
    "total_amount", "paid_amount", "payment_method", "current_status",
})

CUSTOMER_PROFILE_FIELDS: FrozenSet[str] = frozenset({
    "full_name", "gender", "birth_date", "phone_number", "password",
})


def editable_booking_fields(role: Role) -> FrozenSet[str]:
    """Booking fields a caller with this role may change"""
    if role in ELEVATED_ROLES:
        return BOOKING_FIELDS
    return frozenset({"current_status"})


def editable_customer_fields(role: Role) -> FrozenSet[str]:
    """Customer fields a caller with this role may change"""
    if role in ELEVATED_ROLES:
        return CUSTOMER_PROFILE_FIELDS | {"point", "status"}
    return CUSTOMER_PROFILE_FIELDS
