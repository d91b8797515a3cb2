"""Domain Enums"""
from enum import Enum


class BookingStatus(str, Enum):
    RESERVED = "Reserved"
    CANCELLED = "Cancelled"
    LEFT = "Left"


class Role(str, Enum):
    CUSTOMER = "Customer"
    ONSITE_CUSTOMER = "OnSiteCustomer"
    STAFF = "Staff"
    ADMIN = "Admin"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class BookingStage(str, Enum):
    """Stages a booking-creation request moves through"""
    VALIDATING = "VALIDATING"
    RESOLVING_AVAILABILITY = "RESOLVING_AVAILABILITY"
    PRICING = "PRICING"
    RESERVING_VOUCHER = "RESERVING_VOUCHER"
    DEBITING_POINTS = "DEBITING_POINTS"
    PERSISTING = "PERSISTING"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED_BACK"


ELEVATED_ROLES = frozenset({Role.STAFF, Role.ADMIN})
CUSTOMER_ROLES = frozenset({Role.CUSTOMER, Role.ONSITE_CUSTOMER})
