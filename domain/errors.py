"""
Domain Errors

Every business-rule failure carries a machine-readable `code`, a human
message and a `details` dict with the numeric or temporal context of the
failure. The API layer maps `status_code` onto the HTTP response.
"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base class for all booking engine errors"""

    code = "DOMAIN_ERROR"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(DomainError):
    """Malformed, missing or out-of-range input"""
    code = "VALIDATION_ERROR"


class NotFound(DomainError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, resource_type: str, identifier: Any, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"{resource_type} with id {identifier} doesn't exist", details)
        self.resource_type = resource_type
        self.identifier = identifier


class Forbidden(DomainError):
    code = "FORBIDDEN"
    status_code = 403

    def __init__(self, message: str = "You are not allowed to do this action", details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details)


class BusinessRuleViolation(DomainError):
    """Request is well formed but breaks a booking rule"""
    code = "BUSINESS_RULE_VIOLATION"


class InsufficientAvailability(BusinessRuleViolation):
    code = "INSUFFICIENT_AVAILABILITY"


class OverOccupancyExceeded(BusinessRuleViolation):
    code = "OVER_OCCUPANCY_EXCEEDED"


class InsufficientDeposit(BusinessRuleViolation):
    code = "INSUFFICIENT_DEPOSIT"


class InsufficientPoints(BusinessRuleViolation):
    code = "INSUFFICIENT_POINTS"


class VoucherError(BusinessRuleViolation):
    code = "VOUCHER_ERROR"


class InvalidVoucherCode(VoucherError):
    code = "INVALID_VOUCHER_CODE"


class VoucherNotActive(VoucherError):
    code = "VOUCHER_NOT_ACTIVE"


class MinimumSpendNotMet(VoucherError):
    code = "MINIMUM_SPEND_NOT_MET"


class VoucherExhausted(VoucherError):
    code = "VOUCHER_EXHAUSTED"


class VoucherAlreadyUsedByUser(VoucherError):
    code = "VOUCHER_ALREADY_USED_BY_USER"


class ConcurrentBookingConflict(DomainError):
    """A concurrent writer reserved an overlapping room first; safe to retry"""
    code = "CONCURRENT_BOOKING_CONFLICT"
    status_code = 409
