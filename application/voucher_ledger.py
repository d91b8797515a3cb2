"""Voucher Ledger - voucher eligibility checks and usage recording"""
import logging
from datetime import datetime
from uuid import UUID

from domain.entities import Voucher
from domain.errors import (
    InvalidVoucherCode, MinimumSpendNotMet, VoucherAlreadyUsedByUser,
    VoucherExhausted, VoucherNotActive,
)
from domain.repositories import VoucherRepository

logger = logging.getLogger(__name__)


class VoucherLedger:
    """Validates vouchers against a booking and records redemptions"""

    def __init__(self, voucher_repo: VoucherRepository):
        self.voucher_repo = voucher_repo

    async def validate(self, code: str, user_id: UUID, base_price: int, now: datetime) -> Voucher:
        """Check every redemption rule without changing anything"""
        voucher = await self.voucher_repo.find_by_code(code)
        if not voucher:
            raise InvalidVoucherCode("Invalid voucher code", details={"code": code})

        if not voucher.is_active_at(now):
            raise VoucherNotActive(
                "Voucher has expired or isn't active yet. Valid date range is "
                f"{voucher.start_date.isoformat()} to {voucher.end_date.isoformat()}.",
                details={
                    "code": code,
                    "start_date": voucher.start_date.isoformat(),
                    "end_date": voucher.end_date.isoformat(),
                    "now": now.isoformat(),
                },
            )

        if base_price < voucher.min_spend:
            raise MinimumSpendNotMet(
                "This booking does not meet the minimum amount required to apply this voucher. "
                f"Current base price: {base_price}, required minimum: {voucher.min_spend}.",
                details={"code": code, "base_price": base_price, "min_spend": voucher.min_spend},
            )

        if voucher.is_exhausted():
            raise VoucherExhausted(
                "Voucher has reached its maximum number of uses.",
                details={"code": code, "limit_use": voucher.limit_use, "used": voucher.used_count},
            )

        if voucher.has_been_used_by(user_id):
            raise VoucherAlreadyUsedByUser(
                f"User with id {user_id} has already used voucher with code {code}.",
                details={"code": code, "user_id": str(user_id)},
            )

        return voucher

    async def commit_usage(self, voucher: Voucher, user_id: UUID) -> Voucher:
        """Record the redemption. Only call inside the booking transaction."""
        voucher.record_usage(user_id)
        logger.debug("Voucher %s redeemed by user %s", voucher.code, user_id)
        return await self.voucher_repo.update(voucher)

    async def validate_and_reserve(self, code: str, user_id: UUID, base_price: int, now: datetime) -> Voucher:
        voucher = await self.validate(code, user_id, base_price, now)
        return await self.commit_usage(voucher, user_id)
