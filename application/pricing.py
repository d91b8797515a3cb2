"""
Pricing Calculator

Turns a set of reserved room types and a stay window into a price:
tiered daily/hourly base price, over-occupancy surcharge, voucher
discount, loyalty-point redemption and the minimum deposit.
"""
from decimal import Decimal, ROUND_FLOOR
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, Field

from domain.entities import OverOccupancyCharge, RoomType, Voucher
from domain.errors import InsufficientDeposit, OverOccupancyExceeded
from domain.value_objects import PriceBreakdown, StayWindow


class ReservationLine(BaseModel):
    """A room type and how many rooms of it are being booked"""
    room_type: RoomType
    quantity: int = Field(ge=1)


def round_half_up(value) -> int:
    """Round to the nearest integer, halves toward positive infinity"""
    return int((Decimal(value) + Decimal("0.5")).to_integral_value(rounding=ROUND_FLOOR))


def select_over_occupancy_charge(excess: int, charges: Iterable[OverOccupancyCharge]) -> OverOccupancyCharge:
    """Exact bracket for the excess, otherwise the closest higher one"""
    charges = list(charges)
    for charge in charges:
        if charge.excess_guests == excess:
            return charge

    higher = sorted(
        (c for c in charges if c.excess_guests > excess),
        key=lambda c: c.excess_guests,
    )
    if not higher:
        raise OverOccupancyExceeded(
            "The number of guests is beyond the permitted excess limit.",
            details={
                "excess_guests": excess,
                "max_excess_guests": max((c.excess_guests for c in charges), default=0),
            },
        )
    return higher[0]


class PricingCalculator:
    """Stateless price computation for booking requests"""

    def __init__(self, deposit_rate: float = 0.2, point_value: int = 1000):
        self.deposit_rate = Decimal(str(deposit_rate))
        self.point_value = point_value

    def base_price(self, lines: Sequence[ReservationLine], stay: StayWindow) -> int:
        days, remaining_hours = stay.days_and_hours()
        return sum(
            (line.room_type.price.daily_rate * days
             + line.room_type.price.hourly_rate * remaining_hours) * line.quantity
            for line in lines
        )

    def occupancy_limit(self, lines: Sequence[ReservationLine]) -> int:
        return sum(line.room_type.limit * line.quantity for line in lines)

    def extra_charge(
        self,
        lines: Sequence[ReservationLine],
        number_of_guests: int,
        charges: Iterable[OverOccupancyCharge],
    ) -> int:
        excess = number_of_guests - self.occupancy_limit(lines)
        if excess <= 0:
            return 0
        return select_over_occupancy_charge(excess, charges).extra_charge

    def redeemed_amount(self, redeemed_point: Optional[int]) -> int:
        return (redeemed_point or 0) * self.point_value

    def required_deposit(self, total: int) -> int:
        return round_half_up(Decimal(total) * self.deposit_rate)

    def price(
        self,
        lines: Sequence[ReservationLine],
        stay: StayWindow,
        number_of_guests: int,
        charges: Iterable[OverOccupancyCharge],
        voucher: Optional[Voucher] = None,
        redeemed_point: Optional[int] = None,
    ) -> PriceBreakdown:
        """
        Full price breakdown. The voucher must already be validated.

        The total is not floored at zero: a discount plus redemption larger
        than the base price yields a negative total.
        """
        base = self.base_price(lines, stay)
        extra = self.extra_charge(lines, number_of_guests, charges)
        discount = voucher.discount_for(base) if voucher else Decimal(0)
        redeemed = self.redeemed_amount(redeemed_point)
        total = round_half_up(Decimal(base) - discount - redeemed + extra)

        return PriceBreakdown(
            base_price=base,
            extra_charge=extra,
            discount=discount,
            redeemed_amount=redeemed,
            total=total,
            required_deposit=self.required_deposit(total),
            voucher_code=voucher.code if voucher else None,
        )

    def check_deposit(self, paid_amount: int, breakdown: PriceBreakdown) -> None:
        if paid_amount < breakdown.required_deposit:
            raise InsufficientDeposit(
                "The amount paid does not meet the required deposit "
                f"({self.deposit_rate * 100:.0f}% of total amount). Total is {breakdown.total}, "
                f"must pay at least {breakdown.required_deposit} for deposit",
                details={
                    "paid_amount": paid_amount,
                    "required_deposit": breakdown.required_deposit,
                    "total_amount": breakdown.total,
                },
            )

