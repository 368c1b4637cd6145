from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.booking.domain.enum.discount_enum import DiscountType, RewardType
from src.service.booking.domain.venue_calendar import is_weekend, matches_weekday


def _within(day: date, valid_from: Optional[date], valid_until: Optional[date]) -> bool:
    if valid_from and day < valid_from:
        return False
    if valid_until and day > valid_until:
        return False
    return True


@attrs.define(frozen=True)
class HourRange:
    """Half-open hour range ``[start, end)``, parsed from strings like ``'06-08'``."""

    start: int
    end: int

    @classmethod
    def parse(cls, raw: str) -> 'HourRange':
        start, _, end = raw.partition('-')
        start_hour = int(start)
        return cls(start=start_hour, end=int(end) if end else start_hour + 1)

    def contains(self, hour: int) -> bool:
        return self.start <= hour < self.end


# Low-demand hours an operator may put on decay; evenings never decay
DECAY_ELIGIBLE_HOURS = HourRange(start=6, end=18)


@attrs.define
class Offer:
    id: UUID
    owner_id: UUID
    name: str
    discount_type: DiscountType
    discount_value: Decimal
    turf_id: Optional[UUID] = None  # None = every turf of the operator
    is_active: bool = True
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    applicable_days: list[str] = attrs.field(factory=list)
    applicable_hours: list[int] = attrs.field(factory=list)
    usage_count: int = 0
    views_count: int = 0
    revenue_from_offer: Decimal = Decimal('0')
    time_decay_enabled: bool = False
    time_decay_days: list[str] = attrs.field(factory=list)
    time_decay_hours: list[HourRange] = attrs.field(factory=list)
    max_time_decay_discount: Decimal = Decimal('20')
    created_at: Optional[datetime] = None

    def is_valid_on(self, day: date) -> bool:
        return self.is_active and _within(day, self.valid_from, self.valid_until)

    def matches_slot(self, *, day: date, hour: int) -> bool:
        if not self.is_valid_on(day):
            return False
        if not matches_weekday(day, self.applicable_days):
            return False
        return not self.applicable_hours or hour in self.applicable_hours

    def matches_decay_window(self, *, day: date, hour: int) -> bool:
        """
        Decay only ever fills low-demand inventory: weekdays inside
        DECAY_ELIGIBLE_HOURS. Configured days and hour ranges narrow that further.
        """
        if not (self.time_decay_enabled and self.is_valid_on(day)):
            return False
        if is_weekend(day) or not DECAY_ELIGIBLE_HOURS.contains(hour):
            return False
        if not matches_weekday(day, self.time_decay_days):
            return False
        return not self.time_decay_hours or any(r.contains(hour) for r in self.time_decay_hours)


@attrs.define(frozen=True)
class FirstBookingOffer:
    id: UUID
    owner_id: UUID
    booking_number: int
    discount_type: DiscountType
    discount_value: Decimal
    start_hour: int = 0
    end_hour: int = 24
    turf_id: Optional[UUID] = None
    applicable_days: list[str] = attrs.field(factory=list)
    is_active: bool = True

    def matches(self, *, booking_number: int, day: date, hour: int) -> bool:
        return (
            self.is_active
            and self.booking_number == booking_number
            and matches_weekday(day, self.applicable_days)
            and self.start_hour <= hour < self.end_hour
        )


@attrs.define(frozen=True)
class LoyaltyMilestoneOffer:
    id: UUID
    owner_id: UUID
    milestone_booking_count: int
    reward_type: RewardType
    reward_value: Decimal = Decimal('0')
    free_hour_on_duration: Optional[int] = None
    turf_id: Optional[UUID] = None
    is_active: bool = True

    def is_reached_by(self, booking_number: int) -> bool:
        return self.is_active and self.milestone_booking_count == booking_number


@attrs.define
class PromoCode:
    id: UUID
    owner_id: UUID
    code: str = attrs.field(converter=lambda value: value.strip().upper())
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount_value: Decimal = Decimal('0')
    turf_id: Optional[UUID] = None
    min_booking_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    usage_limit: Optional[int] = None
    used_count: int = 0
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    is_active: bool = True

    def is_valid_on(self, day: date) -> bool:
        return _within(day, self.valid_from, self.valid_until)

    @property
    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and self.used_count >= self.usage_limit
