"""
Primary discount layers

Layers are mutually exclusive and tried in priority order; the first one that
yields a discount wins:
    1. loyalty milestone reached by this booking
    2. first-N-booking offer
    3. first matching offer (plain or time-decay) in creation order
"""

from collections.abc import Iterable
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    LoyaltyMilestoneOffer,
    Offer,
)
from src.service.booking.domain.enum.discount_enum import DiscountSource, DiscountType, RewardType
from src.service.booking.domain.pricing.money import percent_of, round_half_up
from src.service.booking.domain.pricing.time_decay_schedule import time_decay_percent
from src.service.booking.domain.value_object.price_quote import PrimaryDiscount


_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _apply(discount_type: DiscountType, value: Decimal, base: Decimal) -> Decimal:
    if discount_type == DiscountType.PERCENTAGE:
        return percent_of(base, value)
    return value


def offer_order_key(offer: Offer) -> tuple[datetime, str]:
    return (offer.created_at or _EPOCH, str(offer.id))


def loyalty_discount(
    *,
    milestones: Iterable[LoyaltyMilestoneOffer],
    booking_number: int,
    base: Decimal,
    duration: int,
) -> Optional[PrimaryDiscount]:
    for milestone in milestones:
        if not milestone.is_reached_by(booking_number):
            continue

        if milestone.reward_type == RewardType.FREE_HOUR:
            # Gate not met: fall through to the next layer
            if duration < (milestone.free_hour_on_duration or 1):
                continue
            amount = round_half_up(base / duration)
            label = f'Loyalty reward: 1 free hour ({milestone.milestone_booking_count}th booking)'
        elif milestone.reward_type == RewardType.PERCENTAGE:
            amount = percent_of(base, milestone.reward_value)
            label = f'Loyalty reward: {milestone.reward_value}% off'
        else:
            amount = milestone.reward_value
            label = f'Loyalty reward: {milestone.reward_value} off'

        return PrimaryDiscount(
            source=DiscountSource.LOYALTY_MILESTONE,
            amount=amount,
            label=label,
            loyalty_milestone_id=milestone.id,
        )
    return None


def first_booking_discount(
    *,
    offers: Iterable[FirstBookingOffer],
    booking_number: int,
    slot_date: date,
    start_hour: int,
    base: Decimal,
) -> Optional[PrimaryDiscount]:
    for offer in offers:
        if offer.matches(booking_number=booking_number, day=slot_date, hour=start_hour):
            return PrimaryDiscount(
                source=DiscountSource.FIRST_BOOKING,
                amount=_apply(offer.discount_type, offer.discount_value, base),
                label=f'Booking #{booking_number} offer',
                first_booking_offer_id=offer.id,
            )
    return None


def offer_discount(
    *,
    offers: Iterable[Offer],
    slot_date: date,
    start_hour: int,
    hours_until_start: float,
    base: Decimal,
) -> Optional[PrimaryDiscount]:
    for offer in sorted(offers, key=offer_order_key):
        if offer.time_decay_enabled:
            if not offer.matches_decay_window(day=slot_date, hour=start_hour):
                continue
            percent = time_decay_percent(
                hours_until_start=hours_until_start, cap=offer.max_time_decay_discount
            )
            if percent <= 0:
                continue
            return PrimaryDiscount(
                source=DiscountSource.TIME_DECAY,
                amount=percent_of(base, percent),
                label=f'{offer.name}: last-minute {percent}% off',
                offer_id=offer.id,
                decay_percent=percent,
            )

        if offer.matches_slot(day=slot_date, hour=start_hour):
            return PrimaryDiscount(
                source=DiscountSource.OFFER,
                amount=_apply(offer.discount_type, offer.discount_value, base),
                label=offer.name,
                offer_id=offer.id,
            )
    return None
