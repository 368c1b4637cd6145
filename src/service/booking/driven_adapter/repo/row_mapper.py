"""asyncpg Record -> domain entity conversion"""

from decimal import Decimal
from typing import Optional

import asyncpg

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import Customer
from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    HourRange,
    LoyaltyMilestoneOffer,
    Offer,
    PromoCode,
)
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot, Turf
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.discount_enum import DiscountSource, DiscountType, RewardType


TURF_COLUMNS = """
    id, owner_id, name, sport_type, is_public, operating_hours_start, operating_hours_end,
    base_price, price_1h, price_2h, price_3h, weekday_price, weekend_price, peak_hour_price
"""

HOLD_COLUMNS = 'id, turf_id, hold_date, start_hour, end_hour, session_id, expires_at, created_at'

BOOKING_COLUMNS = """
    id, turf_id, owner_id, customer_id, booking_date, start_hour, end_hour, total_amount,
    discount_amount, paid_amount, payment_status, status, offer_id, promo_code_id,
    discount_source, cancellation_reason, cancelled_by, cancelled_at, created_at
"""

CUSTOMER_COLUMNS = """
    id, owner_id, name, phone, email, total_bookings, total_spent, loyalty_points, last_visit
"""


def _money(value: Optional[Decimal]) -> Optional[Decimal]:
    return Decimal(value) if value is not None else None


def row_to_turf(row: asyncpg.Record) -> Turf:
    return Turf(
        id=row['id'],
        owner_id=row['owner_id'],
        name=row['name'],
        sport_type=row['sport_type'],
        is_public=row['is_public'],
        operating_hours_start=row['operating_hours_start'],
        operating_hours_end=row['operating_hours_end'],
        base_price=Decimal(row['base_price']),
        price_1h=_money(row['price_1h']),
        price_2h=_money(row['price_2h']),
        price_3h=_money(row['price_3h']),
        weekday_price=_money(row['weekday_price']),
        weekend_price=_money(row['weekend_price']),
        peak_hour_price=_money(row['peak_hour_price']),
    )


def row_to_blocked_slot(row: asyncpg.Record) -> BlockedSlot:
    return BlockedSlot(
        id=row['id'],
        turf_id=row['turf_id'],
        blocked_date=row['blocked_date'],
        start_hour=row['start_hour'],
        end_hour=row['end_hour'],
        reason=row['reason'],
    )


def row_to_hold(row: asyncpg.Record) -> SlotHold:
    return SlotHold(
        id=row['id'],
        turf_id=row['turf_id'],
        hold_date=row['hold_date'],
        start_hour=row['start_hour'],
        end_hour=row['end_hour'],
        session_id=row['session_id'],
        expires_at=row['expires_at'],
        created_at=row['created_at'],
    )


def row_to_booking(row: asyncpg.Record) -> Booking:
    return Booking(
        id=row['id'],
        turf_id=row['turf_id'],
        owner_id=row['owner_id'],
        customer_id=row['customer_id'],
        booking_date=row['booking_date'],
        start_hour=row['start_hour'],
        end_hour=row['end_hour'],
        total_amount=Decimal(row['total_amount']),
        discount_amount=Decimal(row['discount_amount']),
        paid_amount=Decimal(row['paid_amount']),
        payment_status=row['payment_status'],
        status=BookingStatus(row['status']),
        offer_id=row['offer_id'],
        promo_code_id=row['promo_code_id'],
        discount_source=DiscountSource(row['discount_source']) if row['discount_source'] else None,
        cancellation_reason=row['cancellation_reason'],
        cancelled_by=row['cancelled_by'],
        cancelled_at=row['cancelled_at'],
        created_at=row['created_at'],
    )


def row_to_customer(row: asyncpg.Record) -> Customer:
    return Customer(
        id=row['id'],
        owner_id=row['owner_id'],
        name=row['name'],
        phone=row['phone'],
        email=row['email'],
        total_bookings=row['total_bookings'],
        total_spent=Decimal(row['total_spent']),
        loyalty_points=row['loyalty_points'],
        last_visit=row['last_visit'],
    )


def row_to_offer(row: asyncpg.Record) -> Offer:
    return Offer(
        id=row['id'],
        owner_id=row['owner_id'],
        turf_id=row['turf_id'],
        name=row['name'],
        discount_type=DiscountType(row['discount_type']),
        discount_value=Decimal(row['discount_value']),
        is_active=row['is_active'],
        valid_from=row['valid_from'],
        valid_until=row['valid_until'],
        applicable_days=list(row['applicable_days'] or []),
        applicable_hours=list(row['applicable_hours'] or []),
        usage_count=row['usage_count'],
        views_count=row['views_count'],
        revenue_from_offer=Decimal(row['revenue_from_offer']),
        time_decay_enabled=row['time_decay_enabled'],
        time_decay_days=list(row['time_decay_days'] or []),
        time_decay_hours=[HourRange.parse(raw) for raw in row['time_decay_hours'] or []],
        max_time_decay_discount=Decimal(row['max_time_decay_discount']),
        created_at=row['created_at'],
    )


def row_to_first_booking_offer(row: asyncpg.Record) -> FirstBookingOffer:
    return FirstBookingOffer(
        id=row['id'],
        owner_id=row['owner_id'],
        turf_id=row['turf_id'],
        booking_number=row['booking_number'],
        discount_type=DiscountType(row['discount_type']),
        discount_value=Decimal(row['discount_value']),
        applicable_days=list(row['applicable_days'] or []),
        start_hour=row['start_hour'],
        end_hour=row['end_hour'],
        is_active=row['is_active'],
    )


def row_to_loyalty_milestone(row: asyncpg.Record) -> LoyaltyMilestoneOffer:
    return LoyaltyMilestoneOffer(
        id=row['id'],
        owner_id=row['owner_id'],
        turf_id=row['turf_id'],
        milestone_booking_count=row['milestone_booking_count'],
        reward_type=RewardType(row['reward_type']),
        reward_value=Decimal(row['reward_value']),
        free_hour_on_duration=row['free_hour_on_duration'],
        is_active=row['is_active'],
    )


def row_to_promo_code(row: asyncpg.Record) -> PromoCode:
    return PromoCode(
        id=row['id'],
        owner_id=row['owner_id'],
        turf_id=row['turf_id'],
        code=row['code'],
        discount_type=DiscountType(row['discount_type']),
        discount_value=Decimal(row['discount_value']),
        min_booking_amount=_money(row['min_booking_amount']),
        max_discount=_money(row['max_discount']),
        usage_limit=row['usage_limit'],
        used_count=row['used_count'],
        valid_from=row['valid_from'],
        valid_until=row['valid_until'],
        is_active=row['is_active'],
    )
