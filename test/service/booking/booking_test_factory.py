"""
Booking test factories and constants

Reference instant: Monday 2025-01-13 10:00 venue time (Asia/Kolkata, UTC+05:30).
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

import uuid_utils
from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot, Turf
from src.service.shared_kernel.app.interface.i_clock import IClock


VENUE_TZ = ZoneInfo('Asia/Kolkata')
OWNER_ID = UUID('00000000-0000-0000-0000-0000000000a1')
OTHER_OWNER_ID = UUID('00000000-0000-0000-0000-0000000000a2')
TURF_ID = UUID('00000000-0000-0000-0000-0000000000b1')
CUSTOMER_ID = UUID('00000000-0000-0000-0000-0000000000c1')

NOW = datetime(2025, 1, 13, 4, 30, tzinfo=timezone.utc)  # Monday 10:00 venue time
MONDAY = date(2025, 1, 13)
WEDNESDAY = date(2025, 1, 15)
SATURDAY = date(2025, 1, 18)


class FakeClock(IClock):
    def __init__(self, current: datetime = NOW) -> None:
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, *, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


def make_turf(**overrides: Any) -> Turf:
    fields: dict[str, Any] = {
        'id': TURF_ID,
        'owner_id': OWNER_ID,
        'name': 'Arena One',
        'base_price': Decimal('500'),
        'operating_hours_start': 6,
        'operating_hours_end': 23,
    }
    fields.update(overrides)
    return Turf(**fields)


def make_booking(
    *,
    booking_date: date = WEDNESDAY,
    start_hour: int = 18,
    end_hour: int = 20,
    customer_id: UUID = CUSTOMER_ID,
    turf_id: UUID = TURF_ID,
    total_amount: Decimal = Decimal('1000'),
) -> Booking:
    return Booking(
        id=uuid_utils.uuid7(),
        turf_id=turf_id,
        owner_id=OWNER_ID,
        customer_id=customer_id,
        booking_date=booking_date,
        start_hour=start_hour,
        end_hour=end_hour,
        total_amount=total_amount,
        created_at=NOW - timedelta(days=30),
    )


def make_blocked_slot(
    *, blocked_date: date = WEDNESDAY, start_hour: int = 18, end_hour: int = 19
) -> BlockedSlot:
    return BlockedSlot(
        id=uuid_utils.uuid7(),
        turf_id=TURF_ID,
        blocked_date=blocked_date,
        start_hour=start_hour,
        end_hour=end_hour,
        reason='Maintenance',
    )


def make_hold(
    *,
    session_id: str,
    hold_date: date = WEDNESDAY,
    start_hour: int = 18,
    duration: int = 1,
    created_at: datetime = NOW,
    ttl_seconds: int = 300,
) -> SlotHold:
    return SlotHold.create(
        id=uuid_utils.uuid7(),
        turf_id=TURF_ID,
        hold_date=hold_date,
        start_hour=start_hour,
        duration=duration,
        session_id=session_id,
        now=created_at,
        ttl_seconds=ttl_seconds,
    )


