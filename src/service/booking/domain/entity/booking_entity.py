from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.discount_enum import DiscountSource
from src.service.booking.domain.venue_calendar import slot_start_at


@attrs.define
class Booking:
    id: UUID
    turf_id: UUID
    owner_id: UUID
    customer_id: UUID
    booking_date: date
    start_hour: int
    end_hour: int
    total_amount: Decimal
    discount_amount: Decimal = Decimal('0')
    paid_amount: Decimal = Decimal('0')
    payment_status: str = 'pending'
    status: BookingStatus = BookingStatus.BOOKED
    offer_id: Optional[UUID] = None
    promo_code_id: Optional[UUID] = None
    discount_source: Optional[DiscountSource] = None
    cancellation_reason: Optional[str] = None
    cancelled_by: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        turf_id: UUID,
        owner_id: UUID,
        customer_id: UUID,
        booking_date: date,
        start_hour: int,
        end_hour: int,
        total_amount: Decimal,
        discount_amount: Decimal,
        offer_id: Optional[UUID],
        promo_code_id: Optional[UUID],
        discount_source: Optional[DiscountSource],
        now: datetime,
    ) -> 'Booking':
        if end_hour <= start_hour:
            raise DomainError('Booking must cover at least one hour')
        if total_amount < 0:
            raise DomainError('Booking amount cannot be negative')
        return cls(
            id=id,
            turf_id=turf_id,
            owner_id=owner_id,
            customer_id=customer_id,
            booking_date=booking_date,
            start_hour=start_hour,
            end_hour=end_hour,
            total_amount=total_amount,
            discount_amount=discount_amount,
            offer_id=offer_id,
            promo_code_id=promo_code_id,
            discount_source=discount_source,
            status=BookingStatus.BOOKED,
            created_at=now,
        )

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    @property
    def duration(self) -> int:
        return self.end_hour - self.start_hour

    def occupies(self, hour: int) -> bool:
        return self.is_active and self.start_hour <= hour < self.end_hour

    def overlaps(self, *, start_hour: int, end_hour: int) -> bool:
        return self.is_active and self.start_hour < end_hour and start_hour < self.end_hour

    @Logger.io
    def cancel(self, *, reason: str, cancelled_by: str, now: datetime) -> 'Booking':
        """
        Cancel booking (Domain validation)

        Raises:
            DomainError: When booking is already cancelled
        """
        if self.status == BookingStatus.CANCELLED:
            raise DomainError('Booking already cancelled')

        return attrs.evolve(
            self,
            status=BookingStatus.CANCELLED,
            cancellation_reason=reason,
            cancelled_by=cancelled_by,
            cancelled_at=now,
        )

    def has_ended(self, *, now: datetime, tz: tzinfo) -> bool:
        return slot_start_at(self.booking_date, self.end_hour, tz) <= now

    def starts_at(self, tz: tzinfo) -> datetime:
        return slot_start_at(self.booking_date, self.start_hour, tz)
