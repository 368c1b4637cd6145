from datetime import date
from decimal import Decimal
from typing import Any

import attrs
from uuid_utils import UUID


@attrs.define(frozen=True)
class BookingNotification:
    turf_owner_id: UUID
    booking_id: UUID
    customer_name: str
    booking_date: date
    start_time: str
    turf_name: str
    amount: Decimal

    def to_payload(self) -> dict[str, Any]:
        return {
            'turf_owner_id': str(self.turf_owner_id),
            'booking_id': str(self.booking_id),
            'customer_name': self.customer_name,
            'booking_date': self.booking_date.isoformat(),
            'start_time': self.start_time,
            'turf_name': self.turf_name,
            'amount': str(self.amount),
        }
