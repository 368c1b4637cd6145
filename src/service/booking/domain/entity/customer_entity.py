from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import UUID


@attrs.define
class Customer:
    """Per-operator customer ledger entry, keyed by (owner_id, phone)."""

    id: UUID
    owner_id: UUID
    name: str
    phone: str
    email: Optional[str] = None
    total_bookings: int = 0
    total_spent: Decimal = Decimal('0')
    loyalty_points: int = 0
    last_visit: Optional[datetime] = None

    def accrue(self, *, amount: Decimal, points: int, visited_at: datetime) -> 'Customer':
        return attrs.evolve(
            self,
            total_bookings=self.total_bookings + 1,
            total_spent=self.total_spent + amount,
            loyalty_points=self.loyalty_points + points,
            last_visit=visited_at,
        )


@attrs.define(frozen=True)
class LoyaltyTransaction:
    id: UUID
    owner_id: UUID
    customer_id: UUID
    booking_id: UUID
    points: int
    description: str
    transaction_type: str = 'earn'


@attrs.define(frozen=True)
class BookingTicket:
    id: UUID
    booking_id: UUID
    ticket_code: str
    qr_data: str
