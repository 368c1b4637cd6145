"""
In-memory Booking Store

Process-local backing store for every booking port. Used for local
development, single-instance deployments and tests.

Concurrency:
- ``lock`` serializes every conditional write (check + write is one step)
- The unit of work holds ``lock`` for its whole block and restores a
  snapshot on rollback
- Entities are immutable snapshots; updates replace the dict entry
"""

from datetime import date, datetime
from typing import Any, Optional

import anyio
from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import (
    BookingTicket,
    Customer,
    LoyaltyTransaction,
)
from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    LoyaltyMilestoneOffer,
    Offer,
    PromoCode,
)
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot, Turf


_TABLES = (
    'turfs',
    'blocked_slots',
    'holds',
    'bookings',
    'offers',
    'first_booking_offers',
    'loyalty_milestones',
    'promo_codes',
    'customers',
    'loyalty_transactions',
    'tickets',
)


class InMemoryBookingStore:
    def __init__(self) -> None:
        self.lock = anyio.Lock()
        self.turfs: dict[UUID, Turf] = {}
        self.blocked_slots: dict[UUID, BlockedSlot] = {}
        self.holds: dict[UUID, SlotHold] = {}
        self.bookings: dict[UUID, Booking] = {}
        self.offers: dict[UUID, Offer] = {}
        self.first_booking_offers: dict[UUID, FirstBookingOffer] = {}
        self.loyalty_milestones: dict[UUID, LoyaltyMilestoneOffer] = {}
        self.promo_codes: dict[UUID, PromoCode] = {}
        self.customers: dict[UUID, Customer] = {}
        self.loyalty_transactions: dict[UUID, LoyaltyTransaction] = {}
        self.tickets: dict[UUID, BookingTicket] = {}

    # ============================ Seeding ============================

    def add_turf(self, turf: Turf) -> Turf:
        self.turfs[turf.id] = turf
        return turf

    def add_blocked_slot(self, blocked_slot: BlockedSlot) -> BlockedSlot:
        self.blocked_slots[blocked_slot.id] = blocked_slot
        return blocked_slot

    def add_booking(self, booking: Booking) -> Booking:
        self.bookings[booking.id] = booking
        return booking

    def add_hold(self, hold: SlotHold) -> SlotHold:
        self.holds[hold.id] = hold
        return hold

    def add_offer(self, offer: Offer) -> Offer:
        self.offers[offer.id] = offer
        return offer

    def add_first_booking_offer(self, offer: FirstBookingOffer) -> FirstBookingOffer:
        self.first_booking_offers[offer.id] = offer
        return offer

    def add_loyalty_milestone(self, milestone: LoyaltyMilestoneOffer) -> LoyaltyMilestoneOffer:
        self.loyalty_milestones[milestone.id] = milestone
        return milestone

    def add_promo_code(self, promo: PromoCode) -> PromoCode:
        self.promo_codes[promo.id] = promo
        return promo

    def add_customer(self, customer: Customer) -> Customer:
        self.customers[customer.id] = customer
        return customer

    # ============================ Conflict checks ============================

    def window_is_claimed(
        self,
        *,
        turf_id: UUID,
        slot_date: date,
        start_hour: int,
        end_hour: int,
        session_id: Optional[str],
        now: datetime,
        ignore_hold_id: Optional[UUID] = None,
    ) -> bool:
        """Caller must hold ``lock``"""
        for booking in self.bookings.values():
            if (
                booking.turf_id == turf_id
                and booking.booking_date == slot_date
                and booking.overlaps(start_hour=start_hour, end_hour=end_hour)
            ):
                return True

        for blocked in self.blocked_slots.values():
            if (
                blocked.turf_id == turf_id
                and blocked.blocked_date == slot_date
                and blocked.start_hour < end_hour
                and start_hour < blocked.end_hour
            ):
                return True

        for hold in self.holds.values():
            if hold.id == ignore_hold_id or hold.is_owned_by(session_id):
                continue
            if (
                hold.turf_id == turf_id
                and hold.hold_date == slot_date
                and hold.is_live(now)
                and hold.overlaps(start_hour=start_hour, end_hour=end_hour)
            ):
                return True

        return False

    # ============================ Snapshot ============================

    def snapshot(self) -> dict[str, dict[UUID, Any]]:
        return {table: dict(getattr(self, table)) for table in _TABLES}

    def restore(self, snapshot: dict[str, dict[UUID, Any]]) -> None:
        for table, rows in snapshot.items():
            setattr(self, table, rows)
