"""In-memory implementations of the booking read ports"""

from datetime import date
from typing import Optional

from anyio.lowlevel import checkpoint
from uuid_utils import UUID

from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.app.interface.i_occupancy_query_repo import IOccupancyQueryRepo
from src.service.booking.app.interface.i_offer_query_repo import IOfferQueryRepo
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import Customer
from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    LoyaltyMilestoneOffer,
    Offer,
    PromoCode,
)
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot, Turf
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore


def _in_scope(row_turf_id: Optional[UUID], row_owner_id: UUID, turf: Turf) -> bool:
    if row_turf_id is not None:
        return row_turf_id == turf.id
    return row_owner_id == turf.owner_id


class InMemoryTurfQueryRepoImpl(ITurfQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    async def get_by_id(self, *, turf_id: UUID) -> Optional[Turf]:
        await checkpoint()
        return self.store.turfs.get(turf_id)


class InMemoryOccupancyQueryRepoImpl(IOccupancyQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    async def list_active_bookings(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[Booking]:
        await checkpoint()
        return [
            b
            for b in self.store.bookings.values()
            if b.turf_id == turf_id and b.is_active and start_date <= b.booking_date <= end_date
        ]

    async def list_blocked_slots(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[BlockedSlot]:
        await checkpoint()
        return [
            s
            for s in self.store.blocked_slots.values()
            if s.turf_id == turf_id and start_date <= s.blocked_date <= end_date
        ]

    async def list_holds(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[SlotHold]:
        await checkpoint()
        return [
            h
            for h in self.store.holds.values()
            if h.turf_id == turf_id and start_date <= h.hold_date <= end_date
        ]


class InMemoryOfferQueryRepoImpl(IOfferQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    async def list_offers(self, *, turf: Turf) -> list[Offer]:
        await checkpoint()
        return [o for o in self.store.offers.values() if _in_scope(o.turf_id, o.owner_id, turf)]

    async def list_first_booking_offers(self, *, turf: Turf) -> list[FirstBookingOffer]:
        await checkpoint()
        return [
            o
            for o in self.store.first_booking_offers.values()
            if _in_scope(o.turf_id, o.owner_id, turf)
        ]

    async def list_loyalty_milestones(self, *, turf: Turf) -> list[LoyaltyMilestoneOffer]:
        await checkpoint()
        return [
            m
            for m in self.store.loyalty_milestones.values()
            if _in_scope(m.turf_id, m.owner_id, turf)
        ]

    async def get_promo_code(self, *, owner_id: UUID, code: str) -> Optional[PromoCode]:
        await checkpoint()
        wanted = code.strip().upper()
        for promo in self.store.promo_codes.values():
            if promo.owner_id == owner_id and promo.code == wanted:
                return promo
        return None


class InMemoryBookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        await checkpoint()
        return self.store.bookings.get(booking_id)

    async def get_customer_by_phone(self, *, owner_id: UUID, phone: str) -> Optional[Customer]:
        await checkpoint()
        for customer in self.store.customers.values():
            if customer.owner_id == owner_id and customer.phone == phone:
                return customer
        return None

    async def list_customer_bookings(self, *, turf_id: UUID, customer_id: UUID) -> list[Booking]:
        await checkpoint()
        return [
            b
            for b in self.store.bookings.values()
            if b.turf_id == turf_id and b.customer_id == customer_id and b.is_active
        ]
