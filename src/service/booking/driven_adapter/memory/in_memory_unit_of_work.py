from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import attrs
from anyio.lowlevel import checkpoint
from uuid_utils import UUID

from src.service.booking.app.interface.i_booking_unit_of_work import (
    IBookingCommandRepo,
    IBookingTicketCommandRepo,
    IBookingUnitOfWork,
    ICustomerCommandRepo,
    ILoyaltyTransactionCommandRepo,
    IOfferUsageCommandRepo,
)
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import (
    BookingTicket,
    Customer,
    LoyaltyTransaction,
)
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore


# Repositories below run inside InMemoryBookingUnitOfWork, which already holds store.lock


class _CustomerCommandRepo(ICustomerCommandRepo):
    def __init__(self, store: InMemoryBookingStore) -> None:
        self.store = store

    async def get_by_phone(self, *, owner_id: UUID, phone: str) -> Optional[Customer]:
        await checkpoint()
        for customer in self.store.customers.values():
            if customer.owner_id == owner_id and customer.phone == phone:
                return customer
        return None

    async def create_if_absent(self, *, customer: Customer) -> Optional[Customer]:
        if await self.get_by_phone(owner_id=customer.owner_id, phone=customer.phone):
            return None
        self.store.customers[customer.id] = customer
        return customer

    async def update(self, *, customer: Customer) -> Customer:
        await checkpoint()
        self.store.customers[customer.id] = customer
        return customer


class _BookingCommandRepo(IBookingCommandRepo):
    def __init__(self, store: InMemoryBookingStore) -> None:
        self.store = store

    async def insert_if_free(
        self, *, booking: Booking, session_id: str, now: datetime
    ) -> Optional[Booking]:
        await checkpoint()
        if self.store.window_is_claimed(
            turf_id=booking.turf_id,
            slot_date=booking.booking_date,
            start_hour=booking.start_hour,
            end_hour=booking.end_hour,
            session_id=session_id,
            now=now,
        ):
            return None
        self.store.bookings[booking.id] = booking
        return booking

    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        await checkpoint()
        return self.store.bookings.get(booking_id)

    async def update_cancellation(self, *, booking: Booking) -> Booking:
        await checkpoint()
        self.store.bookings[booking.id] = booking
        return booking


class _OfferUsageCommandRepo(IOfferUsageCommandRepo):
    def __init__(self, store: InMemoryBookingStore) -> None:
        self.store = store

    async def record_offer_usage(self, *, offer_id: UUID, revenue: Decimal) -> None:
        await checkpoint()
        offer = self.store.offers.get(offer_id)
        if offer is None:
            return
        self.store.offers[offer_id] = attrs.evolve(
            offer,
            usage_count=offer.usage_count + 1,
            revenue_from_offer=offer.revenue_from_offer + revenue,
        )

    async def increment_promo_usage(self, *, promo_code_id: UUID) -> bool:
        await checkpoint()
        promo = self.store.promo_codes.get(promo_code_id)
        if promo is None or promo.is_exhausted:
            return False
        self.store.promo_codes[promo_code_id] = attrs.evolve(
            promo, used_count=promo.used_count + 1
        )
        return True


class _LoyaltyTransactionCommandRepo(ILoyaltyTransactionCommandRepo):
    def __init__(self, store: InMemoryBookingStore) -> None:
        self.store = store

    async def create(self, *, transaction: LoyaltyTransaction) -> LoyaltyTransaction:
        await checkpoint()
        self.store.loyalty_transactions[transaction.id] = transaction
        return transaction


class _BookingTicketCommandRepo(IBookingTicketCommandRepo):
    def __init__(self, store: InMemoryBookingStore) -> None:
        self.store = store

    async def insert_if_code_free(self, *, ticket: BookingTicket) -> Optional[BookingTicket]:
        await checkpoint()
        if any(t.ticket_code == ticket.ticket_code for t in self.store.tickets.values()):
            return None
        self.store.tickets[ticket.id] = ticket
        return ticket


class InMemoryBookingUnitOfWork(IBookingUnitOfWork):
    """
    Serializes the whole block on the store lock and restores the snapshot
    taken on entry unless commit() was called.
    """

    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store
        self._snapshot: Optional[dict[str, dict[UUID, Any]]] = None
        self._locked = False
        self.customers = _CustomerCommandRepo(store)
        self.bookings = _BookingCommandRepo(store)
        self.offer_usage = _OfferUsageCommandRepo(store)
        self.loyalty_transactions = _LoyaltyTransactionCommandRepo(store)
        self.tickets = _BookingTicketCommandRepo(store)

    async def __aenter__(self) -> InMemoryBookingUnitOfWork:
        await self.store.lock.acquire()
        self._locked = True
        self._snapshot = self.store.snapshot()
        return self

    async def commit(self) -> None:
        self._snapshot = None
        self._release()

    async def rollback(self) -> None:
        if self._snapshot is not None:
            self.store.restore(self._snapshot)
            self._snapshot = None
        self._release()

    def _release(self) -> None:
        if self._locked:
            self._locked = False
            self.store.lock.release()
