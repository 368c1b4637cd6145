"""
Unit of Work for the booking commit

Architecture:
- UoW owns the transaction (a database transaction, or a locked snapshot in memory)
- Command repositories obtained from the UoW share that transaction
- Leaving the block without commit() rolls everything back

Usage:
    async with uow:
        customer = await uow.customers.get_by_phone(...)
        booking = await uow.bookings.insert_if_free(...)
        await uow.commit()
"""

from __future__ import annotations

import abc
from datetime import datetime
from decimal import Decimal
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import (
    BookingTicket,
    Customer,
    LoyaltyTransaction,
)


class ICustomerCommandRepo(abc.ABC):
    @abc.abstractmethod
    async def get_by_phone(self, *, owner_id: UUID, phone: str) -> Optional[Customer]:
        pass

    @abc.abstractmethod
    async def create_if_absent(self, *, customer: Customer) -> Optional[Customer]:
        """None when the operator already has a ledger row for this phone"""
        pass

    @abc.abstractmethod
    async def update(self, *, customer: Customer) -> Customer:
        pass


class IBookingCommandRepo(abc.ABC):
    @abc.abstractmethod
    async def insert_if_free(
        self, *, booking: Booking, session_id: str, now: datetime
    ) -> Optional[Booking]:
        """
        Insert unless any hour is claimed by an active booking, a blocked
        window, or a live hold of a session other than ``session_id``.
        """
        pass

    @abc.abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        pass

    @abc.abstractmethod
    async def update_cancellation(self, *, booking: Booking) -> Booking:
        pass


class IOfferUsageCommandRepo(abc.ABC):
    @abc.abstractmethod
    async def record_offer_usage(self, *, offer_id: UUID, revenue: Decimal) -> None:
        """usage_count + 1 and revenue_from_offer + revenue"""
        pass

    @abc.abstractmethod
    async def increment_promo_usage(self, *, promo_code_id: UUID) -> bool:
        """used_count + 1 unless the usage limit is already reached"""
        pass


class ILoyaltyTransactionCommandRepo(abc.ABC):
    @abc.abstractmethod
    async def create(self, *, transaction: LoyaltyTransaction) -> LoyaltyTransaction:
        pass


class IBookingTicketCommandRepo(abc.ABC):
    @abc.abstractmethod
    async def insert_if_code_free(self, *, ticket: BookingTicket) -> Optional[BookingTicket]:
        """None when the ticket code is already taken"""
        pass


class IBookingUnitOfWork(abc.ABC):
    customers: ICustomerCommandRepo
    bookings: IBookingCommandRepo
    offer_usage: IOfferUsageCommandRepo
    loyalty_transactions: ILoyaltyTransactionCommandRepo
    tickets: IBookingTicketCommandRepo

    @abc.abstractmethod
    async def __aenter__(self) -> IBookingUnitOfWork:
        raise NotImplementedError

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    @abc.abstractmethod
    async def commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        """No-op after a successful commit"""
        raise NotImplementedError
