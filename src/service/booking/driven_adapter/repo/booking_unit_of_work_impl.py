"""
asyncpg Unit of Work

One pooled connection and one database transaction for the whole commit:
customer, booking, counters, loyalty and ticket writes land together or not at all.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

import asyncpg
from asyncpg.pool import PoolConnectionProxy
from asyncpg.transaction import Transaction
from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
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
from src.service.booking.driven_adapter.repo.row_mapper import (
    BOOKING_COLUMNS,
    CUSTOMER_COLUMNS,
    row_to_booking,
    row_to_customer,
)
from src.service.booking.driven_adapter.repo.slot_claim_sql import (
    lock_turf_day,
    window_free_condition,
)


Connection = asyncpg.Connection | PoolConnectionProxy


class CustomerCommandRepoImpl(ICustomerCommandRepo):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    async def get_by_phone(self, *, owner_id: UUID, phone: str) -> Optional[Customer]:
        row = await self.conn.fetchrow(
            f"""
            SELECT {CUSTOMER_COLUMNS} FROM customer
            WHERE owner_id = $1 AND phone = $2
            FOR UPDATE
            """,
            owner_id,
            phone,
        )
        return row_to_customer(row) if row else None

    async def create_if_absent(self, *, customer: Customer) -> Optional[Customer]:
        # Waits on a concurrent insert of the same (owner_id, phone) until it commits
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO customer ({CUSTOMER_COLUMNS})
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
            ON CONFLICT (owner_id, phone) DO NOTHING
            RETURNING {CUSTOMER_COLUMNS}
            """,
            customer.id,
            customer.owner_id,
            customer.name,
            customer.phone,
            customer.email,
            customer.total_bookings,
            customer.total_spent,
            customer.loyalty_points,
            customer.last_visit,
        )
        return row_to_customer(row) if row else None

    async def update(self, *, customer: Customer) -> Customer:
        row = await self.conn.fetchrow(
            f"""
            UPDATE customer
            SET name = $2, email = $3, total_bookings = $4, total_spent = $5,
                loyalty_points = $6, last_visit = $7
            WHERE id = $1
            RETURNING {CUSTOMER_COLUMNS}
            """,
            customer.id,
            customer.name,
            customer.email,
            customer.total_bookings,
            customer.total_spent,
            customer.loyalty_points,
            customer.last_visit,
        )
        return row_to_customer(row)


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    async def insert_if_free(
        self, *, booking: Booking, session_id: str, now: datetime
    ) -> Optional[Booking]:
        await lock_turf_day(self.conn, turf_id=booking.turf_id, slot_date=booking.booking_date)
        condition = window_free_condition(
            turf='$2', day='$5', start='$6', end='$7', session='$20', now='$21'
        )
        row = await self.conn.fetchrow(
            f"""
            INSERT INTO booking ({BOOKING_COLUMNS})
            SELECT $1::uuid, $2::uuid, $3::uuid, $4::uuid, $5::date, $6::int, $7::int,
                   $8::numeric, $9::numeric, $10::numeric, $11::text, $12::text,
                   $13::uuid, $14::uuid, $15::text, $16::text, $17::text,
                   $18::timestamptz, $19::timestamptz
            WHERE {condition}
            RETURNING {BOOKING_COLUMNS}
            """,
            booking.id,
            booking.turf_id,
            booking.owner_id,
            booking.customer_id,
            booking.booking_date,
            booking.start_hour,
            booking.end_hour,
            booking.total_amount,
            booking.discount_amount,
            booking.paid_amount,
            booking.payment_status,
            booking.status.value,
            booking.offer_id,
            booking.promo_code_id,
            booking.discount_source.value if booking.discount_source else None,
            booking.cancellation_reason,
            booking.cancelled_by,
            booking.cancelled_at,
            booking.created_at,
            session_id,
            now,
        )
        return row_to_booking(row) if row else None

    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        row = await self.conn.fetchrow(
            f'SELECT {BOOKING_COLUMNS} FROM booking WHERE id = $1 FOR UPDATE', booking_id
        )
        return row_to_booking(row) if row else None

    async def update_cancellation(self, *, booking: Booking) -> Booking:
        row = await self.conn.fetchrow(
            f"""
            UPDATE booking
            SET status = $2, cancellation_reason = $3, cancelled_by = $4, cancelled_at = $5
            WHERE id = $1
            RETURNING {BOOKING_COLUMNS}
            """,
            booking.id,
            booking.status.value,
            booking.cancellation_reason,
            booking.cancelled_by,
            booking.cancelled_at,
        )
        return row_to_booking(row)


class OfferUsageCommandRepoImpl(IOfferUsageCommandRepo):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    async def record_offer_usage(self, *, offer_id: UUID, revenue: Decimal) -> None:
        await self.conn.execute(
            """
            UPDATE offer
            SET usage_count = usage_count + 1,
                revenue_from_offer = revenue_from_offer + $2
            WHERE id = $1
            """,
            offer_id,
            revenue,
        )

    async def increment_promo_usage(self, *, promo_code_id: UUID) -> bool:
        result = await self.conn.execute(
            """
            UPDATE promo_code
            SET used_count = used_count + 1
            WHERE id = $1 AND (usage_limit IS NULL OR used_count < usage_limit)
            """,
            promo_code_id,
        )
        return result != 'UPDATE 0'


class LoyaltyTransactionCommandRepoImpl(ILoyaltyTransactionCommandRepo):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    async def create(self, *, transaction: LoyaltyTransaction) -> LoyaltyTransaction:
        await self.conn.execute(
            """
            INSERT INTO loyalty_transaction
                (id, owner_id, customer_id, booking_id, points, transaction_type, description)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            """,
            transaction.id,
            transaction.owner_id,
            transaction.customer_id,
            transaction.booking_id,
            transaction.points,
            transaction.transaction_type,
            transaction.description,
        )
        return transaction


class BookingTicketCommandRepoImpl(IBookingTicketCommandRepo):
    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    async def insert_if_code_free(self, *, ticket: BookingTicket) -> Optional[BookingTicket]:
        row = await self.conn.fetchrow(
            """
            INSERT INTO booking_ticket (id, booking_id, ticket_code, qr_data)
            VALUES ($1, $2, $3, $4)
            ON CONFLICT (ticket_code) DO NOTHING
            RETURNING id
            """,
            ticket.id,
            ticket.booking_id,
            ticket.ticket_code,
            ticket.qr_data,
        )
        return ticket if row else None


class AsyncpgBookingUnitOfWork(IBookingUnitOfWork):
    def __init__(self) -> None:
        self._pool: Optional[asyncpg.Pool] = None
        self._conn: Optional[PoolConnectionProxy] = None
        self._transaction: Optional[Transaction] = None

    async def __aenter__(self) -> AsyncpgBookingUnitOfWork:
        self._pool = await get_asyncpg_pool()
        self._conn = await self._pool.acquire()
        self._transaction = self._conn.transaction()
        await self._transaction.start()

        self.customers = CustomerCommandRepoImpl(self._conn)
        self.bookings = BookingCommandRepoImpl(self._conn)
        self.offer_usage = OfferUsageCommandRepoImpl(self._conn)
        self.loyalty_transactions = LoyaltyTransactionCommandRepoImpl(self._conn)
        self.tickets = BookingTicketCommandRepoImpl(self._conn)
        return self

    async def commit(self) -> None:
        if self._transaction is not None:
            await self._transaction.commit()
            self._transaction = None
        await self._release()

    async def rollback(self) -> None:
        if self._transaction is not None:
            try:
                await self._transaction.rollback()
            finally:
                self._transaction = None
                await self._release()
            Logger.base.warning('↩️ [UoW] Booking transaction rolled back')
            return
        await self._release()

    async def _release(self) -> None:
        if self._conn is not None and self._pool is not None:
            await self._pool.release(self._conn)
            self._conn = None
