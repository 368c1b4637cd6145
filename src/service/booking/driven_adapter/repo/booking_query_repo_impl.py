from typing import Optional

from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import Customer
from src.service.booking.driven_adapter.repo.row_mapper import (
    BOOKING_COLUMNS,
    CUSTOMER_COLUMNS,
    row_to_booking,
    row_to_customer,
)


class BookingQueryRepoImpl(IBookingQueryRepo):
    @Logger.io
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            row = await conn.fetchrow(
                f'SELECT {BOOKING_COLUMNS} FROM booking WHERE id = $1', booking_id
            )
            return row_to_booking(row) if row else None

    @Logger.io
    async def get_customer_by_phone(self, *, owner_id: UUID, phone: str) -> Optional[Customer]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            row = await conn.fetchrow(
                f'SELECT {CUSTOMER_COLUMNS} FROM customer WHERE owner_id = $1 AND phone = $2',
                owner_id,
                phone,
            )
            return row_to_customer(row) if row else None

    @Logger.io
    async def list_customer_bookings(self, *, turf_id: UUID, customer_id: UUID) -> list[Booking]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {BOOKING_COLUMNS}
                FROM booking
                WHERE turf_id = $1 AND customer_id = $2 AND status <> 'cancelled'
                ORDER BY booking_date, start_hour
                """,
                turf_id,
                customer_id,
            )
            return [row_to_booking(row) for row in rows]
