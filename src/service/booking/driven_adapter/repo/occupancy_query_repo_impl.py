from datetime import date

from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_occupancy_query_repo import IOccupancyQueryRepo
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot
from src.service.booking.driven_adapter.repo.row_mapper import (
    BOOKING_COLUMNS,
    HOLD_COLUMNS,
    row_to_blocked_slot,
    row_to_booking,
    row_to_hold,
)


class OccupancyQueryRepoImpl(IOccupancyQueryRepo):
    @Logger.io
    async def list_active_bookings(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[Booking]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {BOOKING_COLUMNS}
                FROM booking
                WHERE turf_id = $1 AND booking_date BETWEEN $2 AND $3
                  AND status <> 'cancelled'
                """,
                turf_id,
                start_date,
                end_date,
            )
            return [row_to_booking(row) for row in rows]

    @Logger.io
    async def list_blocked_slots(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[BlockedSlot]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT id, turf_id, blocked_date, start_hour, end_hour, reason
                FROM blocked_slot
                WHERE turf_id = $1 AND blocked_date BETWEEN $2 AND $3
                """,
                turf_id,
                start_date,
                end_date,
            )
            return [row_to_blocked_slot(row) for row in rows]

    @Logger.io
    async def list_holds(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {HOLD_COLUMNS}
                FROM slot_hold
                WHERE turf_id = $1 AND hold_date BETWEEN $2 AND $3
                """,
                turf_id,
                start_date,
                end_date,
            )
            return [row_to_hold(row) for row in rows]
