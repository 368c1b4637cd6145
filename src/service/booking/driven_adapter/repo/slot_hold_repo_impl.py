from datetime import date, datetime
from typing import Optional

from uuid_utils import UUID

from src.platform.database.asyncpg_setting import get_asyncpg_pool
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.driven_adapter.repo.row_mapper import HOLD_COLUMNS, row_to_hold
from src.service.booking.driven_adapter.repo.slot_claim_sql import (
    lock_turf_day,
    window_free_condition,
)


class SlotHoldQueryRepoImpl(ISlotHoldQueryRepo):
    @Logger.io
    async def get_by_id(self, *, hold_id: UUID) -> Optional[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            row = await conn.fetchrow(
                f'SELECT {HOLD_COLUMNS} FROM slot_hold WHERE id = $1',
                hold_id,
            )
            return row_to_hold(row) if row else None

    @Logger.io
    async def list_live_overlapping(
        self,
        *,
        turf_id: UUID,
        hold_date: date,
        start_hour: int,
        end_hour: int,
        now: datetime,
    ) -> list[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {HOLD_COLUMNS}
                FROM slot_hold
                WHERE turf_id = $1 AND hold_date = $2
                  AND expires_at > $5
                  AND start_hour < $4 AND $3 < end_hour
                ORDER BY created_at, id
                """,
                turf_id,
                hold_date,
                start_hour,
                end_hour,
                now,
            )
            return [row_to_hold(row) for row in rows]


class SlotHoldCommandRepoImpl(ISlotHoldCommandRepo):
    """Each conditional write runs in its own transaction under the (turf, date) lock"""

    @Logger.io
    async def insert_if_free(self, *, hold: SlotHold, now: datetime) -> Optional[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                await lock_turf_day(conn, turf_id=hold.turf_id, slot_date=hold.hold_date)
                condition = window_free_condition(
                    turf='$2', day='$3', start='$4', end='$5', session='$6', now='$9'
                )
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO slot_hold ({HOLD_COLUMNS})
                    SELECT $1::uuid, $2::uuid, $3::date, $4::int, $5::int, $6::text,
                           $7::timestamptz, $8::timestamptz
                    WHERE {condition}
                    RETURNING {HOLD_COLUMNS}
                    """,
                    hold.id,
                    hold.turf_id,
                    hold.hold_date,
                    hold.start_hour,
                    hold.end_hour,
                    hold.session_id,
                    hold.expires_at,
                    hold.created_at,
                    now,
                )
                return row_to_hold(row) if row else None

    @Logger.io
    async def extend_if_free(
        self, *, hold_id: UUID, new_end_hour: int, now: datetime
    ) -> Optional[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            async with conn.transaction():
                current = await conn.fetchrow(
                    f'SELECT {HOLD_COLUMNS} FROM slot_hold WHERE id = $1', hold_id
                )
                if current is None:
                    return None
                hold = row_to_hold(current)
                await lock_turf_day(conn, turf_id=hold.turf_id, slot_date=hold.hold_date)

                # Only the newly added hours [old_end, new_end) are checked
                condition = window_free_condition(
                    turf='slot_hold.turf_id',
                    day='slot_hold.hold_date',
                    start='slot_hold.end_hour',
                    end='$2::int',
                    session='slot_hold.session_id',
                    now='$3::timestamptz',
                    ignore_hold='slot_hold.id',
                )
                row = await conn.fetchrow(
                    f"""
                    UPDATE slot_hold
                    SET end_hour = $2
                    WHERE id = $1 AND {condition}
                    RETURNING {HOLD_COLUMNS}
                    """,
                    hold_id,
                    new_end_hour,
                    now,
                )
                return row_to_hold(row) if row else None

    @Logger.io
    async def update_end_hour(self, *, hold_id: UUID, end_hour: int) -> Optional[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            row = await conn.fetchrow(
                f'UPDATE slot_hold SET end_hour = $2 WHERE id = $1 RETURNING {HOLD_COLUMNS}',
                hold_id,
                end_hour,
            )
            return row_to_hold(row) if row else None

    @Logger.io
    async def delete(self, *, hold_id: UUID) -> bool:
        async with (await get_asyncpg_pool()).acquire() as conn:
            result = await conn.execute('DELETE FROM slot_hold WHERE id = $1', hold_id)
            return result != 'DELETE 0'

    @Logger.io
    async def delete_by_session(self, *, turf_id: UUID, session_id: str) -> list[SlotHold]:
        async with (await get_asyncpg_pool()).acquire() as conn:
            rows = await conn.fetch(
                f"""
                DELETE FROM slot_hold
                WHERE turf_id = $1 AND session_id = $2
                RETURNING {HOLD_COLUMNS}
                """,
                turf_id,
                session_id,
            )
            return [row_to_hold(row) for row in rows]

    @Logger.io
    async def delete_expired(self, *, turf_id: UUID, now: datetime) -> int:
        async with (await get_asyncpg_pool()).acquire() as conn:
            result = await conn.execute(
                'DELETE FROM slot_hold WHERE turf_id = $1 AND expires_at <= $2',
                turf_id,
                now,
            )
            # asyncpg returns the command tag, e.g. 'DELETE 3'
            return int(result.split()[-1])
