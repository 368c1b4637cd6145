"""
Shared SQL for conditional slot writes

Conditional writes take a transaction-scoped advisory lock on (turf, date)
before checking, so two writers for the same day serialize in PostgreSQL.
"""

from datetime import date

import asyncpg
from uuid_utils import UUID


async def lock_turf_day(conn: asyncpg.Connection, *, turf_id: UUID, slot_date: date) -> None:
    """Must run inside a transaction; released at commit/rollback"""
    await conn.execute(
        'SELECT pg_advisory_xact_lock(hashtextextended($1, 0))',
        f'{turf_id}:{slot_date.isoformat()}',
    )


def window_free_condition(
    *,
    turf: str,
    day: str,
    start: str,
    end: str,
    session: str,
    now: str,
    ignore_hold: str = 'NULL',
) -> str:
    """
    SQL predicate: no active booking, blocked window or foreign live hold
    overlaps [start, end). Arguments are placeholders such as '$2'.
    """
    return f"""
        NOT EXISTS (
            SELECT 1 FROM booking b
            WHERE b.turf_id = {turf} AND b.booking_date = {day}
              AND b.status <> 'cancelled'
              AND b.start_hour < {end} AND {start} < b.end_hour
        )
        AND NOT EXISTS (
            SELECT 1 FROM blocked_slot s
            WHERE s.turf_id = {turf} AND s.blocked_date = {day}
              AND s.start_hour < {end} AND {start} < s.end_hour
        )
        AND NOT EXISTS (
            SELECT 1 FROM slot_hold h
            WHERE h.turf_id = {turf} AND h.hold_date = {day}
              AND h.session_id <> {session}
              AND h.expires_at > {now}
              AND h.id IS DISTINCT FROM {ignore_hold}
              AND h.start_hour < {end} AND {start} < h.end_hour
        )
    """
