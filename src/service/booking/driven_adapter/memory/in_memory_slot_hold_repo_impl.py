from datetime import date, datetime
from typing import Optional

from anyio.lowlevel import checkpoint
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore


class InMemorySlotHoldQueryRepoImpl(ISlotHoldQueryRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    async def get_by_id(self, *, hold_id: UUID) -> Optional[SlotHold]:
        await checkpoint()
        return self.store.holds.get(hold_id)

    async def list_live_overlapping(
        self,
        *,
        turf_id: UUID,
        hold_date: date,
        start_hour: int,
        end_hour: int,
        now: datetime,
    ) -> list[SlotHold]:
        await checkpoint()
        return [
            h
            for h in self.store.holds.values()
            if h.turf_id == turf_id
            and h.hold_date == hold_date
            and h.is_live(now)
            and h.overlaps(start_hour=start_hour, end_hour=end_hour)
        ]


class InMemorySlotHoldCommandRepoImpl(ISlotHoldCommandRepo):
    def __init__(self, *, store: InMemoryBookingStore) -> None:
        self.store = store

    @Logger.io
    async def insert_if_free(self, *, hold: SlotHold, now: datetime) -> Optional[SlotHold]:
        async with self.store.lock:
            if self.store.window_is_claimed(
                turf_id=hold.turf_id,
                slot_date=hold.hold_date,
                start_hour=hold.start_hour,
                end_hour=hold.end_hour,
                session_id=hold.session_id,
                now=now,
            ):
                return None
            self.store.holds[hold.id] = hold
            return hold

    @Logger.io
    async def extend_if_free(
        self, *, hold_id: UUID, new_end_hour: int, now: datetime
    ) -> Optional[SlotHold]:
        async with self.store.lock:
            hold = self.store.holds.get(hold_id)
            if hold is None:
                return None
            if self.store.window_is_claimed(
                turf_id=hold.turf_id,
                slot_date=hold.hold_date,
                start_hour=hold.end_hour,
                end_hour=new_end_hour,
                session_id=hold.session_id,
                now=now,
                ignore_hold_id=hold.id,
            ):
                return None
            extended = hold.with_end_hour(new_end_hour)
            self.store.holds[hold_id] = extended
            return extended

    @Logger.io
    async def update_end_hour(self, *, hold_id: UUID, end_hour: int) -> Optional[SlotHold]:
        async with self.store.lock:
            hold = self.store.holds.get(hold_id)
            if hold is None:
                return None
            updated = hold.with_end_hour(end_hour)
            self.store.holds[hold_id] = updated
            return updated

    @Logger.io
    async def delete(self, *, hold_id: UUID) -> bool:
        async with self.store.lock:
            return self.store.holds.pop(hold_id, None) is not None

    @Logger.io
    async def delete_by_session(self, *, turf_id: UUID, session_id: str) -> list[SlotHold]:
        async with self.store.lock:
            removed = [
                h
                for h in self.store.holds.values()
                if h.turf_id == turf_id and h.session_id == session_id
            ]
            for hold in removed:
                del self.store.holds[hold.id]
            return removed

    @Logger.io
    async def delete_expired(self, *, turf_id: UUID, now: datetime) -> int:
        async with self.store.lock:
            expired = [
                h.id
                for h in self.store.holds.values()
                if h.turf_id == turf_id and not h.is_live(now)
            ]
            for hold_id in expired:
                del self.store.holds[hold_id]
            return len(expired)
