from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.slot_hold_entity import SlotHold


class ISlotHoldCommandRepo(ABC):
    """
    Write side of slot holds

    The conditional writes are compare-and-swap: the store checks for a
    conflicting booking, blocked window or foreign live hold and writes in the
    same atomic step. They return None when the check fails.
    """

    @abstractmethod
    async def insert_if_free(self, *, hold: SlotHold, now: datetime) -> Optional[SlotHold]:
        pass

    @abstractmethod
    async def extend_if_free(
        self, *, hold_id: UUID, new_end_hour: int, now: datetime
    ) -> Optional[SlotHold]:
        """Only the hours beyond the current end are checked"""
        pass

    @abstractmethod
    async def update_end_hour(self, *, hold_id: UUID, end_hour: int) -> Optional[SlotHold]:
        pass

    @abstractmethod
    async def delete(self, *, hold_id: UUID) -> bool:
        pass

    @abstractmethod
    async def delete_by_session(self, *, turf_id: UUID, session_id: str) -> list[SlotHold]:
        """Remove every hold of the session on this turf, returning what was removed"""
        pass

    @abstractmethod
    async def delete_expired(self, *, turf_id: UUID, now: datetime) -> int:
        pass
