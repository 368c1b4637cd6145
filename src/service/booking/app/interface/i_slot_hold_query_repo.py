from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.slot_hold_entity import SlotHold


class ISlotHoldQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, hold_id: UUID) -> Optional[SlotHold]:
        pass

    @abstractmethod
    async def list_live_overlapping(
        self,
        *,
        turf_id: UUID,
        hold_date: date,
        start_hour: int,
        end_hour: int,
        now: datetime,
    ) -> list[SlotHold]:
        """Live holds of any session overlapping [start_hour, end_hour)"""
        pass
