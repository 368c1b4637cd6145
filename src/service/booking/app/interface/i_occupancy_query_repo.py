from abc import ABC, abstractmethod
from datetime import date

from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot


class IOccupancyQueryRepo(ABC):
    """Read side of everything that can claim a slot, over an inclusive date range"""

    @abstractmethod
    async def list_active_bookings(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[Booking]:
        """Non-cancelled bookings only"""
        pass

    @abstractmethod
    async def list_blocked_slots(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[BlockedSlot]:
        pass

    @abstractmethod
    async def list_holds(
        self, *, turf_id: UUID, start_date: date, end_date: date
    ) -> list[SlotHold]:
        """May include expired rows; readers filter by expires_at"""
        pass
