from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import Customer


class IBookingQueryRepo(ABC):
    """Repository interface for booking and customer read operations"""

    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Optional[Booking]:
        pass

    @abstractmethod
    async def get_customer_by_phone(self, *, owner_id: UUID, phone: str) -> Optional[Customer]:
        pass

    @abstractmethod
    async def list_customer_bookings(self, *, turf_id: UUID, customer_id: UUID) -> list[Booking]:
        """Non-cancelled bookings of the customer at this turf"""
        pass
