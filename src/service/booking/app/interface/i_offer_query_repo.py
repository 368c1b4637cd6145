from abc import ABC, abstractmethod
from typing import Optional

from uuid_utils import UUID

from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    LoyaltyMilestoneOffer,
    Offer,
    PromoCode,
)
from src.service.booking.domain.entity.turf_entity import Turf


class IOfferQueryRepo(ABC):
    """
    Discount campaigns visible to a turf

    Scoped rows are those attached to the turf itself plus the operator's
    venue-wide rows (turf_id is NULL).
    """

    @abstractmethod
    async def list_offers(self, *, turf: Turf) -> list[Offer]:
        pass

    @abstractmethod
    async def list_first_booking_offers(self, *, turf: Turf) -> list[FirstBookingOffer]:
        pass

    @abstractmethod
    async def list_loyalty_milestones(self, *, turf: Turf) -> list[LoyaltyMilestoneOffer]:
        pass

    @abstractmethod
    async def get_promo_code(self, *, owner_id: UUID, code: str) -> Optional[PromoCode]:
        """Case-insensitive lookup within the operator's codes"""
        pass
