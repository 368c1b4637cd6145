from decimal import Decimal
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.booking.domain.enum.discount_enum import DiscountSource


@attrs.define(frozen=True)
class PrimaryDiscount:
    """Result of the mutually exclusive discount layers"""

    source: DiscountSource
    amount: Decimal
    label: str
    offer_id: Optional[UUID] = None
    first_booking_offer_id: Optional[UUID] = None
    loyalty_milestone_id: Optional[UUID] = None
    decay_percent: Optional[Decimal] = None


@attrs.define(frozen=True)
class PriceQuote:
    base_price: Decimal
    primary_discount: Decimal
    promo_discount: Decimal
    final_price: Decimal
    savings_percent: int
    discount_source: Optional[DiscountSource] = None
    discount_label: Optional[str] = None
    offer_id: Optional[UUID] = None
    first_booking_offer_id: Optional[UUID] = None
    loyalty_milestone_id: Optional[UUID] = None
    promo_code_id: Optional[UUID] = None

    @property
    def total_discount(self) -> Decimal:
        return self.primary_discount + self.promo_discount

    @property
    def counts_offer_usage(self) -> bool:
        """Offer-table layers (plain or time-decay) carry usage counters"""
        return self.offer_id is not None and self.discount_source in (
            DiscountSource.OFFER,
            DiscountSource.TIME_DECAY,
        )
