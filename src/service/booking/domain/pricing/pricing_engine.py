from collections.abc import Sequence
from datetime import date, datetime, tzinfo
from decimal import Decimal
from typing import Optional

from src.platform.logging.loguru_io import Logger
from src.service.booking.domain.entity.offer_entity import (
    FirstBookingOffer,
    LoyaltyMilestoneOffer,
    Offer,
    PromoCode,
)
from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.domain.pricing.base_price_calculator import compute_base_price
from src.service.booking.domain.pricing.discount_resolver import (
    first_booking_discount,
    loyalty_discount,
    offer_discount,
)
from src.service.booking.domain.pricing.money import savings_percent
from src.service.booking.domain.pricing.promo_evaluator import promo_discount
from src.service.booking.domain.value_object.price_quote import PriceQuote
from src.service.booking.domain.venue_calendar import slot_start_at, venue_timezone, venue_today


class PricingEngine:
    """
    Base price -> one primary discount layer -> optional promo on top.

    The promo is evaluated against the base price, not the already
    discounted amount, and its amount is added to the primary discount.
    """

    def __init__(self, *, tz: Optional[tzinfo] = None) -> None:
        self.tz = tz or venue_timezone()

    @Logger.io(truncate_content=True)
    def quote(
        self,
        *,
        turf: Turf,
        slot_date: date,
        start_hour: int,
        duration: int,
        completed_count: int,
        offers: Sequence[Offer] = (),
        first_booking_offers: Sequence[FirstBookingOffer] = (),
        loyalty_milestones: Sequence[LoyaltyMilestoneOffer] = (),
        promo_code: Optional[PromoCode] = None,
        now: datetime,
    ) -> PriceQuote:
        base = compute_base_price(
            turf=turf, slot_date=slot_date, start_hour=start_hour, duration=duration
        )
        booking_number = completed_count + 1
        hours_until_start = (
            slot_start_at(slot_date, start_hour, self.tz) - now
        ).total_seconds() / 3600

        primary = (
            loyalty_discount(
                milestones=loyalty_milestones,
                booking_number=booking_number,
                base=base,
                duration=duration,
            )
            or first_booking_discount(
                offers=first_booking_offers,
                booking_number=booking_number,
                slot_date=slot_date,
                start_hour=start_hour,
                base=base,
            )
            or offer_discount(
                offers=offers,
                slot_date=slot_date,
                start_hour=start_hour,
                hours_until_start=hours_until_start,
                base=base,
            )
        )
        primary_amount = primary.amount if primary else Decimal('0')

        promo_amount = Decimal('0')
        if promo_code is not None:
            promo_amount = promo_discount(
                promo=promo_code, turf=turf, base=base, today=venue_today(now, self.tz)
            )

        total = primary_amount + promo_amount
        return PriceQuote(
            base_price=base,
            primary_discount=primary_amount,
            promo_discount=promo_amount,
            final_price=max(Decimal('0'), base - total),
            savings_percent=savings_percent(discount=total, base=base),
            discount_source=primary.source if primary else None,
            discount_label=primary.label if primary else None,
            offer_id=primary.offer_id if primary else None,
            first_booking_offer_id=primary.first_booking_offer_id if primary else None,
            loyalty_milestone_id=primary.loyalty_milestone_id if primary else None,
            promo_code_id=promo_code.id if promo_code is not None else None,
        )
