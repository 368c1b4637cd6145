from datetime import date
from decimal import Decimal

from src.platform.exception.exceptions import IneligibleDiscountError
from src.service.booking.domain.entity.offer_entity import PromoCode
from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.domain.enum.discount_enum import DiscountType
from src.service.booking.domain.pricing.money import percent_of


def promo_discount(*, promo: PromoCode, turf: Turf, base: Decimal, today: date) -> Decimal:
    """
    Evaluate a promo code against a base price.

    Raises:
        IneligibleDiscountError: When any eligibility rule fails
    """
    if not promo.is_active:
        raise IneligibleDiscountError(f'Promo code {promo.code} is not active')
    if not promo.is_valid_on(today):
        raise IneligibleDiscountError(f'Promo code {promo.code} has expired or is not yet valid')
    if promo.is_exhausted:
        raise IneligibleDiscountError(f'Promo code {promo.code} has reached its usage limit')
    if promo.turf_id is not None and promo.turf_id != turf.id:
        raise IneligibleDiscountError(f'Promo code {promo.code} is not valid for this turf')
    if promo.turf_id is None and promo.owner_id != turf.owner_id:
        raise IneligibleDiscountError(f'Promo code {promo.code} is not valid for this venue')
    if promo.min_booking_amount is not None and base < promo.min_booking_amount:
        raise IneligibleDiscountError(
            f'Promo code {promo.code} requires a minimum booking of {promo.min_booking_amount}'
        )

    if promo.discount_type == DiscountType.PERCENTAGE:
        amount = percent_of(base, promo.discount_value)
        if promo.max_discount is not None:
            amount = min(amount, promo.max_discount)
        return amount
    return promo.discount_value
