from decimal import ROUND_HALF_UP, Decimal


WHOLE = Decimal('1')
HUNDRED = Decimal('100')


def round_half_up(value: Decimal) -> Decimal:
    """Round to whole currency units, halves away from zero."""
    return value.quantize(WHOLE, rounding=ROUND_HALF_UP)


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return round_half_up(amount * percent / HUNDRED)


def savings_percent(*, discount: Decimal, base: Decimal) -> int:
    if base <= 0:
        return 0
    return int(round_half_up(discount / base * HUNDRED))
