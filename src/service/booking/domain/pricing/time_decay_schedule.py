"""Last-minute discount that grows as the slot start approaches"""

from decimal import Decimal


# (hours until start <= threshold, percent), tightest threshold first
_SCHEDULE: tuple[tuple[int, Decimal], ...] = (
    (3, Decimal('20')),
    (6, Decimal('15')),
    (12, Decimal('10')),
    (24, Decimal('5')),
)


def time_decay_percent(*, hours_until_start: float, cap: Decimal) -> Decimal:
    # A slot that has already started is no longer sellable inventory
    if hours_until_start <= 0:
        return Decimal('0')
    for threshold, percent in _SCHEDULE:
        if hours_until_start <= threshold:
            return min(percent, cap)
    return Decimal('0')
