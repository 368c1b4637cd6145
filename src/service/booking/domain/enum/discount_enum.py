from enum import StrEnum


class DiscountType(StrEnum):
    PERCENTAGE = 'percentage'
    FLAT = 'flat'


class RewardType(StrEnum):
    FLAT = 'flat'
    PERCENTAGE = 'percentage'
    FREE_HOUR = 'free_hour'


class DiscountSource(StrEnum):
    """Which primary discount layer fired for a quote"""

    LOYALTY_MILESTONE = 'loyalty_milestone'
    FIRST_BOOKING = 'first_booking'
    OFFER = 'offer'
    TIME_DECAY = 'time_decay'
