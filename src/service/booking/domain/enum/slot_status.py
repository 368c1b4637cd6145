from enum import StrEnum


class SlotStatus(StrEnum):
    """Per-hour classification shown on the slot grid, in priority order."""

    PAST = 'past'
    BOOKED = 'booked'
    BLOCKED = 'blocked'
    HELD_BY_OTHER = 'held_by_other'
    HELD_BY_SELF = 'held_by_self'
    AVAILABLE = 'available'
