"""Booking Status Enum"""

from enum import StrEnum


class BookingStatus(StrEnum):
    BOOKED = 'booked'
    CANCELLED = 'cancelled'
