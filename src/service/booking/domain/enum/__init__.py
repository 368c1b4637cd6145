"""Booking Enums"""

from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.discount_enum import DiscountSource, DiscountType, RewardType
from src.service.booking.domain.enum.slot_status import SlotStatus

__all__ = ['BookingStatus', 'DiscountSource', 'DiscountType', 'RewardType', 'SlotStatus']
