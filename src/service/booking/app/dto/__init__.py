"""Booking DTOs - Application Layer"""

from src.service.booking.app.dto.booking_notification_dto import BookingNotification
from src.service.booking.app.dto.booking_receipt_dto import BookingReceipt
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.dto.hold_dto import HoldStatus

__all__ = ['BookingNotification', 'BookingReceipt', 'CustomerIdentity', 'HoldStatus']
