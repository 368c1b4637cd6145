from abc import ABC, abstractmethod

from src.service.booking.app.dto.booking_notification_dto import BookingNotification


class INotificationDispatcher(ABC):
    @abstractmethod
    async def dispatch_booking_created(self, *, notification: BookingNotification) -> None:
        """Tell the venue operator about a new booking (delivery is best effort)"""
        pass
