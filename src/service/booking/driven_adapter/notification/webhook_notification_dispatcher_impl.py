import httpx

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_notification_dto import BookingNotification
from src.service.booking.app.interface.i_notification_dispatcher import INotificationDispatcher


class WebhookNotificationDispatcherImpl(INotificationDispatcher):
    """
    POSTs the booking summary to the operator notification webhook.

    Delivery is best effort: HTTP failures are logged and swallowed. With no
    BOOKING_NOTIFICATION_URL configured the notification is only logged.
    """

    def __init__(
        self,
        *,
        url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = settings.BOOKING_NOTIFICATION_URL if url is None else url
        self.token = (
            settings.BOOKING_NOTIFICATION_TOKEN.get_secret_value() if token is None else token
        )
        self.timeout = settings.BOOKING_NOTIFICATION_TIMEOUT if timeout is None else timeout
        self._transport = transport

    @Logger.io
    async def dispatch_booking_created(self, *, notification: BookingNotification) -> None:
        payload = notification.to_payload()
        if not self.url:
            Logger.base.info(
                f'🔔 [NOTIFY] Webhook not configured, booking {payload["booking_id"]} '
                f'for owner {payload["turf_owner_id"]} logged only'
            )
            return

        headers = {'Authorization': f'Bearer {self.token}'} if self.token else {}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload, headers=headers)
                response.raise_for_status()
            Logger.base.info(f'🔔 [NOTIFY] Owner notified for booking {payload["booking_id"]}')
        except httpx.HTTPError as e:
            Logger.base.warning(
                f'⚠️ [NOTIFY] Failed to notify owner for booking {payload["booking_id"]}: {e}'
            )
