from collections.abc import AsyncGenerator
from typing import Any

from uuid_utils import UUID

from src.platform.event.i_in_memory_broadcaster import IInMemoryEventBroadcaster
from src.platform.logging.loguru_io import Logger
from src.service.shared_kernel.app.interface.i_turf_change_notifier import ITurfChangeNotifier
from src.service.shared_kernel.domain.value_object.turf_change_signal import TurfChangeSignal


class InMemoryTurfChangeNotifierImpl(ITurfChangeNotifier):
    """Single-process change channel on top of the anyio memory-stream broadcaster"""

    def __init__(self, *, broadcaster: IInMemoryEventBroadcaster) -> None:
        self._broadcaster = broadcaster

    @staticmethod
    def _channel_name(turf_id: UUID) -> str:
        return f'turf:changes:{turf_id}'

    @Logger.io
    async def publish_change(self, *, turf_id: UUID, entity: str, action: str) -> None:
        signal = TurfChangeSignal(turf_id=turf_id, entity=entity, action=action)
        await self._broadcaster.broadcast(
            channel=self._channel_name(turf_id), event_data=signal.to_payload()
        )

    async def subscribe(self, *, turf_id: UUID) -> AsyncGenerator[dict[str, Any], None]:
        channel = self._channel_name(turf_id)
        stream = await self._broadcaster.subscribe(channel=channel)
        try:
            async for event_data in stream:
                yield event_data
        finally:
            await self._broadcaster.unsubscribe(channel=channel, stream=stream)
