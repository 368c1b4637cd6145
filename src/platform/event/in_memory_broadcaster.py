"""
In-memory Event Broadcaster Implementation

Singleton broadcaster for distributing change signals to SSE endpoints.
"""

from typing import Dict, List

from anyio import WouldBlock, create_memory_object_stream
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from src.platform.logging.loguru_io import Logger


class InMemoryEventBroadcasterImpl:
    """
    In-memory pub/sub keyed by channel name

    Memory Management:
    - Stream max buffer: 10 events
    - Drop policy: Drop if stream full (send_nowait raises WouldBlock); the
      signal carries no data, so a slow consumer only misses a refresh hint
    - Cleanup: Remove empty lists on unsubscribe and close streams
    """

    def __init__(self, *, max_buffer_size: int = 10) -> None:
        self._max_buffer_size = max_buffer_size
        # channel -> list of (send_stream, receive_stream) tuples
        self._subscribers: Dict[
            str, List[tuple[MemoryObjectSendStream[dict], MemoryObjectReceiveStream[dict]]]
        ] = {}

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, []))

    async def subscribe(self, *, channel: str) -> MemoryObjectReceiveStream[dict]:
        send_stream, receive_stream = create_memory_object_stream[dict](
            max_buffer_size=self._max_buffer_size
        )
        self._subscribers.setdefault(channel, []).append((send_stream, receive_stream))

        Logger.base.debug(
            f'📡 [BROADCASTER] Subscribed to {channel} '
            f'(total subscribers: {len(self._subscribers[channel])})'
        )
        return receive_stream

    async def broadcast(self, *, channel: str, event_data: dict) -> None:
        if channel not in self._subscribers:
            Logger.base.debug(f'📡 [BROADCASTER] No subscribers for {channel}')
            return

        delivered = 0
        dropped = 0
        for send_stream, _ in self._subscribers[channel]:
            try:
                send_stream.send_nowait(event_data)
                delivered += 1
            except WouldBlock:
                dropped += 1
                Logger.base.warning(f'⚠️ [BROADCASTER] Stream full for {channel}, dropping event')

        Logger.base.info(
            f'📡 [BROADCASTER] Broadcast to {channel}: delivered={delivered}, dropped={dropped}'
        )

    async def unsubscribe(self, *, channel: str, stream: MemoryObjectReceiveStream[dict]) -> None:
        if channel not in self._subscribers:
            return

        subscribers = self._subscribers[channel]
        for i, (send_stream, receive_stream) in enumerate(subscribers):
            if receive_stream is stream:
                await send_stream.aclose()
                await receive_stream.aclose()
                subscribers.pop(i)
                Logger.base.debug(
                    f'📡 [BROADCASTER] Unsubscribed from {channel} (remaining: {len(subscribers)})'
                )
                break

        if not subscribers:
            del self._subscribers[channel]
            Logger.base.debug(f'📡 [BROADCASTER] Cleaned up empty list for {channel}')
