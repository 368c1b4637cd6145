"""
In-process change channel interface

Turf change signals fan out to SSE viewers of the same process through this
port. Channels are plain strings such as `turf:changes:<turf_id>`.
"""

from typing import Protocol

from anyio.streams.memory import MemoryObjectReceiveStream


class IInMemoryEventBroadcaster(Protocol):
    async def subscribe(self, *, channel: str) -> MemoryObjectReceiveStream[dict]:
        """Open a bounded stream that receives every signal sent to `channel`"""
        ...

    async def broadcast(self, *, channel: str, event_data: dict) -> None:
        """
        Deliver to current subscribers without waiting

        A channel with no viewers is a no-op; a full viewer stream drops the signal.
        """
        ...

    async def unsubscribe(self, *, channel: str, stream: MemoryObjectReceiveStream[dict]) -> None:
        """Close the stream; unknown streams are ignored"""
        ...

    def subscriber_count(self, channel: str) -> int: ...
