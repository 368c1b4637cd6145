"""Turf Change Notifier Interface (Port)

Turf-scoped "something changed" channel. Payloads carry no slot data; every
subscriber re-reads the grid through the resolver when a signal arrives.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from typing import Any

from uuid_utils import UUID


class ITurfChangeNotifier(ABC):
    @abstractmethod
    async def publish_change(self, *, turf_id: UUID, entity: str, action: str) -> None:
        """
        Publish a change signal to every subscriber of the turf

        Args:
            turf_id: Turf whose slots changed
            entity: 'hold' or 'booking'
            action: What happened (created, extended, released, expired, cancelled)

        Note:
            - Publishing never raises; delivery failures are logged
        """
        pass

    @abstractmethod
    def subscribe(self, *, turf_id: UUID) -> AsyncGenerator[dict[str, Any], None]:
        """
        Subscribe to change signals of a turf

        Yields:
            {'turf_id', 'entity', 'action', 'timestamp'} dictionaries
        """
        pass
