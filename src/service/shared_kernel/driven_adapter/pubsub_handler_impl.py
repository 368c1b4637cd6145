"""
Kvrocks Pub/Sub Turf Change Notifier

Distributed change channel for multi-instance deployments using Kvrocks
(Redis-compatible) pub/sub.

Channel: {KVROCKS_KEY_PREFIX}turf:changes:{turf_id}
Message: orjson-encoded {'turf_id', 'entity', 'action', 'timestamp'}
"""

from collections.abc import AsyncGenerator
from typing import Any

import orjson
from redis.asyncio import Redis as AsyncRedis
from redis.exceptions import RedisError
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.shared_kernel.app.interface.i_turf_change_notifier import ITurfChangeNotifier
from src.service.shared_kernel.domain.value_object.turf_change_signal import TurfChangeSignal


class PubSubTurfChangeNotifierImpl(ITurfChangeNotifier):
    def __init__(self, *, redis_client: AsyncRedis) -> None:
        self._redis = redis_client

    @staticmethod
    def _channel_name(turf_id: UUID) -> str:
        return f'{settings.KVROCKS_KEY_PREFIX}turf:changes:{turf_id}'

    @Logger.io
    async def publish_change(self, *, turf_id: UUID, entity: str, action: str) -> None:
        channel = self._channel_name(turf_id)
        signal = TurfChangeSignal(turf_id=turf_id, entity=entity, action=action)
        try:
            subscribers = await self._redis.publish(channel, orjson.dumps(signal.to_payload()))
            Logger.base.info(f'📡 [KVROCKS] Published to {channel}: subscribers={subscribers}')
        except (RedisError, OSError) as e:
            Logger.base.warning(f'⚠️ [KVROCKS] Publish failed for {channel}: {e}')

    async def subscribe(self, *, turf_id: UUID) -> AsyncGenerator[dict[str, Any], None]:
        channel = self._channel_name(turf_id)
        # Create dedicated client with no timeout for pub/sub
        pubsub_client = await kvrocks_client.create_pubsub_client()
        pubsub = pubsub_client.pubsub()

        try:
            await pubsub.subscribe(channel)
            Logger.base.info(f'📡 [KVROCKS] Subscribed to channel: {channel}')

            async for message in pubsub.listen():
                if message['type'] != 'message':
                    continue
                data = message['data']
                try:
                    yield orjson.loads(data if isinstance(data, bytes) else data.encode())
                except orjson.JSONDecodeError as e:
                    Logger.base.error(f'❌ [KVROCKS] Failed to decode message: {e}')
        finally:
            await pubsub.unsubscribe(channel)
            await pubsub.aclose()
            await pubsub_client.aclose()
            Logger.base.info(f'📡 [KVROCKS] Unsubscribed from channel: {channel}')
