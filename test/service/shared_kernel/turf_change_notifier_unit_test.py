"""
Unit tests for the turf change channel

Signals carry no slot data; viewers re-read the grid on every signal.
"""

from contextlib import aclosing
from unittest.mock import AsyncMock

import anyio
import orjson
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from uuid_utils import UUID

from src.platform.event.in_memory_broadcaster import InMemoryEventBroadcasterImpl
from src.service.shared_kernel.driven_adapter.in_memory_turf_change_notifier_impl import (
    InMemoryTurfChangeNotifierImpl,
)
from src.service.shared_kernel.driven_adapter.pubsub_handler_impl import (
    PubSubTurfChangeNotifierImpl,
)


TURF_ID = UUID('00000000-0000-0000-0000-0000000000b1')


@pytest.mark.unit
class TestInMemoryTurfChangeNotifier:
    @pytest.mark.asyncio
    async def test_subscriber_receives_signal(self) -> None:
        """
        Given: A viewer subscribed to a turf
        When: A hold is created on that turf
        Then: The viewer receives {turf_id, entity, action, timestamp}
        """
        broadcaster = InMemoryEventBroadcasterImpl()
        notifier = InMemoryTurfChangeNotifierImpl(broadcaster=broadcaster)
        received: list[dict] = []

        async def consume() -> None:
            async with aclosing(notifier.subscribe(turf_id=TURF_ID)) as events:
                async for event in events:
                    received.append(event)
                    break

        with anyio.fail_after(2.0):
            async with anyio.create_task_group() as tg:
                tg.start_soon(consume)
                while broadcaster.subscriber_count(f'turf:changes:{TURF_ID}') == 0:
                    await anyio.sleep(0.01)
                await notifier.publish_change(turf_id=TURF_ID, entity='hold', action='created')

        [event] = received
        assert event['turf_id'] == str(TURF_ID)
        assert event['entity'] == 'hold'
        assert event['action'] == 'created'
        assert isinstance(event['timestamp'], float)
        # Subscription is torn down once the consumer stops
        assert broadcaster.subscriber_count(f'turf:changes:{TURF_ID}') == 0

    @pytest.mark.asyncio
    async def test_publish_without_viewers_is_noop(self) -> None:
        notifier = InMemoryTurfChangeNotifierImpl(broadcaster=InMemoryEventBroadcasterImpl())

        await notifier.publish_change(turf_id=TURF_ID, entity='booking', action='created')


@pytest.mark.unit
class TestPubSubTurfChangeNotifier:
    @pytest.mark.asyncio
    async def test_publish_encodes_signal(self) -> None:
        redis_client = AsyncMock()
        redis_client.publish.return_value = 2
        notifier = PubSubTurfChangeNotifierImpl(redis_client=redis_client)

        await notifier.publish_change(turf_id=TURF_ID, entity='booking', action='cancelled')

        channel, message = redis_client.publish.await_args.args
        assert channel.endswith(f'turf:changes:{TURF_ID}')
        payload = orjson.loads(message)
        assert payload['entity'] == 'booking'
        assert payload['action'] == 'cancelled'

    @pytest.mark.asyncio
    async def test_publish_failure_is_swallowed(self) -> None:
        redis_client = AsyncMock()
        redis_client.publish.side_effect = RedisConnectionError('down')
        notifier = PubSubTurfChangeNotifierImpl(redis_client=redis_client)

        # Change signals are hints; a lost one must not fail the write path
        await notifier.publish_change(turf_id=TURF_ID, entity='hold', action='created')
