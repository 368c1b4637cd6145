"""
SSE change stream tests

TestClient buffers the whole response body, which never ends for an event
stream, so the endpoint is awaited directly and its body iterator is read
until the first event.
"""

from collections.abc import Generator

import anyio
from fastapi.testclient import TestClient
import orjson
import pytest
from sse_starlette.sse import EventSourceResponse

from src.platform.config.di import container
from src.service.booking.driving_adapter.http_controller.turf_controller import (
    stream_turf_changes,
)
from test.service.booking.booking_test_factory import TURF_ID


CHANNEL = f'turf:changes:{TURF_ID}'


@pytest.fixture
def fresh_container() -> Generator[None, None, None]:
    container.reset_singletons()
    yield
    container.reset_singletons()


@pytest.mark.api
class TestTurfChangeStream:
    def test_route_is_mounted(self, client: TestClient) -> None:
        path = client.app.url_path_for('stream_turf_changes', turf_id=str(TURF_ID))

        assert path == f'/api/turf/{TURF_ID}/changes'

    @pytest.mark.asyncio
    async def test_subscriber_receives_turf_change(self, fresh_container: None) -> None:
        """
        Given: A client subscribed to the turf's change stream
        When: A hold is created on that turf
        Then: The client receives one turf_change event naming the hold
        """
        response = await stream_turf_changes(turf_id=TURF_ID, session_id='session-a')
        assert isinstance(response, EventSourceResponse)

        broadcaster = container.in_memory_broadcaster()
        received: list[dict[str, str]] = []

        async def read_first_event() -> None:
            received.append(await anext(response.body_iterator))

        with anyio.fail_after(5):
            async with anyio.create_task_group() as tg:
                tg.start_soon(read_first_event)
                while broadcaster.subscriber_count(CHANNEL) == 0:
                    await anyio.sleep(0.01)
                await container.turf_change_notifier().publish_change(
                    turf_id=TURF_ID, entity='hold', action='created'
                )

        await response.body_iterator.aclose()

        assert len(received) == 1
        assert received[0]['event'] == 'turf_change'
        data = orjson.loads(received[0]['data'])
        assert data['turf_id'] == str(TURF_ID)
        assert (data['entity'], data['action']) == ('hold', 'created')
