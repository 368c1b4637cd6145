from unittest.mock import AsyncMock

import pytest

from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore
from test.service.booking.booking_test_factory import FakeClock, make_turf


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def turf() -> Turf:
    return make_turf()


@pytest.fixture
def store(turf: Turf) -> InMemoryBookingStore:
    store = InMemoryBookingStore()
    store.add_turf(turf)
    return store


@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()
