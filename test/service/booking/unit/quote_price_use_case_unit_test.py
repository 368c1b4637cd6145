"""
Unit tests for QuotePriceUseCase

Quotes are only given for slots that have not started yet.
"""

from decimal import Decimal

import pytest

from src.platform.exception.exceptions import NotFoundError, ValidationError
from src.service.booking.app.query.quote_price_use_case import QuotePriceUseCase
from src.service.booking.domain.pricing.pricing_engine import PricingEngine
from src.service.booking.driven_adapter.memory.in_memory_query_repo_impl import (
    InMemoryBookingQueryRepoImpl,
    InMemoryOfferQueryRepoImpl,
    InMemoryTurfQueryRepoImpl,
)
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore
from test.service.booking.booking_test_factory import (
    MONDAY,
    OTHER_OWNER_ID,
    TURF_ID,
    VENUE_TZ,
    WEDNESDAY,
    FakeClock,
)


@pytest.fixture
def use_case(store: InMemoryBookingStore, clock: FakeClock) -> QuotePriceUseCase:
    return QuotePriceUseCase(
        turf_query_repo=InMemoryTurfQueryRepoImpl(store=store),
        offer_query_repo=InMemoryOfferQueryRepoImpl(store=store),
        booking_query_repo=InMemoryBookingQueryRepoImpl(store=store),
        pricing_engine=PricingEngine(tz=VENUE_TZ),
        clock=clock,
    )


@pytest.mark.unit
class TestQuotePrice:
    @pytest.mark.asyncio
    async def test_future_slot_is_quoted(self, use_case: QuotePriceUseCase) -> None:
        quote = await use_case.quote(
            turf_id=TURF_ID, slot_date=WEDNESDAY, start_hour=10, duration=2
        )

        assert quote.base_price == Decimal('1000')
        assert quote.final_price == Decimal('1000')

    @pytest.mark.asyncio
    @pytest.mark.parametrize('start_hour', [6, 9, 10])
    async def test_started_slot_is_rejected(
        self, use_case: QuotePriceUseCase, start_hour: int
    ) -> None:
        """
        Given: Now is Monday 10:00 venue time
        When: A slot starting at or before 10:00 today is quoted
        Then: ValidationError, no price is offered
        """
        with pytest.raises(ValidationError, match='already started'):
            await use_case.quote(
                turf_id=TURF_ID, slot_date=MONDAY, start_hour=start_hour, duration=1
            )

    @pytest.mark.asyncio
    async def test_next_hour_today_is_quoted(self, use_case: QuotePriceUseCase) -> None:
        quote = await use_case.quote(turf_id=TURF_ID, slot_date=MONDAY, start_hour=11, duration=1)

        assert quote.base_price == Decimal('500')

    @pytest.mark.asyncio
    async def test_unknown_turf(self, use_case: QuotePriceUseCase) -> None:
        with pytest.raises(NotFoundError):
            await use_case.quote(
                turf_id=OTHER_OWNER_ID, slot_date=WEDNESDAY, start_hour=10, duration=1
            )
