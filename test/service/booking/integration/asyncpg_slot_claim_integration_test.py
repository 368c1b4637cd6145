"""
PostgreSQL adapter tests

Run against the database configured by POSTGRES_* settings; skipped when it is
unreachable. Every test seeds its own turf and operator and deletes them afterwards.
"""

from collections.abc import AsyncGenerator
from decimal import Decimal

import asyncpg
import attrs
import pytest
import pytest_asyncio
import uuid_utils
from uuid_utils import UUID

from src.platform.database.asyncpg_setting import close_all_asyncpg_pools, get_asyncpg_pool
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import Customer
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.driven_adapter.repo.booking_unit_of_work_impl import (
    AsyncpgBookingUnitOfWork,
)
from src.service.booking.driven_adapter.repo.occupancy_query_repo_impl import (
    OccupancyQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.slot_hold_repo_impl import (
    SlotHoldCommandRepoImpl,
    SlotHoldQueryRepoImpl,
)
from src.service.booking.driven_adapter.repo.turf_query_repo_impl import TurfQueryRepoImpl
from test.service.booking.booking_test_factory import NOW, WEDNESDAY


HOLD_TTL_SECONDS = 300


@attrs.define
class SeededTurf:
    turf_id: UUID
    owner_id: UUID


@pytest_asyncio.fixture
async def seeded_turf() -> AsyncGenerator[SeededTurf, None]:
    try:
        pool = await get_asyncpg_pool()
    except (OSError, asyncpg.PostgresError) as e:
        pytest.skip(f'PostgreSQL unavailable: {e}')

    await create_db_and_tables()
    await dispose_engine()

    seeded = SeededTurf(turf_id=uuid_utils.uuid7(), owner_id=uuid_utils.uuid7())
    async with pool.acquire() as conn:
        await conn.execute(
            """
            INSERT INTO turf (id, owner_id, name, sport_type, is_public,
                              operating_hours_start, operating_hours_end, base_price)
            VALUES ($1, $2, 'Integration Arena', 'football', true, 6, 23, 500)
            """,
            seeded.turf_id,
            seeded.owner_id,
        )

    yield seeded

    async with pool.acquire() as conn:
        async with conn.transaction():
            await conn.execute(
                'DELETE FROM booking_ticket WHERE booking_id IN '
                '(SELECT id FROM booking WHERE turf_id = $1)',
                seeded.turf_id,
            )
            await conn.execute(
                'DELETE FROM loyalty_transaction WHERE owner_id = $1', seeded.owner_id
            )
            await conn.execute('DELETE FROM booking WHERE turf_id = $1', seeded.turf_id)
            await conn.execute('DELETE FROM slot_hold WHERE turf_id = $1', seeded.turf_id)
            await conn.execute('DELETE FROM blocked_slot WHERE turf_id = $1', seeded.turf_id)
            await conn.execute('DELETE FROM customer WHERE owner_id = $1', seeded.owner_id)
            await conn.execute('DELETE FROM turf WHERE id = $1', seeded.turf_id)
    await close_all_asyncpg_pools()


def _hold(seeded: SeededTurf, *, session_id: str, start_hour: int, duration: int = 1) -> SlotHold:
    return SlotHold.create(
        id=uuid_utils.uuid7(),
        turf_id=seeded.turf_id,
        hold_date=WEDNESDAY,
        start_hour=start_hour,
        duration=duration,
        session_id=session_id,
        now=NOW,
        ttl_seconds=HOLD_TTL_SECONDS,
    )


def _customer(seeded: SeededTurf) -> Customer:
    return Customer(
        id=uuid_utils.uuid7(),
        owner_id=seeded.owner_id,
        name='Asha',
        phone='+919800000001',
    )


async def _book(seeded: SeededTurf, *, start_hour: int, end_hour: int) -> Booking:
    async with AsyncpgBookingUnitOfWork() as uow:
        customer = await uow.customers.create_if_absent(customer=_customer(seeded))
        if customer is None:
            customer = await uow.customers.get_by_phone(
                owner_id=seeded.owner_id, phone='+919800000001'
            )
        booking = await uow.bookings.insert_if_free(
            booking=Booking.create(
                id=uuid_utils.uuid7(),
                turf_id=seeded.turf_id,
                owner_id=seeded.owner_id,
                customer_id=customer.id,
                booking_date=WEDNESDAY,
                start_hour=start_hour,
                end_hour=end_hour,
                total_amount=Decimal('500'),
                discount_amount=Decimal('0'),
                offer_id=None,
                promo_code_id=None,
                discount_source=None,
                now=NOW,
            ),
            session_id='session-booker',
            now=NOW,
        )
        assert booking is not None
        await uow.commit()
    return booking


@pytest.mark.integration
class TestSlotHoldClaims:
    @pytest.mark.asyncio
    async def test_turf_row_is_read_back(self, seeded_turf: SeededTurf) -> None:
        turf = await TurfQueryRepoImpl().get_by_id(turf_id=seeded_turf.turf_id)

        assert turf is not None
        assert turf.owner_id == seeded_turf.owner_id
        assert turf.base_price == Decimal('500')

    @pytest.mark.asyncio
    async def test_overlapping_foreign_hold_is_refused(self, seeded_turf: SeededTurf) -> None:
        """
        Given: session-a holds 18-20
        When: session-b tries to hold 19-21
        Then: The insert is refused and only session-a's hold exists
        """
        repo = SlotHoldCommandRepoImpl()
        first = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-a', start_hour=18, duration=2), now=NOW
        )
        second = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-b', start_hour=19, duration=2), now=NOW
        )

        assert first is not None
        assert second is None
        live = await SlotHoldQueryRepoImpl().list_live_overlapping(
            turf_id=seeded_turf.turf_id, hold_date=WEDNESDAY, start_hour=18, end_hour=21, now=NOW
        )
        assert [h.session_id for h in live] == ['session-a']

    @pytest.mark.asyncio
    async def test_expired_foreign_hold_does_not_block(self, seeded_turf: SeededTurf) -> None:
        repo = SlotHoldCommandRepoImpl()
        stale = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-a', start_hour=18), now=NOW
        )
        assert stale is not None

        fresh = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-b', start_hour=18),
            now=stale.expires_at,
        )

        assert fresh is not None

    @pytest.mark.asyncio
    async def test_hold_over_booked_window_is_refused(self, seeded_turf: SeededTurf) -> None:
        await _book(seeded_turf, start_hour=18, end_hour=19)

        hold = await SlotHoldCommandRepoImpl().insert_if_free(
            hold=_hold(seeded_turf, session_id='session-a', start_hour=18), now=NOW
        )

        assert hold is None

    @pytest.mark.asyncio
    async def test_extend_into_free_hour(self, seeded_turf: SeededTurf) -> None:
        repo = SlotHoldCommandRepoImpl()
        hold = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-a', start_hour=18), now=NOW
        )

        extended = await repo.extend_if_free(hold_id=hold.id, new_end_hour=20, now=NOW)

        assert extended is not None
        assert (extended.start_hour, extended.end_hour) == (18, 20)

    @pytest.mark.asyncio
    async def test_extend_into_foreign_hold_conflicts(self, seeded_turf: SeededTurf) -> None:
        """
        Given: session-a holds 18-19 and session-b holds 19-20
        When: session-a extends to 20
        Then: The extension is refused and the hold keeps its old end
        """
        repo = SlotHoldCommandRepoImpl()
        mine = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-a', start_hour=18), now=NOW
        )
        await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-b', start_hour=19), now=NOW
        )

        extended = await repo.extend_if_free(hold_id=mine.id, new_end_hour=20, now=NOW)

        assert extended is None
        current = await SlotHoldQueryRepoImpl().get_by_id(hold_id=mine.id)
        assert current.end_hour == 19

    @pytest.mark.asyncio
    async def test_extend_into_booked_hour_conflicts(self, seeded_turf: SeededTurf) -> None:
        await _book(seeded_turf, start_hour=19, end_hour=20)
        repo = SlotHoldCommandRepoImpl()
        mine = await repo.insert_if_free(
            hold=_hold(seeded_turf, session_id='session-a', start_hour=18), now=NOW
        )

        extended = await repo.extend_if_free(hold_id=mine.id, new_end_hour=20, now=NOW)

        assert extended is None
        bookings = await OccupancyQueryRepoImpl().list_active_bookings(
            turf_id=seeded_turf.turf_id, start_date=WEDNESDAY, end_date=WEDNESDAY
        )
        assert [(b.start_hour, b.end_hour) for b in bookings] == [(19, 20)]


@pytest.mark.integration
class TestCustomerLedger:
    @pytest.mark.asyncio
    async def test_second_insert_for_same_phone_is_skipped(self, seeded_turf: SeededTurf) -> None:
        """
        Given: A ledger row exists for the operator and phone
        When: Another first booking tries to create it again
        Then: The insert is skipped instead of failing on the unique key
        """
        async with AsyncpgBookingUnitOfWork() as uow:
            created = await uow.customers.create_if_absent(customer=_customer(seeded_turf))
            await uow.commit()

        async with AsyncpgBookingUnitOfWork() as uow:
            duplicate = await uow.customers.create_if_absent(customer=_customer(seeded_turf))
            existing = await uow.customers.get_by_phone(
                owner_id=seeded_turf.owner_id, phone='+919800000001'
            )
            await uow.commit()

        assert created is not None
        assert duplicate is None
        assert existing.id == created.id
