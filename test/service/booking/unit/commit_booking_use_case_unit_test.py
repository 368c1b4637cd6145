"""
Unit tests for CommitBookingUseCase

Test Focus:
1. A live hold becomes a booking with ledger, loyalty, counters and ticket
2. Any failure inside the unit of work leaves no partial state and keeps the hold
3. Operator notification failures never fail the booking
4. Concurrent commits of one window produce exactly one booking
"""

from datetime import datetime, timezone
from decimal import Decimal
import re
from unittest.mock import AsyncMock

import anyio
import orjson
import pytest
from uuid_utils import UUID

from src.platform.exception.exceptions import (
    AuthRequiredError,
    ConflictError,
    DomainError,
    ExpiredHoldError,
    IneligibleDiscountError,
    PermissionDeniedError,
    ValidationError,
)
from src.service.booking.app.command import commit_booking_use_case as commit_module
from src.service.booking.app.command.commit_booking_use_case import (
    CommitBookingUseCase,
    loyalty_points_for,
)
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.query.quote_price_use_case import QuotePriceUseCase
from src.service.booking.domain.entity.customer_entity import BookingTicket, Customer
from src.service.booking.domain.entity.offer_entity import Offer, PromoCode
from src.service.booking.domain.enum.booking_status import BookingStatus
from src.service.booking.domain.enum.discount_enum import DiscountSource, DiscountType
from src.service.booking.domain.pricing.pricing_engine import PricingEngine
from src.service.booking.driven_adapter.memory.in_memory_query_repo_impl import (
    InMemoryBookingQueryRepoImpl,
    InMemoryOfferQueryRepoImpl,
    InMemoryTurfQueryRepoImpl,
)
from src.service.booking.driven_adapter.memory.in_memory_slot_hold_repo_impl import (
    InMemorySlotHoldCommandRepoImpl,
    InMemorySlotHoldQueryRepoImpl,
)
from src.service.booking.driven_adapter.memory.in_memory_store import InMemoryBookingStore
from src.service.booking.driven_adapter.memory.in_memory_unit_of_work import (
    InMemoryBookingUnitOfWork,
)
from test.service.booking.booking_test_factory import (
    CUSTOMER_ID,
    OWNER_ID,
    TURF_ID,
    VENUE_TZ,
    WEDNESDAY,
    FakeClock,
    make_booking,
    make_hold,
)


CUSTOMER = CustomerIdentity(phone='+919800000001', name='Asha', email='asha@example.com')
LEGACY_TICKET_ID = UUID('00000000-0000-0000-0000-0000000000aa')


def _ten_percent_offer() -> Offer:
    return Offer(
        id=UUID('00000000-0000-0000-0000-0000000000d1'),
        owner_id=OWNER_ID,
        name='Weekday 10%',
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal('10'),
        created_at=datetime(2024, 12, 1, tzinfo=timezone.utc),
    )


@pytest.fixture
def dispatcher() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def use_case(
    store: InMemoryBookingStore, clock: FakeClock, notifier: AsyncMock, dispatcher: AsyncMock
) -> CommitBookingUseCase:
    quote_price = QuotePriceUseCase(
        turf_query_repo=InMemoryTurfQueryRepoImpl(store=store),
        offer_query_repo=InMemoryOfferQueryRepoImpl(store=store),
        booking_query_repo=InMemoryBookingQueryRepoImpl(store=store),
        pricing_engine=PricingEngine(tz=VENUE_TZ),
        clock=clock,
    )
    return CommitBookingUseCase(
        turf_query_repo=InMemoryTurfQueryRepoImpl(store=store),
        slot_hold_query_repo=InMemorySlotHoldQueryRepoImpl(store=store),
        slot_hold_command_repo=InMemorySlotHoldCommandRepoImpl(store=store),
        quote_price=quote_price,
        uow_factory=lambda: InMemoryBookingUnitOfWork(store=store),
        notification_dispatcher=dispatcher,
        notifier=notifier,
        clock=clock,
    )


@pytest.mark.unit
class TestLoyaltyPoints:
    @pytest.mark.parametrize(
        'amount,expected',
        [
            (Decimal('0'), 0),
            (Decimal('99.99'), 0),
            (Decimal('100'), 10),
            (Decimal('850'), 80),
            (Decimal('1000'), 100),
        ],
    )
    def test_ten_points_per_hundred(self, amount: Decimal, expected: int) -> None:
        assert loyalty_points_for(amount) == expected


@pytest.mark.unit
class TestCommitBooking:
    @pytest.mark.asyncio
    async def test_commit_writes_booking_ledger_and_ticket(
        self,
        use_case: CommitBookingUseCase,
        store: InMemoryBookingStore,
        notifier: AsyncMock,
        dispatcher: AsyncMock,
    ) -> None:
        """
        Given: Live 2-hour hold at 500/hour and a 10% operator offer
        When: The holder commits as a new customer
        Then:
            - Booking total 900, discount 100, source offer
            - Customer created with 1 booking, 900 spent, 90 points
            - Offer counters updated, ticket issued, hold released
        """
        # Arrange
        offer = store.add_offer(_ten_percent_offer())
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))

        # Act
        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER
        )

        # Assert
        booking = store.bookings[receipt.booking.id]
        assert booking.status == BookingStatus.BOOKED
        assert (booking.start_hour, booking.end_hour) == (18, 20)
        assert booking.total_amount == Decimal('900')
        assert booking.discount_amount == Decimal('100')
        assert booking.discount_source == DiscountSource.OFFER
        assert booking.offer_id == offer.id

        [customer] = store.customers.values()
        assert customer.id == booking.customer_id
        assert customer.owner_id == OWNER_ID
        assert customer.total_bookings == 1
        assert customer.total_spent == Decimal('900')
        assert customer.loyalty_points == 90
        assert receipt.loyalty_points_earned == 90

        [transaction] = store.loyalty_transactions.values()
        assert transaction.points == 90
        assert transaction.booking_id == booking.id

        assert store.offers[offer.id].usage_count == 1
        assert store.offers[offer.id].revenue_from_offer == Decimal('900')

        assert re.fullmatch(r'TM[A-Z0-9]{6}', receipt.ticket.ticket_code)
        qr = orjson.loads(receipt.ticket.qr_data)
        assert qr == {
            'code': receipt.ticket.ticket_code,
            'bookingId': str(booking.id),
            'date': '2025-01-15',
            'time': '18:00-20:00',
        }

        assert hold.id not in store.holds
        notifier.publish_change.assert_awaited_once_with(
            turf_id=TURF_ID, entity='booking', action='created'
        )
        notification = dispatcher.dispatch_booking_created.await_args.kwargs['notification']
        assert notification.customer_name == 'Asha'
        assert notification.start_time == '18:00'
        assert notification.amount == Decimal('900')

    @pytest.mark.asyncio
    async def test_existing_customer_accrues(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        store.add_customer(
            Customer(
                id=CUSTOMER_ID,
                owner_id=OWNER_ID,
                name='Asha',
                phone=CUSTOMER.phone,
                total_bookings=3,
                total_spent=Decimal('3000'),
                loyalty_points=300,
            )
        )
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))

        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER
        )

        customer = store.customers[CUSTOMER_ID]
        assert receipt.booking.customer_id == CUSTOMER_ID
        assert customer.total_bookings == 4
        assert customer.total_spent == Decimal('4000')
        assert customer.loyalty_points == 400

    @pytest.mark.asyncio
    async def test_customer_registered_concurrently_is_reused(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        """
        Given: The ledger lookup misses, then a parallel first booking registers the phone
        When: The commit tries to create the customer
        Then: No duplicate ledger row; the booking accrues on the parallel row
        """
        rival_row = Customer(
            id=CUSTOMER_ID,
            owner_id=OWNER_ID,
            name='Asha',
            phone=CUSTOMER.phone,
            total_bookings=1,
            total_spent=Decimal('500'),
            loyalty_points=50,
        )

        def uow_with_late_customer() -> InMemoryBookingUnitOfWork:
            uow = InMemoryBookingUnitOfWork(store=store)
            lookup = uow.customers.get_by_phone
            calls = 0

            async def stale_then_fresh(*, owner_id: UUID, phone: str) -> Customer | None:
                nonlocal calls
                calls += 1
                if calls == 1:
                    store.customers[rival_row.id] = rival_row
                    return None
                return await lookup(owner_id=owner_id, phone=phone)

            uow.customers.get_by_phone = stale_then_fresh  # type: ignore[method-assign]
            return uow

        use_case.uow_factory = uow_with_late_customer
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))

        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER
        )

        [customer] = store.customers.values()
        assert customer.id == CUSTOMER_ID
        assert receipt.booking.customer_id == CUSTOMER_ID
        assert customer.total_bookings == 2
        assert customer.total_spent == Decimal('1500')
        assert customer.loyalty_points == 150

    @pytest.mark.asyncio
    async def test_promo_usage_is_counted(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        """
        Given: 10% offer plus SAVE50 (flat 50) on a 1000 base
        Then: Final 850 and the promo counter moves to 1
        """
        store.add_offer(_ten_percent_offer())
        promo = store.add_promo_code(
            PromoCode(
                id=UUID('00000000-0000-0000-0000-0000000000f9'),
                owner_id=OWNER_ID,
                code='SAVE50',
                discount_type=DiscountType.FLAT,
                discount_value=Decimal('50'),
                usage_limit=5,
            )
        )
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))

        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER, promo_code='save50'
        )

        assert receipt.booking.total_amount == Decimal('850')
        assert receipt.booking.discount_amount == Decimal('150')
        assert receipt.booking.promo_code_id == promo.id
        assert store.promo_codes[promo.id].used_count == 1

    @pytest.mark.asyncio
    async def test_exhausted_promo_rejects_commit_and_keeps_hold(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        store.add_promo_code(
            PromoCode(
                id=UUID('00000000-0000-0000-0000-0000000000f9'),
                owner_id=OWNER_ID,
                code='ONCE',
                discount_type=DiscountType.FLAT,
                discount_value=Decimal('50'),
                usage_limit=1,
                used_count=1,
            )
        )
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))

        with pytest.raises(IneligibleDiscountError):
            await use_case.commit(
                hold_id=hold.id, session_id='session-a', customer=CUSTOMER, promo_code='ONCE'
            )

        assert store.bookings == {}
        assert store.customers == {}
        assert hold.id in store.holds

    @pytest.mark.asyncio
    async def test_unknown_promo_is_rejected(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        hold = store.add_hold(make_hold(session_id='session-a'))

        with pytest.raises(IneligibleDiscountError, match='Invalid promo code'):
            await use_case.commit(
                hold_id=hold.id, session_id='session-a', customer=CUSTOMER, promo_code='NOPE'
            )

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_fail_booking(
        self,
        use_case: CommitBookingUseCase,
        store: InMemoryBookingStore,
        dispatcher: AsyncMock,
    ) -> None:
        dispatcher.dispatch_booking_created.side_effect = RuntimeError('webhook down')
        hold = store.add_hold(make_hold(session_id='session-a'))

        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER
        )

        assert receipt.booking.id in store.bookings
        assert hold.id not in store.holds

    @pytest.mark.asyncio
    async def test_claimed_window_rolls_back_everything(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        """
        Given: A live hold on 18-20, then 19-20 gets booked out of band
        When: The holder commits
        Then: ConflictError; no customer, booking or ticket written; hold kept
        """
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))
        walk_in = store.add_booking(make_booking(start_hour=19, end_hour=20))

        with pytest.raises(ConflictError):
            await use_case.commit(hold_id=hold.id, session_id='session-a', customer=CUSTOMER)

        assert list(store.bookings) == [walk_in.id]
        assert store.customers == {}
        assert store.tickets == {}
        assert hold.id in store.holds

    @pytest.mark.asyncio
    async def test_ticket_code_collision_is_retried(
        self,
        use_case: CommitBookingUseCase,
        store: InMemoryBookingStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        store.tickets[LEGACY_TICKET_ID] = BookingTicket(
            id=LEGACY_TICKET_ID, booking_id=LEGACY_TICKET_ID, ticket_code='TMAAAAAA', qr_data='{}'
        )
        codes = iter(['TMAAAAAA', 'TMBBBBBB'])
        monkeypatch.setattr(commit_module, 'generate_ticket_code', lambda: next(codes))
        hold = store.add_hold(make_hold(session_id='session-a'))

        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER
        )

        assert receipt.ticket.ticket_code == 'TMBBBBBB'

    @pytest.mark.asyncio
    async def test_ticket_code_exhaustion_rolls_back(
        self,
        use_case: CommitBookingUseCase,
        store: InMemoryBookingStore,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        store.tickets[LEGACY_TICKET_ID] = BookingTicket(
            id=LEGACY_TICKET_ID, booking_id=LEGACY_TICKET_ID, ticket_code='TMAAAAAA', qr_data='{}'
        )
        monkeypatch.setattr(commit_module, 'generate_ticket_code', lambda: 'TMAAAAAA')
        hold = store.add_hold(make_hold(session_id='session-a'))

        with pytest.raises(DomainError) as exc_info:
            await use_case.commit(hold_id=hold.id, session_id='session-a', customer=CUSTOMER)

        assert exc_info.value.status_code == 503
        assert store.bookings == {}
        assert hold.id in store.holds

    @pytest.mark.asyncio
    async def test_expired_hold_cannot_be_committed(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore, clock: FakeClock
    ) -> None:
        hold = store.add_hold(make_hold(session_id='session-a'))
        clock.advance(seconds=300)

        with pytest.raises(ExpiredHoldError):
            await use_case.commit(hold_id=hold.id, session_id='session-a', customer=CUSTOMER)
        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_foreign_hold_cannot_be_committed(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        hold = store.add_hold(make_hold(session_id='session-a'))

        with pytest.raises(PermissionDeniedError):
            await use_case.commit(hold_id=hold.id, session_id='session-b', customer=CUSTOMER)

    @pytest.mark.asyncio
    async def test_requires_customer_identity(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        hold = store.add_hold(make_hold(session_id='session-a'))

        with pytest.raises(AuthRequiredError):
            await use_case.commit(hold_id=hold.id, session_id='session-a', customer=None)
        with pytest.raises(ValidationError):
            await use_case.commit(
                hold_id=hold.id,
                session_id='session-a',
                customer=CustomerIdentity(phone=CUSTOMER.phone, name='  '),
            )

    @pytest.mark.asyncio
    async def test_double_commit_yields_one_booking(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        """
        Given: One live hold
        When: The holder fires two commits at once
        Then: Exactly one booking; the other attempt fails cleanly
        """
        hold = store.add_hold(make_hold(session_id='session-a', duration=2))
        receipts: list[object] = []
        failures: list[Exception] = []

        async def attempt() -> None:
            try:
                receipts.append(
                    await use_case.commit(
                        hold_id=hold.id, session_id='session-a', customer=CUSTOMER
                    )
                )
            except (ConflictError, ExpiredHoldError) as e:
                failures.append(e)

        async with anyio.create_task_group() as tg:
            tg.start_soon(attempt)
            tg.start_soon(attempt)

        assert len(receipts) == 1
        assert len(failures) == 1
        assert len(store.bookings) == 1
        assert len(store.tickets) == 1
        [customer] = store.customers.values()
        assert customer.total_bookings == 1

    @pytest.mark.asyncio
    async def test_booked_window_reads_as_booked_on_same_day(
        self, use_case: CommitBookingUseCase, store: InMemoryBookingStore
    ) -> None:
        hold = store.add_hold(make_hold(session_id='session-a', hold_date=WEDNESDAY))

        receipt = await use_case.commit(
            hold_id=hold.id, session_id='session-a', customer=CUSTOMER
        )

        assert store.window_is_claimed(
            turf_id=TURF_ID,
            slot_date=WEDNESDAY,
            start_hour=18,
            end_hour=19,
            session_id='session-b',
            now=use_case.clock.now(),
        )
        assert receipt.booking.booking_date == WEDNESDAY
