"""
Unit tests for SlotAvailabilityResolver

Test Focus:
1. Status priority: past -> booked -> blocked -> held_by_other -> held_by_self -> available
2. Expired holds are invisible
3. Multi-hour windows are accepted whole or not at all
"""

from datetime import timedelta

import pytest

from src.service.booking.domain.enum.slot_status import SlotStatus
from src.service.booking.domain.slot_availability_resolver import SlotAvailabilityResolver
from test.service.booking.booking_test_factory import (
    MONDAY,
    NOW,
    VENUE_TZ,
    WEDNESDAY,
    make_blocked_slot,
    make_booking,
    make_hold,
    make_turf,
)


@pytest.mark.unit
class TestSlotClassification:
    @pytest.fixture
    def resolver(self) -> SlotAvailabilityResolver:
        return SlotAvailabilityResolver(tz=VENUE_TZ)

    def _classify(self, resolver, *, slot_date=WEDNESDAY, hour=18, **snapshot):
        return resolver.classify(
            turf=make_turf(),
            slot_date=slot_date,
            hour=hour,
            bookings=snapshot.get('bookings', []),
            blocked_slots=snapshot.get('blocked_slots', []),
            holds=snapshot.get('holds', []),
            session_id=snapshot.get('session_id', 'session-a'),
            now=snapshot.get('now', NOW),
        )

    def test_empty_snapshot_is_available(self, resolver: SlotAvailabilityResolver) -> None:
        assert self._classify(resolver) == SlotStatus.AVAILABLE

    def test_slot_starting_before_now_is_past(self, resolver: SlotAvailabilityResolver) -> None:
        """
        Given: Now is Monday 10:00 venue time
        Then: 09:00 is past, 10:00 (starts exactly now) is still available
        """
        assert self._classify(resolver, slot_date=MONDAY, hour=9) == SlotStatus.PAST
        assert self._classify(resolver, slot_date=MONDAY, hour=10) == SlotStatus.AVAILABLE

    def test_past_wins_over_booking(self, resolver: SlotAvailabilityResolver) -> None:
        booking = make_booking(booking_date=MONDAY, start_hour=8, end_hour=10)
        assert (
            self._classify(resolver, slot_date=MONDAY, hour=8, bookings=[booking])
            == SlotStatus.PAST
        )

    def test_booked_wins_over_blocked_and_holds(self, resolver: SlotAvailabilityResolver) -> None:
        assert (
            self._classify(
                resolver,
                bookings=[make_booking(start_hour=18, end_hour=19)],
                blocked_slots=[make_blocked_slot(start_hour=18, end_hour=19)],
                holds=[make_hold(session_id='session-b')],
            )
            == SlotStatus.BOOKED
        )

    def test_blocked_wins_over_holds(self, resolver: SlotAvailabilityResolver) -> None:
        assert (
            self._classify(
                resolver,
                blocked_slots=[make_blocked_slot(start_hour=17, end_hour=20)],
                holds=[make_hold(session_id='session-a')],
            )
            == SlotStatus.BLOCKED
        )

    def test_cancelled_booking_does_not_occupy(self, resolver: SlotAvailabilityResolver) -> None:
        booking = make_booking(start_hour=18, end_hour=19)
        cancelled = booking.cancel(reason='rain', cancelled_by='customer', now=NOW)
        assert self._classify(resolver, bookings=[cancelled]) == SlotStatus.AVAILABLE

    def test_hold_of_other_session(self, resolver: SlotAvailabilityResolver) -> None:
        holds = [make_hold(session_id='session-b')]
        assert self._classify(resolver, holds=holds) == SlotStatus.HELD_BY_OTHER

    def test_hold_of_own_session(self, resolver: SlotAvailabilityResolver) -> None:
        holds = [make_hold(session_id='session-a', duration=2)]
        assert self._classify(resolver, hour=19, holds=holds) == SlotStatus.HELD_BY_SELF

    def test_other_session_wins_over_own_hold(self, resolver: SlotAvailabilityResolver) -> None:
        holds = [make_hold(session_id='session-a'), make_hold(session_id='session-b')]
        assert self._classify(resolver, holds=holds) == SlotStatus.HELD_BY_OTHER

    def test_anonymous_viewer_sees_every_hold_as_other(
        self, resolver: SlotAvailabilityResolver
    ) -> None:
        holds = [make_hold(session_id='session-a')]
        assert self._classify(resolver, holds=holds, session_id=None) == SlotStatus.HELD_BY_OTHER

    def test_expired_hold_is_ignored(self, resolver: SlotAvailabilityResolver) -> None:
        """
        Given: Hold created at t0 with 300s TTL
        Then: Visible at t0+299s, gone at t0+300s
        """
        holds = [make_hold(session_id='session-b')]
        assert (
            self._classify(resolver, holds=holds, now=NOW + timedelta(seconds=299))
            == SlotStatus.HELD_BY_OTHER
        )
        assert (
            self._classify(resolver, holds=holds, now=NOW + timedelta(seconds=300))
            == SlotStatus.AVAILABLE
        )


@pytest.mark.unit
class TestSlotGrid:
    def test_grid_covers_operating_hours_for_every_date(self) -> None:
        resolver = SlotAvailabilityResolver(tz=VENUE_TZ)
        turf = make_turf()

        grid = resolver.build_grid(
            turf=turf,
            dates=[MONDAY, WEDNESDAY],
            bookings=[make_booking(start_hour=18, end_hour=20)],
            blocked_slots=[],
            holds=[],
            session_id='session-a',
            now=NOW,
        )

        assert grid.hours == list(range(6, 23))
        assert len(grid.cells) == 2 * 17
        assert [c.slot_date for c in grid.cells[:17]] == [MONDAY] * 17
        assert grid.cell(slot_date=WEDNESDAY, hour=18).status == SlotStatus.BOOKED
        assert grid.cell(slot_date=WEDNESDAY, hour=19).status == SlotStatus.BOOKED
        assert grid.cell(slot_date=WEDNESDAY, hour=20).status == SlotStatus.AVAILABLE

    def test_midnight_close_yields_hour_23(self) -> None:
        resolver = SlotAvailabilityResolver(tz=VENUE_TZ)
        turf = make_turf(operating_hours_start=18, operating_hours_end=0)

        grid = resolver.build_grid(
            turf=turf,
            dates=[WEDNESDAY],
            bookings=[],
            blocked_slots=[],
            holds=[],
            session_id=None,
            now=NOW,
        )

        assert grid.hours == [18, 19, 20, 21, 22, 23]


@pytest.mark.unit
class TestWindowAvailability:
    @pytest.fixture
    def resolver(self) -> SlotAvailabilityResolver:
        return SlotAvailabilityResolver(tz=VENUE_TZ)

    def _is_free(self, resolver, *, start_hour=18, duration=3, **snapshot) -> bool:
        return resolver.is_window_free(
            turf=make_turf(),
            slot_date=WEDNESDAY,
            start_hour=start_hour,
            duration=duration,
            bookings=snapshot.get('bookings', []),
            blocked_slots=snapshot.get('blocked_slots', []),
            holds=snapshot.get('holds', []),
            session_id='session-a',
            now=NOW,
            allow_self_held=snapshot.get('allow_self_held', False),
        )

    def test_free_window(self, resolver: SlotAvailabilityResolver) -> None:
        assert self._is_free(resolver) is True

    def test_one_blocked_hour_rejects_whole_window(
        self, resolver: SlotAvailabilityResolver
    ) -> None:
        """
        Given: 18, 19 available and 20 blocked
        When: Requesting 18:00 for 3 hours
        Then: Whole request rejected
        """
        blocked = [make_blocked_slot(start_hour=20, end_hour=21)]
        assert self._is_free(resolver, blocked_slots=blocked) is False

    def test_window_past_closing_is_rejected(self, resolver: SlotAvailabilityResolver) -> None:
        assert self._is_free(resolver, start_hour=21, duration=3) is False

    def test_own_hold_passes_only_when_allowed(self, resolver: SlotAvailabilityResolver) -> None:
        holds = [make_hold(session_id='session-a', start_hour=18, duration=2)]
        assert self._is_free(resolver, holds=holds) is False
        assert self._is_free(resolver, holds=holds, allow_self_held=True) is True

    def test_zero_duration_is_rejected(self, resolver: SlotAvailabilityResolver) -> None:
        assert self._is_free(resolver, duration=0) is False
