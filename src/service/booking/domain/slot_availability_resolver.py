"""
Slot Availability Resolver

Pure derivation of per-hour slot status from a snapshot of bookings,
blocked windows and holds. Nothing here touches storage; callers fetch the
snapshot through the query ports and pass it in.

Classification priority for one (date, hour):
    past -> booked -> blocked -> held_by_other -> held_by_self -> available
"""

from collections.abc import Iterable
from datetime import date, datetime, tzinfo
from typing import Optional

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.entity.turf_entity import BlockedSlot, Turf
from src.service.booking.domain.enum.slot_status import SlotStatus
from src.service.booking.domain.value_object.slot_grid import SlotCell, SlotGrid
from src.service.booking.domain.venue_calendar import slot_start_at, venue_timezone


class SlotAvailabilityResolver:
    def __init__(self, *, tz: Optional[tzinfo] = None) -> None:
        self.tz = tz or venue_timezone()

    def classify(
        self,
        *,
        turf: Turf,
        slot_date: date,
        hour: int,
        bookings: Iterable[Booking],
        blocked_slots: Iterable[BlockedSlot],
        holds: Iterable[SlotHold],
        session_id: Optional[str],
        now: datetime,
    ) -> SlotStatus:
        if slot_start_at(slot_date, hour, self.tz) < now.astimezone(self.tz):
            return SlotStatus.PAST

        if any(
            b.turf_id == turf.id and b.booking_date == slot_date and b.occupies(hour)
            for b in bookings
        ):
            return SlotStatus.BOOKED

        if any(
            s.turf_id == turf.id and s.blocked_date == slot_date and s.occupies(hour)
            for s in blocked_slots
        ):
            return SlotStatus.BLOCKED

        held_by_self = False
        for hold in holds:
            if hold.turf_id != turf.id or hold.hold_date != slot_date:
                continue
            if not hold.is_live(now) or not hold.occupies(hour):
                continue
            if not hold.is_owned_by(session_id):
                return SlotStatus.HELD_BY_OTHER
            held_by_self = True

        return SlotStatus.HELD_BY_SELF if held_by_self else SlotStatus.AVAILABLE

    def build_grid(
        self,
        *,
        turf: Turf,
        dates: list[date],
        bookings: list[Booking],
        blocked_slots: list[BlockedSlot],
        holds: list[SlotHold],
        session_id: Optional[str],
        now: datetime,
    ) -> SlotGrid:
        hours = list(turf.operating_hours())
        cells = [
            SlotCell(
                turf_id=turf.id,
                slot_date=slot_date,
                hour=hour,
                status=self.classify(
                    turf=turf,
                    slot_date=slot_date,
                    hour=hour,
                    bookings=bookings,
                    blocked_slots=blocked_slots,
                    holds=holds,
                    session_id=session_id,
                    now=now,
                ),
            )
            for slot_date in dates
            for hour in hours
        ]
        return SlotGrid(turf_id=turf.id, dates=list(dates), hours=hours, cells=cells)

    def is_window_free(
        self,
        *,
        turf: Turf,
        slot_date: date,
        start_hour: int,
        duration: int,
        bookings: list[Booking],
        blocked_slots: list[BlockedSlot],
        holds: list[SlotHold],
        session_id: Optional[str],
        now: datetime,
        allow_self_held: bool = False,
    ) -> bool:
        """
        Every hour in [start_hour, start_hour + duration) must be selectable.

        One unavailable hour rejects the whole window. ``allow_self_held`` lets
        hours already held by the same session pass, which is what extension needs.
        """
        if duration < 1:
            return False
        if not turf.covers(start_hour=start_hour, end_hour=start_hour + duration):
            return False

        accepted = {SlotStatus.AVAILABLE}
        if allow_self_held:
            accepted.add(SlotStatus.HELD_BY_SELF)

        return all(
            self.classify(
                turf=turf,
                slot_date=slot_date,
                hour=hour,
                bookings=bookings,
                blocked_slots=blocked_slots,
                holds=holds,
                session_id=session_id,
                now=now,
            )
            in accepted
            for hour in range(start_hour, start_hour + duration)
        )
