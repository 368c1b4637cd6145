from datetime import date
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_occupancy_query_repo import IOccupancyQueryRepo
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.domain.slot_availability_resolver import SlotAvailabilityResolver
from src.service.booking.domain.value_object.slot_grid import SlotGrid
from src.service.booking.domain.venue_calendar import date_range, venue_today, week_start
from src.service.shared_kernel.app.interface import IClock


class GetSlotGridUseCase:
    """
    Build the date x hour availability grid of a turf as seen by one session.

    Missing or private turfs yield an empty grid instead of an error, so the
    calendar view renders nothing rather than failing.
    """

    def __init__(
        self,
        *,
        turf_query_repo: ITurfQueryRepo,
        occupancy_query_repo: IOccupancyQueryRepo,
        resolver: SlotAvailabilityResolver,
        clock: IClock,
    ) -> None:
        self.turf_query_repo = turf_query_repo
        self.occupancy_query_repo = occupancy_query_repo
        self.resolver = resolver
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        turf_query_repo: ITurfQueryRepo = Depends(Provide[Container.turf_query_repo]),
        occupancy_query_repo: IOccupancyQueryRepo = Depends(
            Provide[Container.occupancy_query_repo]
        ),
        resolver: SlotAvailabilityResolver = Depends(
            Provide[Container.slot_availability_resolver]
        ),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            turf_query_repo=turf_query_repo,
            occupancy_query_repo=occupancy_query_repo,
            resolver=resolver,
            clock=clock,
        )

    @Logger.io(truncate_content=True)
    async def get_slot_grid(
        self,
        *,
        turf_id: UUID,
        session_id: Optional[str],
        start_date: Optional[date] = None,
        days: Optional[int] = None,
    ) -> SlotGrid:
        with self.tracer.start_as_current_span(
            'use_case.get_slot_grid',
            attributes={'turf.id': str(turf_id)},
        ):
            turf = await self.turf_query_repo.get_by_id(turf_id=turf_id)
            if turf is None or not turf.is_public:
                return SlotGrid.empty(turf_id)

            now = self.clock.now()
            start_date = start_date or venue_today(now, self.resolver.tz)
            if days is None:
                # Calendar view: the Monday-based week containing start_date
                start_date = week_start(start_date)
                days = settings.CALENDAR_DAYS
            if days < 1:
                raise ValidationError('days must be at least 1')
            dates = date_range(start_date, days)

            bookings = await self.occupancy_query_repo.list_active_bookings(
                turf_id=turf_id, start_date=dates[0], end_date=dates[-1]
            )
            blocked_slots = await self.occupancy_query_repo.list_blocked_slots(
                turf_id=turf_id, start_date=dates[0], end_date=dates[-1]
            )
            holds = await self.occupancy_query_repo.list_holds(
                turf_id=turf_id, start_date=dates[0], end_date=dates[-1]
            )

            return self.resolver.build_grid(
                turf=turf,
                dates=dates,
                bookings=bookings,
                blocked_slots=blocked_slots,
                holds=holds,
                session_id=session_id,
                now=now,
            )
