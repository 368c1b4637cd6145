from datetime import date
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AuthRequiredError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.interface.i_occupancy_query_repo import IOccupancyQueryRepo
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.booking.domain.slot_availability_resolver import SlotAvailabilityResolver
from src.service.shared_kernel.app.interface import IClock, ITurfChangeNotifier


def _wins_over(rival: SlotHold, ours: SlotHold) -> bool:
    """Earlier hold wins; identical timestamps fall back to id order"""
    return (rival.created_at, str(rival.id)) < (ours.created_at, str(ours.id))


class AcquireSlotHoldUseCase:
    """
    Place a time-boxed hold on a contiguous hour window.

    Flow:
    1. Drop the session's previous hold on this turf (one selection at a time)
    2. Re-derive availability for the requested hours (Fail Fast)
    3. Conditional insert: the store rejects the write if anything claimed the
       window in the meantime
    4. Verification read: if a rival live hold overlapping ours was created
       earlier, ours is withdrawn
    5. Broadcast the change to every viewer of the turf

    The window is held as a whole or not at all.
    """

    def __init__(
        self,
        *,
        turf_query_repo: ITurfQueryRepo,
        occupancy_query_repo: IOccupancyQueryRepo,
        slot_hold_query_repo: ISlotHoldQueryRepo,
        slot_hold_command_repo: ISlotHoldCommandRepo,
        resolver: SlotAvailabilityResolver,
        notifier: ITurfChangeNotifier,
        clock: IClock,
    ) -> None:
        self.turf_query_repo = turf_query_repo
        self.occupancy_query_repo = occupancy_query_repo
        self.slot_hold_query_repo = slot_hold_query_repo
        self.slot_hold_command_repo = slot_hold_command_repo
        self.resolver = resolver
        self.notifier = notifier
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
        slot_hold_query_repo: ISlotHoldQueryRepo = Depends(
            Provide[Container.slot_hold_query_repo]
        ),
        slot_hold_command_repo: ISlotHoldCommandRepo = Depends(
            Provide[Container.slot_hold_command_repo]
        ),
        resolver: SlotAvailabilityResolver = Depends(
            Provide[Container.slot_availability_resolver]
        ),
        notifier: ITurfChangeNotifier = Depends(Provide[Container.turf_change_notifier]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            turf_query_repo=turf_query_repo,
            occupancy_query_repo=occupancy_query_repo,
            slot_hold_query_repo=slot_hold_query_repo,
            slot_hold_command_repo=slot_hold_command_repo,
            resolver=resolver,
            notifier=notifier,
            clock=clock,
        )

    @Logger.io
    async def acquire(
        self,
        *,
        turf_id: UUID,
        hold_date: date,
        start_hour: int,
        duration: int,
        session_id: str,
        customer: Optional[CustomerIdentity],
    ) -> SlotHold:
        """
        Raises:
            AuthRequiredError: No authenticated customer
            ValidationError: Missing session or duration out of range
            NotFoundError: Turf missing or not public
            ConflictError: Any requested hour is unavailable or was taken concurrently
        """
        if customer is None or not customer.phone:
            raise AuthRequiredError()
        if not session_id:
            raise ValidationError('X-Session-Id header is required')
        if not 1 <= duration <= settings.MAX_BOOKING_DURATION_HOURS:
            raise ValidationError(
                f'duration must be between 1 and {settings.MAX_BOOKING_DURATION_HOURS} hours'
            )

        with self.tracer.start_as_current_span(
            'use_case.acquire_slot_hold',
            attributes={
                'turf.id': str(turf_id),
                'hold.date': hold_date.isoformat(),
                'hold.start_hour': start_hour,
                'hold.duration': duration,
            },
        ):
            turf = await self.turf_query_repo.get_by_id(turf_id=turf_id)
            if turf is None or not turf.is_public:
                raise NotFoundError('Turf not found')

            # Step 1: one live selection per session and turf
            released = await self.slot_hold_command_repo.delete_by_session(
                turf_id=turf_id, session_id=session_id
            )
            if released:
                Logger.base.info(
                    f'🔓 [HOLD] Released {len(released)} previous hold(s) of session on turf {turf_id}'
                )
                await self.notifier.publish_change(
                    turf_id=turf_id, entity='hold', action='released'
                )

            # Step 2: fail fast on a stale grid
            now = self.clock.now()
            bookings = await self.occupancy_query_repo.list_active_bookings(
                turf_id=turf_id, start_date=hold_date, end_date=hold_date
            )
            blocked_slots = await self.occupancy_query_repo.list_blocked_slots(
                turf_id=turf_id, start_date=hold_date, end_date=hold_date
            )
            holds = await self.occupancy_query_repo.list_holds(
                turf_id=turf_id, start_date=hold_date, end_date=hold_date
            )
            if not self.resolver.is_window_free(
                turf=turf,
                slot_date=hold_date,
                start_hour=start_hour,
                duration=duration,
                bookings=bookings,
                blocked_slots=blocked_slots,
                holds=holds,
                session_id=session_id,
                now=now,
            ):
                raise ConflictError('Selected slots are no longer available')

            # Step 3: compare-and-swap insert
            hold = SlotHold.create(
                id=uuid_utils.uuid7(),
                turf_id=turf_id,
                hold_date=hold_date,
                start_hour=start_hour,
                duration=duration,
                session_id=session_id,
                now=now,
                ttl_seconds=settings.HOLD_TTL_SECONDS,
            )
            inserted = await self.slot_hold_command_repo.insert_if_free(hold=hold, now=now)
            if inserted is None:
                raise ConflictError('Selected slots were just taken by someone else')

            # Step 4: verification read
            rivals = await self.slot_hold_query_repo.list_live_overlapping(
                turf_id=turf_id,
                hold_date=hold_date,
                start_hour=inserted.start_hour,
                end_hour=inserted.end_hour,
                now=self.clock.now(),
            )
            if any(
                rival.id != inserted.id
                and rival.session_id != session_id
                and _wins_over(rival, inserted)
                for rival in rivals
            ):
                await self.slot_hold_command_repo.delete(hold_id=inserted.id)
                Logger.base.warning(f'⚔️ [HOLD] Lost race on turf {turf_id}, hold withdrawn')
                raise ConflictError('Selected slots were just taken by someone else')

            # Step 5: fan-out
            await self.notifier.publish_change(turf_id=turf_id, entity='hold', action='created')
            Logger.base.info(
                f'🔒 [HOLD] Hold {inserted.id} on turf {turf_id} '
                f'{hold_date} {inserted.start_hour}-{inserted.end_hour} '
                f'until {inserted.expires_at.isoformat()}'
            )
            return inserted
