from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import ConflictError, ExpiredHoldError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.domain.entity.slot_hold_entity import SlotHold
from src.service.shared_kernel.app.interface import IClock, ITurfChangeNotifier


class ExtendSlotHoldUseCase:
    """
    Change the duration of a live hold.

    Shrinking always succeeds. Growing claims only the hours past the current
    end, with the same compare-and-swap as acquisition. The deadline is kept:
    an extension never buys extra time.
    """

    def __init__(
        self,
        *,
        turf_query_repo: ITurfQueryRepo,
        slot_hold_query_repo: ISlotHoldQueryRepo,
        slot_hold_command_repo: ISlotHoldCommandRepo,
        notifier: ITurfChangeNotifier,
        clock: IClock,
    ) -> None:
        self.turf_query_repo = turf_query_repo
        self.slot_hold_query_repo = slot_hold_query_repo
        self.slot_hold_command_repo = slot_hold_command_repo
        self.notifier = notifier
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        turf_query_repo: ITurfQueryRepo = Depends(Provide[Container.turf_query_repo]),
        slot_hold_query_repo: ISlotHoldQueryRepo = Depends(
            Provide[Container.slot_hold_query_repo]
        ),
        slot_hold_command_repo: ISlotHoldCommandRepo = Depends(
            Provide[Container.slot_hold_command_repo]
        ),
        notifier: ITurfChangeNotifier = Depends(Provide[Container.turf_change_notifier]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            turf_query_repo=turf_query_repo,
            slot_hold_query_repo=slot_hold_query_repo,
            slot_hold_command_repo=slot_hold_command_repo,
            notifier=notifier,
            clock=clock,
        )

    @Logger.io
    async def extend(self, *, hold_id: UUID, session_id: str, new_duration: int) -> SlotHold:
        if not 1 <= new_duration <= settings.MAX_BOOKING_DURATION_HOURS:
            raise ValidationError(
                f'duration must be between 1 and {settings.MAX_BOOKING_DURATION_HOURS} hours'
            )

        with self.tracer.start_as_current_span(
            'use_case.extend_slot_hold',
            attributes={'hold.id': str(hold_id), 'hold.new_duration': new_duration},
        ):
            hold = await self.slot_hold_query_repo.get_by_id(hold_id=hold_id)
            if hold is None:
                raise ExpiredHoldError()
            hold.ensure_usable_by(session_id=session_id, now=self.clock.now())

            new_end_hour = hold.start_hour + new_duration
            if new_end_hour == hold.end_hour:
                return hold

            if new_end_hour < hold.end_hour:
                updated = await self.slot_hold_command_repo.update_end_hour(
                    hold_id=hold_id, end_hour=new_end_hour
                )
            else:
                turf = await self.turf_query_repo.get_by_id(turf_id=hold.turf_id)
                if turf is None or not turf.covers(
                    start_hour=hold.start_hour, end_hour=new_end_hour
                ):
                    raise ConflictError('Extension runs past operating hours')
                updated = await self.slot_hold_command_repo.extend_if_free(
                    hold_id=hold_id, new_end_hour=new_end_hour, now=self.clock.now()
                )
                if updated is None:
                    raise ConflictError('The next slots are no longer available')

            if updated is None:
                raise ExpiredHoldError()

            await self.notifier.publish_change(
                turf_id=updated.turf_id, entity='hold', action='extended'
            )
            Logger.base.info(
                f'↔️ [HOLD] Hold {hold_id} now {updated.start_hour}-{updated.end_hour}'
            )
            return updated
