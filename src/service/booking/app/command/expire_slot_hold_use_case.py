from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import ExpiredHoldError, PermissionDeniedError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.hold_dto import HoldStatus
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.shared_kernel.app.interface import IClock, ITurfChangeNotifier


class ExpireSlotHoldUseCase:
    """
    Hold deadline evaluation.

    There is no timer: expiry is derived from the stored absolute deadline
    whenever somebody looks. The holder polls ``check_expiry`` for the
    countdown; any viewer may call ``sweep_expired`` to clear stale rows.
    """

    def __init__(
        self,
        *,
        slot_hold_query_repo: ISlotHoldQueryRepo,
        slot_hold_command_repo: ISlotHoldCommandRepo,
        notifier: ITurfChangeNotifier,
        clock: IClock,
    ) -> None:
        self.slot_hold_query_repo = slot_hold_query_repo
        self.slot_hold_command_repo = slot_hold_command_repo
        self.notifier = notifier
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
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
            slot_hold_query_repo=slot_hold_query_repo,
            slot_hold_command_repo=slot_hold_command_repo,
            notifier=notifier,
            clock=clock,
        )

    @Logger.io
    async def check_expiry(self, *, hold_id: UUID, session_id: str) -> HoldStatus:
        """
        Returns:
            The hold with its remaining whole seconds while it is live

        Raises:
            ExpiredHoldError: Deadline passed (the row is removed and viewers notified)
                or the hold is already gone
            PermissionDeniedError: Hold belongs to another session
        """
        with self.tracer.start_as_current_span(
            'use_case.check_hold_expiry',
            attributes={'hold.id': str(hold_id)},
        ):
            hold = await self.slot_hold_query_repo.get_by_id(hold_id=hold_id)
            if hold is None:
                raise ExpiredHoldError()
            if not hold.is_owned_by(session_id):
                raise PermissionDeniedError('Hold belongs to another session')

            remaining = hold.remaining_seconds(self.clock.now())
            if remaining > 0:
                return HoldStatus(hold=hold, remaining_seconds=remaining)

            if await self.slot_hold_command_repo.delete(hold_id=hold_id):
                await self.notifier.publish_change(
                    turf_id=hold.turf_id, entity='hold', action='expired'
                )
            Logger.base.info(f'⏰ [HOLD] Hold {hold_id} expired')
            raise ExpiredHoldError()

    @Logger.io
    async def sweep_expired(self, *, turf_id: UUID) -> int:
        with self.tracer.start_as_current_span(
            'use_case.sweep_expired_holds',
            attributes={'turf.id': str(turf_id)},
        ):
            removed = await self.slot_hold_command_repo.delete_expired(
                turf_id=turf_id, now=self.clock.now()
            )
            if removed:
                await self.notifier.publish_change(
                    turf_id=turf_id, entity='hold', action='expired'
                )
                Logger.base.info(f'🧹 [HOLD] Swept {removed} expired hold(s) on turf {turf_id}')
            return removed
