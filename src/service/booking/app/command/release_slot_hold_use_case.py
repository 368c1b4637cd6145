from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import PermissionDeniedError
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.shared_kernel.app.interface import ITurfChangeNotifier


class ReleaseSlotHoldUseCase:
    """Explicit cancellation of an in-progress selection. Releasing twice is a no-op."""

    def __init__(
        self,
        *,
        slot_hold_query_repo: ISlotHoldQueryRepo,
        slot_hold_command_repo: ISlotHoldCommandRepo,
        notifier: ITurfChangeNotifier,
    ) -> None:
        self.slot_hold_query_repo = slot_hold_query_repo
        self.slot_hold_command_repo = slot_hold_command_repo
        self.notifier = notifier
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
    ) -> Self:
        return cls(
            slot_hold_query_repo=slot_hold_query_repo,
            slot_hold_command_repo=slot_hold_command_repo,
            notifier=notifier,
        )

    @Logger.io
    async def release(self, *, hold_id: UUID, session_id: str) -> None:
        with self.tracer.start_as_current_span(
            'use_case.release_slot_hold',
            attributes={'hold.id': str(hold_id)},
        ):
            hold = await self.slot_hold_query_repo.get_by_id(hold_id=hold_id)
            if hold is None:
                return
            if not hold.is_owned_by(session_id):
                raise PermissionDeniedError('Hold belongs to another session')

            if await self.slot_hold_command_repo.delete(hold_id=hold_id):
                await self.notifier.publish_change(
                    turf_id=hold.turf_id, entity='hold', action='released'
                )
                Logger.base.info(f'🔓 [HOLD] Hold {hold_id} released')
