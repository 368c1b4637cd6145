from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.platform.types import UtilsUUID7
from src.service.booking.app.command.expire_slot_hold_use_case import ExpireSlotHoldUseCase
from src.service.booking.app.command.extend_slot_hold_use_case import ExtendSlotHoldUseCase
from src.service.booking.app.command.release_slot_hold_use_case import ReleaseSlotHoldUseCase
from src.service.booking.driving_adapter.http_controller.identity import require_session_id
from src.service.booking.driving_adapter.http_controller.schema.hold_schema import (
    HoldExtendRequest,
    HoldResponse,
)


router = APIRouter()


@router.get('/{hold_id}')
@Logger.io
async def get_hold_status(
    hold_id: UtilsUUID7,
    session_id: str = Depends(require_session_id),
    use_case: ExpireSlotHoldUseCase = Depends(ExpireSlotHoldUseCase.depends),
) -> HoldResponse:
    """Countdown polled by the holder; answers 410 once the hold has lapsed"""
    result = await use_case.check_expiry(hold_id=hold_id, session_id=session_id)
    hold = result.hold
    return HoldResponse(
        id=hold.id,
        turf_id=hold.turf_id,
        hold_date=hold.hold_date,
        start_hour=hold.start_hour,
        end_hour=hold.end_hour,
        expires_at=hold.expires_at,
        remaining_seconds=result.remaining_seconds,
    )


@router.patch('/{hold_id}')
@Logger.io
async def extend_hold(
    hold_id: UtilsUUID7,
    request: HoldExtendRequest,
    session_id: str = Depends(require_session_id),
    use_case: ExtendSlotHoldUseCase = Depends(ExtendSlotHoldUseCase.depends),
) -> HoldResponse:
    hold = await use_case.extend(
        hold_id=hold_id, session_id=session_id, new_duration=request.duration
    )
    return HoldResponse(
        id=hold.id,
        turf_id=hold.turf_id,
        hold_date=hold.hold_date,
        start_hour=hold.start_hour,
        end_hour=hold.end_hour,
        expires_at=hold.expires_at,
        remaining_seconds=hold.remaining_seconds(use_case.clock.now()),
    )


@router.delete('/{hold_id}', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def release_hold(
    hold_id: UtilsUUID7,
    session_id: str = Depends(require_session_id),
    use_case: ReleaseSlotHoldUseCase = Depends(ReleaseSlotHoldUseCase.depends),
) -> None:
    await use_case.release(hold_id=hold_id, session_id=session_id)
