from collections.abc import AsyncIterator
from datetime import date
from typing import Optional

import anyio
from fastapi import APIRouter, Depends, Query, status
from opentelemetry import trace
import orjson
from sse_starlette.sse import EventSourceResponse

from src.platform.config.di import container
from src.platform.logging.loguru_io import Logger
from src.platform.types import UtilsUUID7
from src.service.booking.app.command.acquire_slot_hold_use_case import AcquireSlotHoldUseCase
from src.service.booking.app.command.expire_slot_hold_use_case import ExpireSlotHoldUseCase
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.query.get_slot_grid_use_case import GetSlotGridUseCase
from src.service.booking.app.query.quote_price_use_case import QuotePriceUseCase
from src.service.booking.domain.value_object.slot_grid import SlotGrid
from src.service.booking.driving_adapter.http_controller.identity import (
    get_customer,
    get_session_id,
    require_session_id,
)
from src.service.booking.driving_adapter.http_controller.schema.hold_schema import (
    HoldCreateRequest,
    HoldResponse,
)
from src.service.booking.driving_adapter.http_controller.schema.slot_schema import (
    QuoteRequest,
    QuoteResponse,
    SlotCellResponse,
    SlotDayResponse,
    SlotGridResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _grid_response(grid: SlotGrid) -> SlotGridResponse:
    return SlotGridResponse(
        turf_id=grid.turf_id,
        hours=grid.hours,
        days=[
            SlotDayResponse(
                slot_date=slot_date,
                slots=[
                    SlotCellResponse(
                        hour=cell.hour, label=f'{cell.hour:02d}:00', status=cell.status.value
                    )
                    for cell in grid.row(slot_date)
                ],
            )
            for slot_date in grid.dates
        ],
    )


@router.get('/{turf_id}/slots')
@Logger.io(truncate_content=True)
async def get_slots(
    turf_id: UtilsUUID7,
    start_date: Optional[date] = None,
    days: Optional[int] = Query(default=None, ge=1, le=31),
    session_id: str = Depends(require_session_id),
    use_case: GetSlotGridUseCase = Depends(GetSlotGridUseCase.depends),
) -> SlotGridResponse:
    grid = await use_case.get_slot_grid(
        turf_id=turf_id, session_id=session_id, start_date=start_date, days=days
    )
    return _grid_response(grid)


@router.post('/{turf_id}/quote')
@Logger.io
async def quote_price(
    turf_id: UtilsUUID7,
    request: QuoteRequest,
    customer: Optional[CustomerIdentity] = Depends(get_customer),
    use_case: QuotePriceUseCase = Depends(QuotePriceUseCase.depends),
) -> QuoteResponse:
    quote = await use_case.quote(
        turf_id=turf_id,
        slot_date=request.slot_date,
        start_hour=request.start_hour,
        duration=request.duration,
        customer=customer,
        promo_code=request.promo_code,
    )
    return QuoteResponse(
        base_price=quote.base_price,
        primary_discount=quote.primary_discount,
        promo_discount=quote.promo_discount,
        total_discount=quote.total_discount,
        final_price=quote.final_price,
        savings_percent=quote.savings_percent,
        discount_source=quote.discount_source.value if quote.discount_source else None,
        discount_label=quote.discount_label,
    )


@router.post('/{turf_id}/hold', status_code=status.HTTP_201_CREATED)
@Logger.io
async def acquire_hold(
    turf_id: UtilsUUID7,
    request: HoldCreateRequest,
    session_id: str = Depends(require_session_id),
    customer: Optional[CustomerIdentity] = Depends(get_customer),
    use_case: AcquireSlotHoldUseCase = Depends(AcquireSlotHoldUseCase.depends),
) -> HoldResponse:
    with tracer.start_as_current_span('controller.acquire_hold') as span:
        span.set_attribute('turf.id', str(turf_id))
        hold = await use_case.acquire(
            turf_id=turf_id,
            hold_date=request.hold_date,
            start_hour=request.start_hour,
            duration=request.duration,
            session_id=session_id,
            customer=customer,
        )
        span.set_attribute('hold.id', str(hold.id))
        return HoldResponse(
            id=hold.id,
            turf_id=hold.turf_id,
            hold_date=hold.hold_date,
            start_hour=hold.start_hour,
            end_hour=hold.end_hour,
            expires_at=hold.expires_at,
            remaining_seconds=hold.remaining_seconds(hold.created_at),
        )


@router.post('/{turf_id}/hold/sweep')
@Logger.io
async def sweep_expired_holds(
    turf_id: UtilsUUID7,
    use_case: ExpireSlotHoldUseCase = Depends(ExpireSlotHoldUseCase.depends),
) -> dict[str, int]:
    removed = await use_case.sweep_expired(turf_id=turf_id)
    return {'removed': removed}


# ============================ SSE Endpoint ============================


@router.get('/{turf_id}/changes', status_code=status.HTTP_200_OK)
@Logger.io
async def stream_turf_changes(
    turf_id: UtilsUUID7,
    session_id: Optional[str] = Depends(get_session_id),
) -> EventSourceResponse:
    """
    SSE "something changed" signals for one turf

    Architecture: Use Case → ITurfChangeNotifier → SSE Endpoint → Client

    The payload carries no slot data; clients re-fetch /slots on every signal.
    """
    notifier = container.turf_change_notifier()
    Logger.base.info(f'📡 [SSE] Client subscribing to turf={turf_id}')

    async def event_generator() -> AsyncIterator[dict[str, str]]:
        try:
            async for signal in notifier.subscribe(turf_id=turf_id):
                yield {'event': 'turf_change', 'data': orjson.dumps(signal).decode()}
                Logger.base.debug(
                    f'📡 [SSE] Sent turf={turf_id} {signal.get("entity")}/{signal.get("action")}'
                )
        except anyio.get_cancelled_exc_class():
            Logger.base.info(f'🔌 [SSE] Client disconnected: turf={turf_id}, session={session_id}')
            raise
        except Exception as e:
            Logger.base.error(
                f'[SSE] Error in generator for turf={turf_id}: {type(e).__name__}: {e}'
            )
            raise

    return EventSourceResponse(event_generator())
