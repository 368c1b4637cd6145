from typing import Optional

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.types import UtilsUUID7
from src.service.booking.app.command.cancel_booking_use_case import CancelBookingUseCase
from src.service.booking.app.command.commit_booking_use_case import CommitBookingUseCase
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.driving_adapter.http_controller.identity import (
    get_customer,
    require_customer,
    require_session_id,
)
from src.service.booking.driving_adapter.http_controller.schema.booking_schema import (
    BookingCommitRequest,
    BookingResponse,
    CancelBookingRequest,
    CancelBookingResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def commit_booking(
    request: BookingCommitRequest,
    session_id: str = Depends(require_session_id),
    customer: Optional[CustomerIdentity] = Depends(get_customer),
    use_case: CommitBookingUseCase = Depends(CommitBookingUseCase.depends),
) -> BookingResponse:
    with tracer.start_as_current_span('controller.commit_booking') as span:
        span.set_attribute('hold.id', str(request.hold_id))

        receipt = await use_case.commit(
            hold_id=request.hold_id,
            session_id=session_id,
            customer=customer,
            promo_code=request.promo_code,
        )
        booking = receipt.booking
        span.set_attribute('booking.id', str(booking.id))

        return BookingResponse(
            id=booking.id,
            turf_id=booking.turf_id,
            booking_date=booking.booking_date,
            start_hour=booking.start_hour,
            end_hour=booking.end_hour,
            total_amount=booking.total_amount,
            discount_amount=booking.discount_amount,
            status=booking.status.value,
            discount_source=booking.discount_source.value if booking.discount_source else None,
            ticket_code=receipt.ticket.ticket_code,
            qr_data=receipt.ticket.qr_data,
            loyalty_points_earned=receipt.loyalty_points_earned,
        )


@router.patch('/{booking_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_booking(
    booking_id: UtilsUUID7,
    request: CancelBookingRequest,
    customer: CustomerIdentity = Depends(require_customer),
    use_case: CancelBookingUseCase = Depends(CancelBookingUseCase.depends),
) -> CancelBookingResponse:
    booking = await use_case.cancel(booking_id=booking_id, customer=customer, reason=request.reason)
    return CancelBookingResponse(
        id=booking.id,
        status=booking.status.value,
        cancellation_reason=booking.cancellation_reason,
        cancelled_at=booking.cancelled_at,
    )
