from collections.abc import Callable
from datetime import timedelta
from typing import Optional, Self

from dependency_injector.wiring import Provide, Provider, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AuthRequiredError,
    NotFoundError,
    PermissionDeniedError,
)
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.interface.i_booking_unit_of_work import IBookingUnitOfWork
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.venue_calendar import venue_timezone
from src.service.shared_kernel.app.interface import IClock, ITurfChangeNotifier


class CancelBookingUseCase:
    """
    Customer-initiated cancellation.

    The booking row is kept with its cancellation reason, actor and time.
    Loyalty points and offer counters are not reversed.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], IBookingUnitOfWork],
        notifier: ITurfChangeNotifier,
        clock: IClock,
    ) -> None:
        self.uow_factory = uow_factory
        self.notifier = notifier
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], IBookingUnitOfWork] = Depends(
            Provider[Container.booking_unit_of_work]
        ),
        notifier: ITurfChangeNotifier = Depends(Provide[Container.turf_change_notifier]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(uow_factory=uow_factory, notifier=notifier, clock=clock)

    @Logger.io
    async def cancel(
        self,
        *,
        booking_id: UUID,
        customer: Optional[CustomerIdentity],
        reason: str = '',
    ) -> Booking:
        """
        Raises:
            AuthRequiredError: No authenticated customer
            NotFoundError: Unknown booking
            PermissionDeniedError: Not the customer's booking, or too close to start
            DomainError: Booking already cancelled
        """
        if customer is None or not customer.phone:
            raise AuthRequiredError()

        with self.tracer.start_as_current_span(
            'use_case.cancel_booking',
            attributes={'booking.id': str(booking_id)},
        ):
            async with self.uow_factory() as uow:
                booking = await uow.bookings.get_by_id(booking_id=booking_id)
                if booking is None:
                    raise NotFoundError('Booking not found')

                holder = await uow.customers.get_by_phone(
                    owner_id=booking.owner_id, phone=customer.phone
                )
                if holder is None or holder.id != booking.customer_id:
                    raise PermissionDeniedError('You can only cancel your own bookings')

                now = self.clock.now()
                lead = timedelta(hours=settings.CANCELLATION_MIN_LEAD_HOURS)
                if booking.starts_at(venue_timezone()) - now < lead:
                    raise PermissionDeniedError(
                        f'Bookings can only be cancelled at least '
                        f'{settings.CANCELLATION_MIN_LEAD_HOURS} hours before the start time'
                    )

                cancelled = booking.cancel(
                    reason=reason or 'Cancelled by customer', cancelled_by='customer', now=now
                )
                saved = await uow.bookings.update_cancellation(booking=cancelled)
                await uow.commit()

            await self.notifier.publish_change(
                turf_id=saved.turf_id, entity='booking', action='cancelled'
            )
            Logger.base.info(f'🚫 [CANCEL] Booking {saved.id} cancelled')
            return saved
