from collections.abc import Callable
from decimal import Decimal
import secrets
import string
from typing import Optional, Self

from dependency_injector.wiring import Provide, Provider, inject
from fastapi import Depends
import orjson
from opentelemetry import trace
import uuid_utils
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    AuthRequiredError,
    ConflictError,
    DomainError,
    ExpiredHoldError,
    IneligibleDiscountError,
    NotFoundError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.booking_notification_dto import BookingNotification
from src.service.booking.app.dto.booking_receipt_dto import BookingReceipt
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.interface.i_booking_unit_of_work import IBookingUnitOfWork
from src.service.booking.app.interface.i_notification_dispatcher import INotificationDispatcher
from src.service.booking.app.interface.i_slot_hold_command_repo import ISlotHoldCommandRepo
from src.service.booking.app.interface.i_slot_hold_query_repo import ISlotHoldQueryRepo
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.app.query.quote_price_use_case import QuotePriceUseCase
from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import (
    BookingTicket,
    Customer,
    LoyaltyTransaction,
)
from src.service.shared_kernel.app.interface import IClock, ITurfChangeNotifier


TICKET_CODE_ALPHABET = string.ascii_uppercase + string.digits


def loyalty_points_for(amount: Decimal) -> int:
    """LOYALTY_POINTS_PER_UNIT points per whole LOYALTY_AMOUNT_UNIT paid"""
    units = int(amount // settings.LOYALTY_AMOUNT_UNIT)
    return max(0, units) * settings.LOYALTY_POINTS_PER_UNIT


def generate_ticket_code() -> str:
    suffix = ''.join(
        secrets.choice(TICKET_CODE_ALPHABET) for _ in range(settings.TICKET_CODE_LENGTH)
    )
    return f'{settings.TICKET_CODE_PREFIX}{suffix}'


class CommitBookingUseCase:
    """
    Turn a live hold into a confirmed booking.

    Flow:
    1. Resolve or create the customer in the operator's ledger
    2. Conditional booking insert (durability boundary)
    3. Offer usage counters and revenue
    4. Promo usage counter
    5. Loyalty points and customer stats
    6. Ticket with a unique code
    7. Operator notification (best effort)
    8. Release the hold and broadcast

    Steps 1-6 share one unit of work and land together or not at all. A failed
    commit leaves the hold in place so the customer can retry.
    """

    def __init__(
        self,
        *,
        turf_query_repo: ITurfQueryRepo,
        slot_hold_query_repo: ISlotHoldQueryRepo,
        slot_hold_command_repo: ISlotHoldCommandRepo,
        quote_price: QuotePriceUseCase,
        uow_factory: Callable[[], IBookingUnitOfWork],
        notification_dispatcher: INotificationDispatcher,
        notifier: ITurfChangeNotifier,
        clock: IClock,
    ) -> None:
        self.turf_query_repo = turf_query_repo
        self.slot_hold_query_repo = slot_hold_query_repo
        self.slot_hold_command_repo = slot_hold_command_repo
        self.quote_price = quote_price
        self.uow_factory = uow_factory
        self.notification_dispatcher = notification_dispatcher
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
        quote_price: QuotePriceUseCase = Depends(QuotePriceUseCase.depends),
        uow_factory: Callable[[], IBookingUnitOfWork] = Depends(
            Provider[Container.booking_unit_of_work]
        ),
        notification_dispatcher: INotificationDispatcher = Depends(
            Provide[Container.notification_dispatcher]
        ),
        notifier: ITurfChangeNotifier = Depends(Provide[Container.turf_change_notifier]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            turf_query_repo=turf_query_repo,
            slot_hold_query_repo=slot_hold_query_repo,
            slot_hold_command_repo=slot_hold_command_repo,
            quote_price=quote_price,
            uow_factory=uow_factory,
            notification_dispatcher=notification_dispatcher,
            notifier=notifier,
            clock=clock,
        )

    @Logger.io
    async def commit(
        self,
        *,
        hold_id: UUID,
        session_id: str,
        customer: Optional[CustomerIdentity],
        promo_code: Optional[str] = None,
    ) -> BookingReceipt:
        """
        Raises:
            AuthRequiredError: No authenticated customer
            ValidationError: Customer name or phone missing
            ExpiredHoldError: Hold missing or past its deadline
            PermissionDeniedError: Hold belongs to another session
            IneligibleDiscountError: Promo code rejected
            ConflictError: The window was claimed by someone else
        """
        if customer is None or not customer.phone:
            raise AuthRequiredError()
        if not customer.name.strip():
            raise ValidationError('Customer name and phone are required')

        with self.tracer.start_as_current_span(
            'use_case.commit_booking',
            attributes={'hold.id': str(hold_id)},
        ):
            hold = await self.slot_hold_query_repo.get_by_id(hold_id=hold_id)
            if hold is None:
                raise ExpiredHoldError()
            now = self.clock.now()
            hold.ensure_usable_by(session_id=session_id, now=now)

            turf = await self.turf_query_repo.get_by_id(turf_id=hold.turf_id)
            if turf is None:
                raise NotFoundError('Turf not found')

            quote = await self.quote_price.quote_for_turf(
                turf=turf,
                slot_date=hold.hold_date,
                start_hour=hold.start_hour,
                duration=hold.duration,
                customer=customer,
                promo_code=promo_code,
                now=now,
            )
            points = loyalty_points_for(quote.final_price)

            async with self.uow_factory() as uow:
                # Step 1: customer ledger
                existing = await uow.customers.get_by_phone(
                    owner_id=turf.owner_id, phone=customer.phone
                )
                created = None
                if existing is None:
                    created = await uow.customers.create_if_absent(
                        customer=Customer(
                            id=uuid_utils.uuid7(),
                            owner_id=turf.owner_id,
                            name=customer.name.strip(),
                            phone=customer.phone,
                            email=customer.email,
                        ).accrue(amount=quote.final_price, points=points, visited_at=now)
                    )
                    if created is None:
                        # A concurrent first booking registered this phone before us
                        existing = await uow.customers.get_by_phone(
                            owner_id=turf.owner_id, phone=customer.phone
                        )
                        if existing is None:
                            raise ConflictError('Customer ledger changed concurrently, please retry')
                ledger_entry = created or existing

                # Step 2: durability boundary
                booking = Booking.create(
                    id=uuid_utils.uuid7(),
                    turf_id=turf.id,
                    owner_id=turf.owner_id,
                    customer_id=ledger_entry.id,
                    booking_date=hold.hold_date,
                    start_hour=hold.start_hour,
                    end_hour=hold.end_hour,
                    total_amount=quote.final_price,
                    discount_amount=quote.total_discount,
                    offer_id=quote.offer_id,
                    promo_code_id=quote.promo_code_id,
                    discount_source=quote.discount_source,
                    now=now,
                )
                inserted = await uow.bookings.insert_if_free(
                    booking=booking, session_id=session_id, now=now
                )
                if inserted is None:
                    raise ConflictError('Selected slots were just booked by someone else')

                # Step 3: offer counters
                if quote.counts_offer_usage and quote.offer_id is not None:
                    await uow.offer_usage.record_offer_usage(
                        offer_id=quote.offer_id, revenue=quote.final_price
                    )

                # Step 4: promo counter
                if quote.promo_code_id is not None:
                    if not await uow.offer_usage.increment_promo_usage(
                        promo_code_id=quote.promo_code_id
                    ):
                        raise IneligibleDiscountError('Promo code usage limit reached')

                # Step 5: loyalty
                if points > 0:
                    await uow.loyalty_transactions.create(
                        transaction=LoyaltyTransaction(
                            id=uuid_utils.uuid7(),
                            owner_id=turf.owner_id,
                            customer_id=ledger_entry.id,
                            booking_id=inserted.id,
                            points=points,
                            description=f'Earned {points} points for booking at {turf.name}',
                        )
                    )
                if existing is not None:
                    ledger_entry = await uow.customers.update(
                        customer=existing.accrue(
                            amount=quote.final_price, points=points, visited_at=now
                        )
                    )

                # Step 6: ticket
                ticket = await self._issue_ticket(uow=uow, booking=inserted)

                await uow.commit()

            Logger.base.info(
                f'✅ [COMMIT] Booking {inserted.id} on turf {turf.id} '
                f'{inserted.booking_date} {inserted.start_hour}-{inserted.end_hour} '
                f'amount={quote.final_price} ticket={ticket.ticket_code}'
            )

            # Step 7: notification never fails the booking
            try:
                await self.notification_dispatcher.dispatch_booking_created(
                    notification=BookingNotification(
                        turf_owner_id=turf.owner_id,
                        booking_id=inserted.id,
                        customer_name=ledger_entry.name,
                        booking_date=inserted.booking_date,
                        start_time=f'{inserted.start_hour:02d}:00',
                        turf_name=turf.name,
                        amount=quote.final_price,
                    )
                )
            except Exception as e:
                Logger.base.warning(f'⚠️ [COMMIT] Notification for {inserted.id} failed: {e}')

            # Step 8: release the hold
            await self.slot_hold_command_repo.delete(hold_id=hold.id)
            await self.notifier.publish_change(turf_id=turf.id, entity='booking', action='created')

            return BookingReceipt(
                booking=inserted, ticket=ticket, quote=quote, loyalty_points_earned=points
            )

    async def _issue_ticket(self, *, uow: IBookingUnitOfWork, booking: Booking) -> BookingTicket:
        for attempt in range(1, settings.TICKET_CODE_MAX_ATTEMPTS + 1):
            code = generate_ticket_code()
            qr_data = orjson.dumps(
                {
                    'code': code,
                    'bookingId': str(booking.id),
                    'date': booking.booking_date.isoformat(),
                    'time': f'{booking.start_hour:02d}:00-{booking.end_hour:02d}:00',
                }
            ).decode()
            ticket = await uow.tickets.insert_if_code_free(
                ticket=BookingTicket(
                    id=uuid_utils.uuid7(), booking_id=booking.id, ticket_code=code, qr_data=qr_data
                )
            )
            if ticket is not None:
                return ticket
            Logger.base.debug(f'🎫 [COMMIT] Ticket code collision, attempt {attempt}')

        raise DomainError('Could not allocate a ticket code, please retry', 503)
