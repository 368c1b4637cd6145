from datetime import date, datetime
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import (
    IneligibleDiscountError,
    NotFoundError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity
from src.service.booking.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.booking.app.interface.i_offer_query_repo import IOfferQueryRepo
from src.service.booking.app.interface.i_turf_query_repo import ITurfQueryRepo
from src.service.booking.domain.entity.turf_entity import Turf
from src.service.booking.domain.pricing.pricing_engine import PricingEngine
from src.service.booking.domain.value_object.price_quote import PriceQuote
from src.service.booking.domain.venue_calendar import slot_start_at
from src.service.shared_kernel.app.interface import IClock


class QuotePriceUseCase:
    """
    Assemble pricing inputs from the stores and run the pricing engine.

    The booking commit calls ``quote_for_turf`` again server-side, so the
    price a customer pays never comes from the client.
    """

    def __init__(
        self,
        *,
        turf_query_repo: ITurfQueryRepo,
        offer_query_repo: IOfferQueryRepo,
        booking_query_repo: IBookingQueryRepo,
        pricing_engine: PricingEngine,
        clock: IClock,
    ) -> None:
        self.turf_query_repo = turf_query_repo
        self.offer_query_repo = offer_query_repo
        self.booking_query_repo = booking_query_repo
        self.pricing_engine = pricing_engine
        self.clock = clock
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        turf_query_repo: ITurfQueryRepo = Depends(Provide[Container.turf_query_repo]),
        offer_query_repo: IOfferQueryRepo = Depends(Provide[Container.offer_query_repo]),
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        pricing_engine: PricingEngine = Depends(Provide[Container.pricing_engine]),
        clock: IClock = Depends(Provide[Container.clock]),
    ) -> Self:
        return cls(
            turf_query_repo=turf_query_repo,
            offer_query_repo=offer_query_repo,
            booking_query_repo=booking_query_repo,
            pricing_engine=pricing_engine,
            clock=clock,
        )

    @Logger.io
    async def quote(
        self,
        *,
        turf_id: UUID,
        slot_date: date,
        start_hour: int,
        duration: int,
        customer: Optional[CustomerIdentity] = None,
        promo_code: Optional[str] = None,
    ) -> PriceQuote:
        if not 1 <= duration <= settings.MAX_BOOKING_DURATION_HOURS:
            raise ValidationError(
                f'duration must be between 1 and {settings.MAX_BOOKING_DURATION_HOURS} hours'
            )

        with self.tracer.start_as_current_span(
            'use_case.quote_price',
            attributes={'turf.id': str(turf_id), 'quote.duration': duration},
        ):
            turf = await self.turf_query_repo.get_by_id(turf_id=turf_id)
            if turf is None or not turf.is_public:
                raise NotFoundError('Turf not found')

            now = self.clock.now()
            if slot_start_at(slot_date, start_hour, self.pricing_engine.tz) <= now:
                raise ValidationError('Cannot quote a slot that has already started')

            return await self.quote_for_turf(
                turf=turf,
                slot_date=slot_date,
                start_hour=start_hour,
                duration=duration,
                customer=customer,
                promo_code=promo_code,
                now=now,
            )

    async def quote_for_turf(
        self,
        *,
        turf: Turf,
        slot_date: date,
        start_hour: int,
        duration: int,
        customer: Optional[CustomerIdentity],
        promo_code: Optional[str],
        now: datetime,
    ) -> PriceQuote:
        completed_count = await self.count_completed_bookings(
            turf=turf, customer=customer, now=now
        )

        promo = None
        if promo_code and promo_code.strip():
            promo = await self.offer_query_repo.get_promo_code(
                owner_id=turf.owner_id, code=promo_code.strip()
            )
            if promo is None:
                raise IneligibleDiscountError('Invalid promo code')

        return self.pricing_engine.quote(
            turf=turf,
            slot_date=slot_date,
            start_hour=start_hour,
            duration=duration,
            completed_count=completed_count,
            offers=await self.offer_query_repo.list_offers(turf=turf),
            first_booking_offers=await self.offer_query_repo.list_first_booking_offers(turf=turf),
            loyalty_milestones=await self.offer_query_repo.list_loyalty_milestones(turf=turf),
            promo_code=promo,
            now=now,
        )

    async def count_completed_bookings(
        self, *, turf: Turf, customer: Optional[CustomerIdentity], now: datetime
    ) -> int:
        """Non-cancelled bookings of the customer at this turf whose end has passed"""
        if customer is None or not customer.phone:
            return 0
        known = await self.booking_query_repo.get_customer_by_phone(
            owner_id=turf.owner_id, phone=customer.phone
        )
        if known is None:
            return 0
        bookings = await self.booking_query_repo.list_customer_bookings(
            turf_id=turf.id, customer_id=known.id
        )
        return sum(
            1
            for booking in bookings
            if booking.is_active and booking.has_ended(now=now, tz=self.pricing_engine.tz)
        )
