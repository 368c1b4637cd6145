import attrs

from src.service.booking.domain.entity.booking_entity import Booking
from src.service.booking.domain.entity.customer_entity import BookingTicket
from src.service.booking.domain.value_object.price_quote import PriceQuote


@attrs.define(frozen=True)
class BookingReceipt:
    """What the customer gets back from a successful commit"""

    booking: Booking
    ticket: BookingTicket
    quote: PriceQuote
    loyalty_points_earned: int
