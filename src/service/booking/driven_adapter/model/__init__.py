"""SQLAlchemy models - imported together so Base.metadata sees every table"""

from src.service.booking.driven_adapter.model.booking_model import BookingModel, BookingTicketModel
from src.service.booking.driven_adapter.model.customer_model import (
    CustomerModel,
    LoyaltyTransactionModel,
)
from src.service.booking.driven_adapter.model.offer_model import (
    FirstBookingOfferModel,
    LoyaltyMilestoneOfferModel,
    OfferModel,
    PromoCodeModel,
)
from src.service.booking.driven_adapter.model.slot_hold_model import SlotHoldModel
from src.service.booking.driven_adapter.model.turf_model import BlockedSlotModel, TurfModel

__all__ = [
    'BlockedSlotModel',
    'BookingModel',
    'BookingTicketModel',
    'CustomerModel',
    'FirstBookingOfferModel',
    'LoyaltyMilestoneOfferModel',
    'LoyaltyTransactionModel',
    'OfferModel',
    'PromoCodeModel',
    'SlotHoldModel',
    'TurfModel',
]
