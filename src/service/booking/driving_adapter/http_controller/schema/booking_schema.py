from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from src.platform.types import UtilsUUID7


class BookingCommitRequest(BaseModel):
    hold_id: UtilsUUID7
    promo_code: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {'hold_id': '01936d8f-5e73-7c4e-a9c5-123456789abc', 'promo_code': None}
        }


class BookingResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',  # UUID7
                'turf_id': '01936d8f-5e73-7c4e-a9c5-abcdef012345',
                'booking_date': '2025-01-18',
                'start_hour': 18,
                'end_hour': 20,
                'total_amount': '1700.00',
                'discount_amount': '300.00',
                'status': 'booked',
                'discount_source': 'offer',
                'ticket_code': 'TM7K2Q9X',
                'qr_data': '{"code":"TM7K2Q9X","bookingId":"...","date":"2025-01-18","time":"18:00-20:00"}',
                'loyalty_points_earned': 170,
            }
        },
    }

    id: UtilsUUID7
    turf_id: UtilsUUID7
    booking_date: date
    start_hour: int
    end_hour: int
    total_amount: Decimal
    discount_amount: Decimal
    status: str
    discount_source: Optional[str] = None
    ticket_code: str
    qr_data: str
    loyalty_points_earned: int


class CancelBookingRequest(BaseModel):
    reason: str = ''

    class Config:
        json_schema_extra = {'example': {'reason': 'Match rescheduled'}}


class CancelBookingResponse(BaseModel):
    id: UtilsUUID7
    status: str
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
