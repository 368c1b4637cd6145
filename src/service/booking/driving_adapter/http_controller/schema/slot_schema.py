from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from src.platform.types import UtilsUUID7


class SlotCellResponse(BaseModel):
    hour: int
    label: str  # '18:00'
    status: str


class SlotDayResponse(BaseModel):
    slot_date: date
    slots: List[SlotCellResponse]


class SlotGridResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'turf_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'hours': [6, 7, 8],
                'days': [
                    {
                        'slot_date': '2025-01-13',
                        'slots': [
                            {'hour': 6, 'label': '06:00', 'status': 'past'},
                            {'hour': 7, 'label': '07:00', 'status': 'booked'},
                            {'hour': 8, 'label': '08:00', 'status': 'available'},
                        ],
                    }
                ],
            }
        },
    }

    turf_id: UtilsUUID7
    hours: List[int]
    days: List[SlotDayResponse]


class QuoteRequest(BaseModel):
    slot_date: date
    start_hour: int = Field(ge=0, le=23)
    duration: int = Field(ge=1)
    promo_code: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'slot_date': '2025-01-18',
                'start_hour': 18,
                'duration': 2,
                'promo_code': 'WEEKEND10',
            }
        }


class QuoteResponse(BaseModel):
    base_price: Decimal
    primary_discount: Decimal
    promo_discount: Decimal
    total_discount: Decimal
    final_price: Decimal
    savings_percent: int
    discount_source: Optional[str] = None
    discount_label: Optional[str] = None
