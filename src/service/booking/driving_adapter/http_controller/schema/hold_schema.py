from datetime import date, datetime

from pydantic import BaseModel, Field

from src.platform.types import UtilsUUID7


class HoldCreateRequest(BaseModel):
    hold_date: date
    start_hour: int = Field(ge=0, le=23)
    duration: int = Field(ge=1)

    class Config:
        json_schema_extra = {
            'example': {'hold_date': '2025-01-18', 'start_hour': 18, 'duration': 2}
        }


class HoldExtendRequest(BaseModel):
    duration: int = Field(ge=1)

    class Config:
        json_schema_extra = {'example': {'duration': 3}}


class HoldResponse(BaseModel):
    model_config = {
        'json_schema_extra': {
            'example': {
                'id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'turf_id': '01936d8f-5e73-7c4e-a9c5-abcdef012345',
                'hold_date': '2025-01-18',
                'start_hour': 18,
                'end_hour': 20,
                'expires_at': '2025-01-18T10:35:00Z',
                'remaining_seconds': 300,
            }
        },
    }

    id: UtilsUUID7
    turf_id: UtilsUUID7
    hold_date: date
    start_hour: int
    end_hour: int
    expires_at: datetime
    remaining_seconds: int
