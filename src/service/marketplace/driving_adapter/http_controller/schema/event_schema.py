from datetime import date, datetime, time
from typing import List, Optional
import uuid

from pydantic import BaseModel, Field


class TicketTierCreateRequest(BaseModel):
    name: str
    price: int = Field(ge=0)
    seats: int = Field(ge=1)


class EventCreateRequest(BaseModel):
    title: str
    start_date: date
    tiers: List[TicketTierCreateRequest] = Field(min_length=1)
    price: Optional[int] = Field(default=None, ge=0)
    description: str = ''
    country: str = ''
    state: str = ''
    city: str = ''
    venue: str = ''
    end_date: Optional[date] = None
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    image_url: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'title': 'Jakarta Jazz Night',
                'start_date': '2026-12-12',
                'city': 'Jakarta',
                'venue': 'JIExpo Hall A',
                'tiers': [
                    {'name': 'VIP', 'price': 1500000, 'seats': 50},
                    {'name': 'Regular', 'price': 500000, 'seats': 450},
                ],
            }
        }


class TicketTierResponse(BaseModel):
    id: uuid.UUID
    name: str
    unit_price: int
    total_seats: int
    available_seats: int
    status: str


class EventResponse(BaseModel):
    id: uuid.UUID
    organizer_id: uuid.UUID
    title: str
    description: str
    country: str
    state: str
    city: str
    venue: str
    start_date: date
    end_date: Optional[date] = None
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    image_url: Optional[str] = None
    price: int
    capacity: int
    available_seats: int
    created_at: Optional[datetime] = None
    tiers: List[TicketTierResponse]


class TierDriftResponse(BaseModel):
    tier_id: uuid.UUID
    available_before: int
    available_after: int


class ReconciliationResponse(BaseModel):
    event_id: uuid.UUID
    event_available_before: int
    event_available_after: int
    repaired: bool
    tiers: List[TierDriftResponse]
