from datetime import date, datetime, time, timezone
from enum import StrEnum
from typing import List, Optional
import uuid

import attrs

from src.platform.exception.exceptions import ValidationError
from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7 import new_uuid7


class TierStatus(StrEnum):
    AVAILABLE = 'available'
    SOLD_OUT = 'sold_out'


@attrs.define
class TicketTier:
    id: uuid.UUID
    event_id: uuid.UUID
    name: str
    unit_price: int
    total_seats: int
    available_seats: int

    @property
    def status(self) -> TierStatus:
        return TierStatus.SOLD_OUT if self.available_seats == 0 else TierStatus.AVAILABLE

    @property
    def held_seats(self) -> int:
        return self.total_seats - self.available_seats


@attrs.frozen
class TierSpec:
    """Organizer input for one tier at event creation."""

    name: str
    price: int
    seats: int


@attrs.define
class Event:
    id: uuid.UUID
    organizer_id: uuid.UUID
    title: str
    start_date: date
    capacity: int
    available_seats: int
    price: int = 0
    description: str = ''
    country: str = ''
    state: str = ''
    city: str = ''
    venue: str = ''
    end_date: Optional[date] = None
    time_start: Optional[time] = None
    time_end: Optional[time] = None
    image_url: Optional[str] = None
    tiers: List[TicketTier] = attrs.field(factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        organizer_id: uuid.UUID,
        title: str,
        start_date: date,
        tiers: List[TierSpec],
        price: Optional[int] = None,
        description: str = '',
        country: str = '',
        state: str = '',
        city: str = '',
        venue: str = '',
        end_date: Optional[date] = None,
        time_start: Optional[time] = None,
        time_end: Optional[time] = None,
        image_url: Optional[str] = None,
    ) -> 'Event':
        if not title.strip():
            raise ValidationError('Event title is required', details=[{'field': 'title'}])
        if not tiers:
            raise ValidationError('An event needs at least one ticket tier')
        if end_date is not None and end_date < start_date:
            raise ValidationError('end_date cannot be before start_date')

        names = [spec.name.strip() for spec in tiers]
        if any(not name for name in names):
            raise ValidationError('Ticket tier name is required')
        if len(set(names)) != len(names):
            raise ValidationError('Ticket tier names must be unique within an event')
        for spec in tiers:
            if spec.price < 0:
                raise ValidationError(f'Price of tier {spec.name} cannot be negative')
            if spec.seats < 1:
                raise ValidationError(f'Tier {spec.name} needs at least one seat')

        event_id = new_uuid7()
        ticket_tiers = [
            TicketTier(
                id=new_uuid7(),
                event_id=event_id,
                name=spec.name.strip(),
                unit_price=spec.price,
                total_seats=spec.seats,
                available_seats=spec.seats,
            )
            for spec in tiers
        ]
        capacity = sum(tier.total_seats for tier in ticket_tiers)
        return cls(
            id=event_id,
            organizer_id=organizer_id,
            title=title.strip(),
            description=description,
            country=country,
            state=state,
            city=city,
            venue=venue,
            start_date=start_date,
            end_date=end_date,
            time_start=time_start,
            time_end=time_end,
            # Listing price defaults to the cheapest tier
            price=price if price is not None else min(t.unit_price for t in ticket_tiers),
            image_url=image_url,
            capacity=capacity,
            available_seats=capacity,
            tiers=ticket_tiers,
            created_at=datetime.now(timezone.utc),
        )

    def tier_by_id(self) -> dict[uuid.UUID, TicketTier]:
        return {tier.id: tier for tier in self.tiers}
