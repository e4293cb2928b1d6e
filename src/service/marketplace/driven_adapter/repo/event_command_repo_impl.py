from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_event_command_repo import IEventCommandRepo
from src.service.marketplace.domain.entity.event_entity import Event
from src.service.marketplace.driven_adapter.model.event_model import EventModel, TicketTierModel


class EventCommandRepoImpl(IEventCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, event: Event) -> Event:
        self.session.add(
            EventModel(
                id=event.id,
                organizer_id=event.organizer_id,
                title=event.title,
                description=event.description,
                country=event.country,
                state=event.state,
                city=event.city,
                venue=event.venue,
                start_date=event.start_date,
                end_date=event.end_date,
                time_start=event.time_start,
                time_end=event.time_end,
                price=event.price,
                image_url=event.image_url,
                capacity=event.capacity,
                available_seats=event.available_seats,
                created_at=event.created_at,
            )
        )
        await self.session.flush()
        self.session.add_all(
            [
                TicketTierModel(
                    id=tier.id,
                    event_id=event.id,
                    name=tier.name,
                    unit_price=tier.unit_price,
                    total_seats=tier.total_seats,
                    available_seats=tier.available_seats,
                )
                for tier in event.tiers
            ]
        )
        await self.session.flush()
        return event
