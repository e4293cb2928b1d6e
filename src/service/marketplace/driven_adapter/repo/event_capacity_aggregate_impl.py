import uuid

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.exceptions import CapacityDriftError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_event_capacity_aggregate import (
    IEventCapacityAggregate,
)
from src.service.marketplace.driven_adapter.model.event_model import EventModel, TicketTierModel


class EventCapacityAggregateImpl(IEventCapacityAggregate):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def adjust(self, *, event_id: uuid.UUID, delta: int) -> int:
        result = await self.session.execute(
            update(EventModel)
            .where(
                EventModel.id == event_id,
                EventModel.available_seats + delta >= 0,
                EventModel.available_seats + delta <= EventModel.capacity,
            )
            .values(available_seats=EventModel.available_seats + delta)
            .returning(EventModel.available_seats)
            .execution_options(synchronize_session=False)
        )
        available = result.scalar_one_or_none()
        if available is None:
            raise CapacityDriftError(
                f'Event {event_id} aggregate refused delta {delta:+d}: counter out of bounds'
            )
        return available

    @Logger.io
    async def recompute(self, *, event_id: uuid.UUID) -> tuple[int, int]:
        before = await self.session.scalar(
            select(EventModel.available_seats).where(EventModel.id == event_id)
        )
        if before is None:
            raise NotFoundError('Event not found')
        tier_sum = (
            select(func.coalesce(func.sum(TicketTierModel.available_seats), 0))
            .where(TicketTierModel.event_id == event_id)
            .scalar_subquery()
        )
        result = await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(available_seats=tier_sum)
            .returning(EventModel.available_seats)
            .execution_options(synchronize_session=False)
        )
        return before, result.scalar_one()
