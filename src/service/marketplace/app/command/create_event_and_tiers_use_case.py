from datetime import date, time
from typing import List, Optional, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.event_entity import Event, TierSpec


class CreateEventAndTiersUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def create(
        self,
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
    ) -> Event:
        event = Event.create(
            organizer_id=organizer_id,
            title=title,
            start_date=start_date,
            tiers=tiers,
            price=price,
            description=description,
            country=country,
            state=state,
            city=city,
            venue=venue,
            end_date=end_date,
            time_start=time_start,
            time_end=time_end,
            image_url=image_url,
        )
        async with self.uow:
            created = await self.uow.event_command_repo.create(event=event)
            await self.uow.commit()

        Logger.base.info(
            f'[EVENT] Created {created.id} with {len(created.tiers)} tier(s), '
            f'capacity={created.capacity}'
        )
        return created
