from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.marketplace.domain.entity.event_entity import Event


class ListEventsUseCase:
    def __init__(self, *, event_query_repo: IEventQueryRepo) -> None:
        self.event_query_repo = event_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        event_query_repo: IEventQueryRepo = Depends(Provide[Container.event_query_repo]),
    ) -> Self:
        return cls(event_query_repo=event_query_repo)

    @Logger.io
    async def list_events(self) -> List[Event]:
        """Events with their tiers, ordered by start date"""
        events = await self.event_query_repo.list_events()
        Logger.base.info(f'[LIST_EVENTS] Found {len(events)} events')
        return events
