from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_event_query_repo import IEventQueryRepo
from src.service.marketplace.domain.entity.event_entity import Event
from src.service.marketplace.driven_adapter.model.event_model import EventModel
from src.service.marketplace.driven_adapter.repo.model_mapper import to_event_entity


class EventQueryRepoImpl(IEventQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        """
        Injected session (UoW mode) is used as-is; otherwise open one from the factory.
        """
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @Logger.io
    async def get_by_id(self, *, event_id: uuid.UUID) -> Optional[Event]:
        async with self._get_session() as session:
            db_event = await session.scalar(
                select(EventModel)
                .where(EventModel.id == event_id)
                .execution_options(populate_existing=True)
            )
            if db_event is None:
                return None
            return to_event_entity(db_event)

    @Logger.io
    async def list_events(self) -> List[Event]:
        async with self._get_session() as session:
            result = await session.execute(
                select(EventModel).order_by(EventModel.start_date, EventModel.id)
            )
            return [to_event_entity(row) for row in result.scalars().all()]
