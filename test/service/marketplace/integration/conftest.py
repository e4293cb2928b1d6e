from datetime import date
import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.marketplace.app.command.create_event_and_tiers_use_case import (
    CreateEventAndTiersUseCase,
)
from src.service.marketplace.domain.entity.event_entity import Event, TierSpec


@pytest.fixture
def uow(sqlite_database: async_sessionmaker[AsyncSession]) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(sqlite_database)


@pytest.fixture
def uow_factory(sqlite_database: async_sessionmaker[AsyncSession]):
    """Separate units of work, as separate requests would get"""
    return lambda: SqlAlchemyUnitOfWork(sqlite_database)


@pytest.fixture
async def event(uow: SqlAlchemyUnitOfWork) -> Event:
    return await CreateEventAndTiersUseCase(uow=uow).create(
        organizer_id=uuid.uuid4(),
        title='Jazz Night',
        start_date=date(2026, 12, 12),
        tiers=[TierSpec('VIP', 1500, 5), TierSpec('Regular', 500, 10)],
        venue='Blue Note',
    )


@pytest.fixture
def tiers(event: Event):
    """(vip, regular)"""
    return tuple(sorted(event.tiers, key=lambda t: t.name != 'VIP'))
