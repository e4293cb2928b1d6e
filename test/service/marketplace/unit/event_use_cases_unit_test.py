from datetime import date
import uuid

import pytest

from src.platform.exception.exceptions import NotFoundError, ValidationError
from src.service.marketplace.app.command.create_event_and_tiers_use_case import (
    CreateEventAndTiersUseCase,
)
from src.service.marketplace.app.query.get_event_use_case import GetEventUseCase
from src.service.marketplace.app.query.list_events_use_case import ListEventsUseCase
from src.service.marketplace.domain.entity.event_entity import TierSpec
from test.service.marketplace.fakes import FakeEventQueryRepo, FakeUnitOfWork, InMemoryStore


pytestmark = pytest.mark.unit


class TestEventUseCases:
    def setup_method(self):
        self.store = InMemoryStore()
        self.uow = FakeUnitOfWork(self.store)

    @pytest.mark.asyncio
    async def test_create_event_with_tiers_in_one_commit(self):
        # When
        event = await CreateEventAndTiersUseCase(uow=self.uow).create(
            organizer_id=uuid.uuid4(),
            title='Jazz Night',
            start_date=date(2026, 12, 12),
            tiers=[TierSpec('VIP', 1500, 5), TierSpec('Regular', 500, 10)],
        )

        # Then
        assert self.uow.commits == 1
        assert self.store.events[event.id].capacity == 15
        assert {t.available_seats for t in self.store.tiers_of(event.id)} == {5, 10}

        fetched = await GetEventUseCase(event_query_repo=FakeEventQueryRepo(self.store)).get_by_id(
            event_id=event.id
        )
        assert fetched.available_seats == 15
        assert len(fetched.tiers) == 2

    @pytest.mark.asyncio
    async def test_invalid_tier_writes_nothing(self):
        with pytest.raises(ValidationError):
            await CreateEventAndTiersUseCase(uow=self.uow).create(
                organizer_id=uuid.uuid4(),
                title='Jazz Night',
                start_date=date(2026, 12, 12),
                tiers=[TierSpec('VIP', 1500, 0)],
            )

        assert self.store.events == {}
        assert self.uow.commits == 0

    @pytest.mark.asyncio
    async def test_list_events_by_start_date(self):
        later = self.store.add_event(tiers=[TierSpec('GA', 100, 1)], title='Later')
        self.store.events[later.id].start_date = date(2027, 1, 1)
        sooner = self.store.add_event(tiers=[TierSpec('GA', 100, 1)], title='Sooner')

        events = await ListEventsUseCase(event_query_repo=FakeEventQueryRepo(self.store)).list_events()

        assert [e.id for e in events] == [sooner.id, later.id]

    @pytest.mark.asyncio
    async def test_unknown_event(self):
        with pytest.raises(NotFoundError):
            await GetEventUseCase(event_query_repo=FakeEventQueryRepo(self.store)).get_by_id(
                event_id=uuid.uuid4()
            )
