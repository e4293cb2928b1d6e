import uuid

from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork


async def read_counters(uow: SqlAlchemyUnitOfWork, event_id: uuid.UUID) -> dict:
    async with uow:
        event = await uow.event_query_repo.get_by_id(event_id=event_id)
    assert event is not None
    counters = {tier.name: tier.available_seats for tier in event.tiers}
    counters['event'] = event.available_seats
    return counters
