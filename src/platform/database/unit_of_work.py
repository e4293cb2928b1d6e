"""
Unit of Work - one database transaction shared by the repositories it exposes

Architecture:
- Each ``async with uow`` opens a fresh session; leaving the block without
  ``commit()`` rolls everything back
- The same UoW object may be entered again afterwards for the next unit
- Repositories receive the shared session, so a ledger move, the aggregate
  adjustment and a status flip issued in one block commit or fail together
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.marketplace.app.interface.i_event_capacity_aggregate import (
        IEventCapacityAggregate,
    )
    from src.service.marketplace.app.interface.i_event_command_repo import IEventCommandRepo
    from src.service.marketplace.app.interface.i_event_query_repo import IEventQueryRepo
    from src.service.marketplace.app.interface.i_ticket_tier_ledger import ITicketTierLedger
    from src.service.marketplace.app.interface.i_transaction_command_repo import (
        ITransactionCommandRepo,
    )


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow:
            outcome = await uow.ticket_tier_ledger.reserve(tier_id=..., quantity=2)
            await uow.event_capacity_aggregate.adjust(event_id=..., delta=-2)
            await uow.commit()
    """

    transaction_command_repo: ITransactionCommandRepo
    ticket_tier_ledger: ITicketTierLedger
    event_capacity_aggregate: IEventCapacityAggregate
    event_command_repo: IEventCommandRepo
    event_query_repo: IEventQueryRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    async def commit(self):
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_maker: Callable[[], AsyncSession]):
        self._session_maker = session_maker
        self.session: AsyncSession | None = None

    async def __aenter__(self):
        from src.service.marketplace.driven_adapter.repo.event_capacity_aggregate_impl import (
            EventCapacityAggregateImpl,
        )
        from src.service.marketplace.driven_adapter.repo.event_command_repo_impl import (
            EventCommandRepoImpl,
        )
        from src.service.marketplace.driven_adapter.repo.event_query_repo_impl import (
            EventQueryRepoImpl,
        )
        from src.service.marketplace.driven_adapter.repo.ticket_tier_ledger_impl import (
            TicketTierLedgerImpl,
        )
        from src.service.marketplace.driven_adapter.repo.transaction_command_repo_impl import (
            TransactionCommandRepoImpl,
        )

        self.session = self._session_maker()

        self.transaction_command_repo = TransactionCommandRepoImpl(session=self.session)
        self.ticket_tier_ledger = TicketTierLedgerImpl(session=self.session)
        self.event_capacity_aggregate = EventCapacityAggregateImpl(session=self.session)
        self.event_command_repo = EventCommandRepoImpl(session=self.session)
        self.event_query_repo = EventQueryRepoImpl()
        self.event_query_repo.session = self.session  # Inject session for UoW mode

        return await super().__aenter__()

    async def __aexit__(self, *args):
        try:
            await super().__aexit__(*args)
        finally:
            if self.session is not None:
                await self.session.close()
            self.session = None

    async def _commit(self):
        assert self.session is not None, 'commit() outside of "async with uow"'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
