from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional, Sequence
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_transaction_query_repo import ITransactionQueryRepo
from src.service.marketplace.driven_adapter.model.event_model import EventModel, TicketTierModel
from src.service.marketplace.driven_adapter.model.transaction_model import (
    TransactionItemModel,
    TransactionModel,
)
from src.service.marketplace.driven_adapter.repo.model_mapper import as_utc


class TransactionQueryRepoImpl(ITransactionQueryRepo):
    def __init__(
        self, session_factory: Callable[..., AsyncContextManager[AsyncSession]] | None = None
    ):
        self.session_factory = session_factory
        self.session: AsyncSession | None = None

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        if self.session is not None:
            yield self.session
        elif self.session_factory is not None:
            async with self.session_factory() as session:
                yield session
        else:
            raise RuntimeError('No session or session_factory available')

    @staticmethod
    def _to_detail_dict(
        db_transaction: TransactionModel,
        event_title: str,
        item_rows: Sequence[tuple[TransactionItemModel, str]],
    ) -> dict:
        return {
            'id': db_transaction.id,
            'event_id': db_transaction.event_id,
            'event_title': event_title,
            'user_id': db_transaction.user_id,
            'status': db_transaction.status,
            'voucher_code': db_transaction.voucher_code,
            'subtotal_amount': db_transaction.subtotal_amount,
            'discount_amount': db_transaction.discount_amount,
            'paid_amount': db_transaction.paid_amount,
            'proof_url': db_transaction.proof_url,
            'created_at': as_utc(db_transaction.created_at),
            'updated_at': as_utc(db_transaction.updated_at),
            'items': [
                {
                    'id': item.id,
                    'ticket_tier_id': item.ticket_tier_id,
                    'tier_name': tier_name,
                    'quantity': item.quantity,
                    'unit_price': item.unit_price,
                }
                for item, tier_name in item_rows
            ],
        }

    async def _load_items(
        self, session: AsyncSession, transaction_ids: list[uuid.UUID]
    ) -> dict[uuid.UUID, list[tuple[TransactionItemModel, str]]]:
        grouped: dict[uuid.UUID, list[tuple[TransactionItemModel, str]]] = {
            tid: [] for tid in transaction_ids
        }
        if not transaction_ids:
            return grouped
        result = await session.execute(
            select(TransactionItemModel, TicketTierModel.name)
            .join(TicketTierModel, TicketTierModel.id == TransactionItemModel.ticket_tier_id)
            .where(TransactionItemModel.transaction_id.in_(transaction_ids))
            .order_by(TransactionItemModel.id)
        )
        for item, tier_name in result.all():
            grouped[item.transaction_id].append((item, tier_name))
        return grouped

    @Logger.io
    async def get_detail(self, *, transaction_id: uuid.UUID) -> Optional[dict]:
        async with self._get_session() as session:
            row = (
                await session.execute(
                    select(TransactionModel, EventModel.title)
                    .join(EventModel, EventModel.id == TransactionModel.event_id)
                    .where(TransactionModel.id == transaction_id)
                )
            ).first()
            if row is None:
                return None
            db_transaction, event_title = row
            items = await self._load_items(session, [db_transaction.id])
            return self._to_detail_dict(db_transaction, event_title, items[db_transaction.id])

    @Logger.io
    async def list_details(
        self, *, user_id: Optional[uuid.UUID] = None, status: Optional[str] = None
    ) -> List[dict]:
        async with self._get_session() as session:
            query = select(TransactionModel, EventModel.title).join(
                EventModel, EventModel.id == TransactionModel.event_id
            )
            if user_id is not None:
                query = query.where(TransactionModel.user_id == user_id)
            if status:
                query = query.where(TransactionModel.status == status)
            rows = (
                await session.execute(
                    query.order_by(TransactionModel.created_at.desc(), TransactionModel.id.desc())
                )
            ).all()
            items = await self._load_items(session, [t.id for t, _ in rows])
            return [self._to_detail_dict(t, title, items[t.id]) for t, title in rows]
