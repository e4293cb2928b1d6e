from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple
import uuid

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_transaction_command_repo import (
    ITransactionCommandRepo,
)
from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionStatus,
)
from src.service.marketplace.driven_adapter.model.transaction_model import (
    TransactionItemModel,
    TransactionModel,
)
from src.service.marketplace.driven_adapter.repo.model_mapper import to_transaction_entity


class TransactionCommandRepoImpl(ITransactionCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, transaction: Transaction) -> Transaction:
        self.session.add(
            TransactionModel(
                id=transaction.id,
                event_id=transaction.event_id,
                user_id=transaction.user_id,
                status=transaction.status.value,
                voucher_code=transaction.voucher_code,
                subtotal_amount=transaction.subtotal_amount,
                discount_amount=transaction.discount_amount,
                paid_amount=transaction.paid_amount,
                proof_url=transaction.proof_url,
                created_at=transaction.created_at,
                updated_at=transaction.updated_at,
            )
        )
        # Parent row first; items reference it
        await self.session.flush()
        self.session.add_all(
            [
                TransactionItemModel(
                    id=item.id,
                    transaction_id=transaction.id,
                    ticket_tier_id=item.ticket_tier_id,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    created_at=item.created_at,
                )
                for item in transaction.items
            ]
        )
        await self.session.flush()
        return transaction

    @Logger.io
    async def delete(self, *, transaction_id: uuid.UUID) -> None:
        await self.session.execute(
            delete(TransactionItemModel).where(TransactionItemModel.transaction_id == transaction_id)
        )
        await self.session.execute(
            delete(TransactionModel).where(TransactionModel.id == transaction_id)
        )

    @Logger.io
    async def get_by_id(self, *, transaction_id: uuid.UUID) -> Optional[Transaction]:
        db_transaction = await self.session.scalar(
            select(TransactionModel)
            .where(TransactionModel.id == transaction_id)
            .execution_options(populate_existing=True)
        )
        if db_transaction is None:
            return None
        items = (
            await self.session.scalars(
                select(TransactionItemModel)
                .where(TransactionItemModel.transaction_id == transaction_id)
                .order_by(TransactionItemModel.id)
            )
        ).all()
        return to_transaction_entity(db_transaction, items=list(items))

    @Logger.io
    async def compare_and_set_status(
        self,
        *,
        transaction_id: uuid.UUID,
        expected: Iterable[TransactionStatus],
        target: TransactionStatus,
        now: datetime,
        proof_url: Optional[str] = None,
    ) -> Optional[Transaction]:
        values: dict[str, Any] = {'status': target.value, 'updated_at': now}
        if proof_url is not None:
            values['proof_url'] = proof_url
        result = await self.session.execute(
            update(TransactionModel)
            .where(
                TransactionModel.id == transaction_id,
                TransactionModel.status.in_([s.value for s in expected]),
            )
            .values(**values)
            .returning(TransactionModel)
            .execution_options(synchronize_session=False, populate_existing=True)
        )
        db_transaction = result.scalar_one_or_none()
        if db_transaction is None:
            return None
        return to_transaction_entity(db_transaction)

    @Logger.io
    async def list_expirable_keys(
        self,
        *,
        statuses: Iterable[TransactionStatus],
        created_before: datetime,
        limit: int,
        after: Optional[Tuple[datetime, uuid.UUID]] = None,
    ) -> List[Tuple[datetime, uuid.UUID]]:
        stmt = select(TransactionModel.created_at, TransactionModel.id).where(
            TransactionModel.status.in_([s.value for s in statuses]),
            TransactionModel.created_at < created_before,
        )
        if after is not None:
            after_created_at, after_id = after
            stmt = stmt.where(
                or_(
                    TransactionModel.created_at > after_created_at,
                    and_(
                        TransactionModel.created_at == after_created_at,
                        TransactionModel.id > after_id,
                    ),
                )
            )
        result = await self.session.execute(
            stmt.order_by(TransactionModel.created_at, TransactionModel.id).limit(limit)
        )
        return [(row.created_at, row.id) for row in result.all()]

    @Logger.io
    async def held_quantities_by_tier(
        self, *, event_id: uuid.UUID, statuses: Iterable[TransactionStatus]
    ) -> dict[uuid.UUID, int]:
        result = await self.session.execute(
            select(TransactionItemModel.ticket_tier_id, func.sum(TransactionItemModel.quantity))
            .join(TransactionModel, TransactionModel.id == TransactionItemModel.transaction_id)
            .where(
                TransactionModel.event_id == event_id,
                TransactionModel.status.in_([s.value for s in statuses]),
            )
            .group_by(TransactionItemModel.ticket_tier_id)
        )
        return {tier_id: int(quantity) for tier_id, quantity in result.all()}
