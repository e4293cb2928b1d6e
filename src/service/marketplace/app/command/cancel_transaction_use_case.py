from datetime import datetime, timezone
from typing import Optional, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import ForbiddenError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.transaction_transitioner import TransactionTransitioner
from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionLifecyclePolicy,
    TransactionTrigger,
)


class CancelTransactionUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork, policy: TransactionLifecyclePolicy) -> None:
        self.transitioner = TransactionTransitioner(uow=uow, policy=policy)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        policy: TransactionLifecyclePolicy = Depends(Provide[Container.lifecycle_policy]),
    ) -> Self:
        return cls(uow=uow, policy=policy)

    @Logger.io
    async def execute(
        self, *, transaction_id: uuid.UUID, user_id: uuid.UUID, now: Optional[datetime] = None
    ) -> Transaction:
        def guard(transaction: Transaction) -> None:
            if not transaction.is_owned_by(user_id):
                raise ForbiddenError('Only the buyer can cancel this transaction')

        transaction = await self.transitioner.apply(
            transaction_id=transaction_id,
            trigger=TransactionTrigger.OWNER_CANCEL,
            now=now or datetime.now(timezone.utc),
            guard=guard,
        )
        assert transaction is not None
        return transaction
