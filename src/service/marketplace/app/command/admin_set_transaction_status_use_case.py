from datetime import datetime, timezone
from typing import Optional, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    NotFoundError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.transaction_transitioner import TransactionTransitioner
from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionLifecyclePolicy,
    TransactionStatus,
)
from src.service.marketplace.domain.entity.user_entity import UserRole


class AdminSetTransactionStatusUseCase:
    """
    Admin decision on a transaction: done, rejected or canceled.

    Any other target (including expired, which only the sweeper sets) is an
    invalid transition.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, policy: TransactionLifecyclePolicy) -> None:
        self.uow = uow
        self.policy = policy
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
        self,
        *,
        transaction_id: uuid.UUID,
        target_status: str,
        caller_role: UserRole,
        now: Optional[datetime] = None,
    ) -> Transaction:
        if caller_role != UserRole.ADMIN:
            raise ForbiddenError('Only admins can change transaction status')

        try:
            target = TransactionStatus(target_status)
        except ValueError:
            raise ValidationError(
                f'Unknown transaction status: {target_status}',
                details=[{'field': 'status', 'allowed': [s.value for s in TransactionStatus]}],
            )

        trigger = self.policy.admin_trigger_for(target)
        if trigger is None:
            async with self.uow:
                current = await self.uow.transaction_command_repo.get_by_id(
                    transaction_id=transaction_id
                )
            if current is None:
                raise NotFoundError('Transaction not found')
            raise InvalidStateTransitionError(
                f'Admins cannot move a transaction to {target.value}',
                current_status=current.status.value,
            )

        transaction = await self.transitioner.apply(
            transaction_id=transaction_id,
            trigger=trigger,
            now=now or datetime.now(timezone.utc),
        )
        assert transaction is not None
        return transaction
