from datetime import datetime, timedelta, timezone
from typing import Optional, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    ForbiddenError,
    InvalidStateTransitionError,
    ValidationError,
)
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.transaction_transitioner import TransactionTransitioner
from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionLifecyclePolicy,
    TransactionTrigger,
)


class SubmitPaymentProofUseCase:
    """
    Attach the uploaded proof of payment and queue the transaction for admin review.

    awaiting_payment and rejected move to awaiting_confirmation; a second
    upload while awaiting_confirmation only replaces the url. Proof is refused
    once the payment deadline has passed, even if the sweeper has not run yet.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        policy: TransactionLifecyclePolicy,
        payment_deadline: Optional[timedelta] = None,
        proof_url_prefix: Optional[str] = None,
    ) -> None:
        self.transitioner = TransactionTransitioner(uow=uow, policy=policy)
        self.payment_deadline = payment_deadline or timedelta(
            minutes=settings.PAYMENT_DEADLINE_MINUTES
        )
        self.proof_url_prefix = (
            settings.PROOF_URL_PREFIX if proof_url_prefix is None else proof_url_prefix
        )

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        policy: TransactionLifecyclePolicy = Depends(Provide[Container.lifecycle_policy]),
    ) -> Self:
        return cls(uow=uow, policy=policy)

    def _validate_proof_url(self, proof_url: str) -> str:
        proof_url = (proof_url or '').strip()
        if not proof_url:
            raise ValidationError('proof_url is required', details=[{'field': 'proof_url'}])
        if self.proof_url_prefix and not proof_url.startswith(self.proof_url_prefix):
            raise ValidationError(
                'proof_url must point to the payment proof storage bucket',
                details=[{'field': 'proof_url'}],
            )
        return proof_url

    @Logger.io
    async def execute(
        self,
        *,
        transaction_id: uuid.UUID,
        user_id: uuid.UUID,
        proof_url: str,
        now: Optional[datetime] = None,
    ) -> Transaction:
        proof_url = self._validate_proof_url(proof_url)
        now = now or datetime.now(timezone.utc)

        def guard(transaction: Transaction) -> None:
            if not transaction.is_owned_by(user_id):
                raise ForbiddenError('Only the buyer can submit payment proof')
            if transaction.is_past_deadline(now=now, window=self.payment_deadline):
                raise InvalidStateTransitionError(
                    'Payment deadline has passed',
                    current_status=transaction.status.value,
                )

        transaction = await self.transitioner.apply(
            transaction_id=transaction_id,
            trigger=TransactionTrigger.SUBMIT_PROOF,
            now=now,
            proof_url=proof_url,
            guard=guard,
        )
        assert transaction is not None
        return transaction
