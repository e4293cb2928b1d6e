from datetime import datetime, timedelta, timezone
from typing import Optional, Self, Tuple
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.app.command.transaction_transitioner import TransactionTransitioner
from src.service.marketplace.domain.entity.transaction_entity import (
    TransactionLifecyclePolicy,
    TransactionTrigger,
)
from src.service.marketplace.domain.value_object.lifecycle_result import SweepResult


class SweepExpiredTransactionsUseCase:
    """
    Expire every seat-holding transaction whose payment deadline has passed.

    Rows are picked oldest first in batches paged by a (created_at, id) cursor,
    so rows that keep failing never hide later ones. Each one goes through the same
    compare-and-set transition as admin actions, so concurrent sweeps (or an
    admin deciding the same row) release its seats exactly once.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        policy: TransactionLifecyclePolicy,
        payment_deadline: Optional[timedelta] = None,
        batch_size: Optional[int] = None,
    ) -> None:
        self.uow = uow
        self.policy = policy
        self.transitioner = TransactionTransitioner(uow=uow, policy=policy)
        self.payment_deadline = payment_deadline or timedelta(
            minutes=settings.PAYMENT_DEADLINE_MINUTES
        )
        self.batch_size = batch_size or settings.SWEEP_BATCH_SIZE
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        policy: TransactionLifecyclePolicy = Depends(Provide[Container.lifecycle_policy]),
    ) -> Self:
        return cls(uow=uow, policy=policy)

    async def _next_batch(
        self, *, cutoff: datetime, after: Optional[Tuple[datetime, uuid.UUID]]
    ) -> list[Tuple[datetime, uuid.UUID]]:
        async with self.uow:
            return await self.uow.transaction_command_repo.list_expirable_keys(
                statuses=self.policy.expirable_statuses,
                created_before=cutoff,
                limit=self.batch_size,
                after=after,
            )

    @Logger.io
    async def sweep(self, *, now: Optional[datetime] = None) -> SweepResult:
        now = now or datetime.now(timezone.utc)
        cutoff = now - self.payment_deadline
        expired = released = failed = 0
        cursor: Optional[Tuple[datetime, uuid.UUID]] = None

        with self.tracer.start_as_current_span(
            'use_case.sweep_expired_transactions', attributes={'cutoff': cutoff.isoformat()}
        ) as span:
            while True:
                batch = await self._next_batch(cutoff=cutoff, after=cursor)
                if not batch:
                    break
                # Rows that fail stay behind the cursor until the next sweep
                cursor = batch[-1]

                for _, transaction_id in batch:
                    try:
                        transaction = await self.transitioner.apply(
                            transaction_id=transaction_id,
                            trigger=TransactionTrigger.DEADLINE_ELAPSED,
                            now=now,
                            skip_if_illegal=True,
                        )
                    except Exception as e:
                        failed += 1
                        Logger.base.error(f'[SWEEP] Failed to expire {transaction_id}: {e}')
                        continue
                    if transaction is None:
                        continue
                    expired += 1
                    released += transaction.total_quantity

            span.set_attribute('expired_count', expired)
            span.set_attribute('failed_count', failed)

        metrics.record_sweep(result='failed' if failed else 'ok', expired=expired)
        if expired or failed:
            Logger.base.info(
                f'[SWEEP] expired={expired} released_seats={released} failed={failed}'
            )
        return SweepResult(
            expired_count=expired, released_seat_count=released, failed_count=failed
        )
