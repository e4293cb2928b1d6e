from datetime import datetime
from typing import Callable, Optional
import uuid

from opentelemetry import trace

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    InsufficientStockError,
    InvalidStateTransitionError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.service.marketplace.domain.entity.transaction_entity import (
    Transaction,
    TransactionLifecyclePolicy,
    TransactionTrigger,
)


class TransactionTransitioner:
    """
    Applies one state-machine trigger as a single unit of work.

    Flow per attempt:
    1. Read the transaction and run the caller's guard (ownership, deadline)
    2. Check the trigger is legal from the observed status
    3. Compare-and-set the status against exactly the observed value
    4. Winner only: release or re-acquire the items' seats through the ledger
       and the event aggregate, then commit everything together

    A lost compare-and-set rolls back and re-reads; the loser never touches seats.
    """

    MAX_ATTEMPTS = 3

    def __init__(self, *, uow: AbstractUnitOfWork, policy: TransactionLifecyclePolicy) -> None:
        self.uow = uow
        self.policy = policy
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def apply(
        self,
        *,
        transaction_id: uuid.UUID,
        trigger: TransactionTrigger,
        now: datetime,
        proof_url: Optional[str] = None,
        guard: Optional[Callable[[Transaction], None]] = None,
        skip_if_illegal: bool = False,
    ) -> Optional[Transaction]:
        """
        Returns:
            The transaction in its new status, or None when ``skip_if_illegal``
            is set and the transaction is no longer in a legal source status.

        Raises:
            NotFoundError, InvalidStateTransitionError, InsufficientStockError,
            and whatever ``guard`` raises.
        """
        plan = self.policy.plan(trigger)
        with self.tracer.start_as_current_span(
            'use_case.transaction_transition',
            attributes={'transaction.id': str(transaction_id), 'trigger': trigger.value},
        ):
            last_status = None
            for _ in range(self.MAX_ATTEMPTS):
                async with self.uow:
                    transaction = await self.uow.transaction_command_repo.get_by_id(
                        transaction_id=transaction_id
                    )
                    if transaction is None:
                        raise NotFoundError('Transaction not found')
                    last_status = transaction.status

                    if guard is not None:
                        guard(transaction)

                    if not plan.allows(transaction.status):
                        if skip_if_illegal:
                            metrics.record_transition(trigger=trigger.value, result='lost_race')
                            return None
                        metrics.record_transition(trigger=trigger.value, result='rejected')
                        raise InvalidStateTransitionError(
                            f'Cannot {trigger.value.replace("_", " ")} a transaction '
                            f'in status {transaction.status.value}',
                            current_status=transaction.status.value,
                        )

                    updated = await self.uow.transaction_command_repo.compare_and_set_status(
                        transaction_id=transaction_id,
                        expected=[transaction.status],
                        target=plan.target,
                        now=now,
                        proof_url=proof_url,
                    )
                    if updated is None:
                        Logger.base.info(
                            f'[TRANSITION] {transaction_id} changed under {trigger.value}, re-reading'
                        )
                        continue

                    if plan.releases_seats:
                        await self._release_items(transaction)
                    if transaction.status in plan.reacquires_from:
                        await self._reacquire_items(transaction)

                    await self.uow.commit()

                metrics.record_transition(trigger=trigger.value, result='applied')
                Logger.base.info(
                    f'[TRANSITION] {transaction_id}: {transaction.status.value} -> '
                    f'{plan.target.value} ({trigger.value})'
                )
                updated.items = transaction.items
                return updated

            if skip_if_illegal:
                return None
            raise InvalidStateTransitionError(
                'Transaction is being modified concurrently, try again',
                current_status=last_status.value if last_status else 'unknown',
            )

    async def _release_items(self, transaction: Transaction) -> None:
        for tier_id, quantity in sorted(transaction.quantities_by_tier().items()):
            await self.uow.ticket_tier_ledger.release(tier_id=tier_id, quantity=quantity)
            await self.uow.event_capacity_aggregate.adjust(
                event_id=transaction.event_id, delta=quantity
            )
            metrics.record_seat_move(operation='release', seats=quantity)

    async def _reacquire_items(self, transaction: Transaction) -> None:
        shortfalls = []
        for tier_id, quantity in sorted(transaction.quantities_by_tier().items()):
            outcome = await self.uow.ticket_tier_ledger.reserve(tier_id=tier_id, quantity=quantity)
            if not outcome.reserved:
                shortfalls.append(outcome.as_shortfall())
                continue
            await self.uow.event_capacity_aggregate.adjust(
                event_id=transaction.event_id, delta=-quantity
            )
        if shortfalls:
            # Leaving the block without commit undoes the flip and any partial reserve
            metrics.reservation_refusals.inc(len(shortfalls))
            raise InsufficientStockError(shortfalls)
        metrics.record_seat_move(operation='reserve', seats=transaction.total_quantity)
