from datetime import datetime, timezone
import time
from typing import List, Optional, Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    CustomBaseError,
    InsufficientStockError,
    NotFoundError,
    StorageFailureError,
    UnknownTierError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.marketplace_metrics import metrics
from src.platform.types.uuid7 import new_uuid7
from src.service.marketplace.app.interface.i_promotion_query_repo import IPromotionQueryRepo
from src.service.marketplace.app.query.validate_promotion_use_case import find_active_promotion
from src.service.marketplace.domain.entity.promotion_entity import normalize_voucher_code
from src.service.marketplace.domain.entity.transaction_entity import Transaction
from src.service.marketplace.domain.value_object.cart import (
    CartLine,
    ReservationOutcome,
    aggregate_cart,
)


class CreateCheckoutUseCase:
    """
    Turn a cart into an awaiting_payment transaction holding its seats.

    Phases:
    1. Validate and price the cart against a snapshot (nothing written yet)
    2. Insert the transaction with all its items in one unit of work
    3. Reserve tier by tier (ascending tier id), each reservation committed
       together with its event aggregate adjustment
    4. On the first refusal, compensate: release what phase 3 granted and
       delete the items and the transaction in one unit of work

    A crash between phase 2 and the end of phase 3 leaves a partially reserved
    transaction behind; ReconcileEventInventoryUseCase repairs the counters.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        promotion_query_repo: IPromotionQueryRepo,
    ) -> None:
        self.uow = uow
        self.promotion_query_repo = promotion_query_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        promotion_query_repo: IPromotionQueryRepo = Depends(
            Provide[Container.promotion_query_repo]
        ),
    ) -> Self:
        return cls(uow=uow, promotion_query_repo=promotion_query_repo)

    @Logger.io
    async def execute(
        self,
        *,
        event_id: uuid.UUID,
        user_id: uuid.UUID,
        lines: List[CartLine],
        voucher_code: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Transaction:
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.create_checkout',
            attributes={'event.id': str(event_id), 'user.id': str(user_id)},
        ) as span:
            try:
                transaction = await self._checkout(
                    event_id=event_id,
                    user_id=user_id,
                    lines=lines,
                    voucher_code=voucher_code,
                    now=now or datetime.now(timezone.utc),
                )
            except CustomBaseError as e:
                metrics.record_checkout(result=e.kind, duration=time.perf_counter() - started)
                raise
            except Exception:
                metrics.record_checkout(result='error', duration=time.perf_counter() - started)
                raise

            span.set_attribute('transaction.id', str(transaction.id))
            metrics.record_checkout(result='created', duration=time.perf_counter() - started)
            return transaction

    async def _checkout(
        self,
        *,
        event_id: uuid.UUID,
        user_id: uuid.UUID,
        lines: List[CartLine],
        voucher_code: Optional[str],
        now: datetime,
    ) -> Transaction:
        quantities = aggregate_cart(lines)

        # Snapshot of event and tiers; validation only, nothing is written
        async with self.uow:
            event = await self.uow.event_query_repo.get_by_id(event_id=event_id)
        if event is None:
            raise NotFoundError('Event not found')

        tiers = event.tier_by_id()
        missing = [tier_id for tier_id in quantities if tier_id not in tiers]
        if missing:
            raise UnknownTierError(missing)

        shortfalls = [
            {
                'tier_id': str(tier_id),
                'requested': quantity,
                'available': tiers[tier_id].available_seats,
            }
            for tier_id, quantity in quantities.items()
            if tiers[tier_id].available_seats < quantity
        ]
        if shortfalls:
            raise InsufficientStockError(shortfalls)

        lines_priced = [
            (tier_id, quantity, tiers[tier_id].unit_price) for tier_id, quantity in quantities.items()
        ]
        subtotal = sum(quantity * price for _, quantity, price in lines_priced)

        discount = 0
        normalized_code = None
        if voucher_code and voucher_code.strip():
            promotion = await find_active_promotion(
                self.promotion_query_repo, event_id=event_id, code=voucher_code, now=now
            )
            discount = promotion.discount_for(subtotal)
            normalized_code = normalize_voucher_code(voucher_code)

        transaction = Transaction.create(
            id=new_uuid7(),
            event_id=event_id,
            user_id=user_id,
            lines=lines_priced,
            discount_amount=discount,
            voucher_code=normalized_code,
            now=now,
        )

        async with self.uow:
            await self.uow.transaction_command_repo.create(transaction=transaction)
            await self.uow.commit()
        Logger.base.info(
            f'[CHECKOUT] Created {transaction.id} for event {event_id}: '
            f'{transaction.total_quantity} seat(s), paid_amount={transaction.paid_amount}'
        )

        granted: list[tuple[uuid.UUID, int]] = []
        refused: Optional[ReservationOutcome] = None
        try:
            for tier_id, quantity in sorted(quantities.items()):
                async with self.uow:
                    outcome = await self.uow.ticket_tier_ledger.reserve(
                        tier_id=tier_id, quantity=quantity
                    )
                    if not outcome.reserved:
                        refused = outcome
                        break
                    await self.uow.event_capacity_aggregate.adjust(
                        event_id=event_id, delta=-quantity
                    )
                    await self.uow.commit()
                granted.append((tier_id, quantity))
                metrics.record_seat_move(operation='reserve', seats=quantity)
        except Exception:
            Logger.base.exception(f'[CHECKOUT] Reservation failed for {transaction.id}')
            await self._compensate(transaction=transaction, granted=granted)
            raise

        if refused is not None:
            metrics.reservation_refusals.inc()
            Logger.base.info(
                f'[CHECKOUT] Tier {refused.tier_id} refused {refused.requested} seat(s) '
                f'({refused.available} left), rolling back {transaction.id}'
            )
            await self._compensate(transaction=transaction, granted=granted)
            raise InsufficientStockError([refused.as_shortfall()])

        return transaction

    async def _compensate(
        self, *, transaction: Transaction, granted: list[tuple[uuid.UUID, int]]
    ) -> None:
        try:
            async with self.uow:
                for tier_id, quantity in granted:
                    await self.uow.ticket_tier_ledger.release(tier_id=tier_id, quantity=quantity)
                    await self.uow.event_capacity_aggregate.adjust(
                        event_id=transaction.event_id, delta=quantity
                    )
                await self.uow.transaction_command_repo.delete(transaction_id=transaction.id)
                await self.uow.commit()
        except Exception as e:
            Logger.base.critical(
                f'[CHECKOUT] Compensation failed for {transaction.id}; '
                f'granted={[(str(t), q) for t, q in granted]} needs manual reconciliation: {e}'
            )
            raise StorageFailureError(
                f'Checkout compensation failed for transaction {transaction.id}'
            ) from e
        metrics.checkout_compensations.inc()
        for _, quantity in granted:
            metrics.record_seat_move(operation='release', seats=quantity)
