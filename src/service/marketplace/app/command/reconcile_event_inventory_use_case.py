from typing import Self
import uuid

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import ForbiddenError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.domain.entity.transaction_entity import TransactionLifecyclePolicy
from src.service.marketplace.domain.entity.user_entity import UserRole
from src.service.marketplace.domain.value_object.lifecycle_result import ReconciliationReport


class ReconcileEventInventoryUseCase:
    """
    Rebuild an event's seat counters from the transactions that hold seats.

    tier.available = tier.total - held(tier), then event.available = sum(tiers).
    Meant for quiet periods (after a crash mid-checkout); a checkout running at
    the same time can be counted in one counter and not the other.
    """

    def __init__(self, *, uow: AbstractUnitOfWork, policy: TransactionLifecyclePolicy) -> None:
        self.uow = uow
        self.policy = policy

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
        self, *, event_id: uuid.UUID, caller_role: UserRole = UserRole.ADMIN
    ) -> ReconciliationReport:
        if caller_role != UserRole.ADMIN:
            raise ForbiddenError('Only admins can reconcile inventory')

        async with self.uow:
            tiers = await self.uow.ticket_tier_ledger.get_tiers(event_id=event_id)
            if not tiers:
                raise NotFoundError('Event not found')
            held = await self.uow.transaction_command_repo.held_quantities_by_tier(
                event_id=event_id, statuses=self.policy.seat_holding_statuses
            )
            drifts = []
            for tier in sorted(tiers, key=lambda t: t.id):
                drifts.append(
                    await self.uow.ticket_tier_ledger.reset_from_holdings(
                        tier_id=tier.id, held_quantity=held.get(tier.id, 0)
                    )
                )
            before, after = await self.uow.event_capacity_aggregate.recompute(event_id=event_id)
            await self.uow.commit()

        report = ReconciliationReport(
            event_id=event_id,
            event_available_before=before,
            event_available_after=after,
            tiers=tuple(drifts),
        )
        if report.repaired:
            Logger.base.warning(
                f'[RECONCILE] Event {event_id} drift repaired: available {before} -> {after}; '
                + ', '.join(
                    f'{d.tier_id}: {d.available_before} -> {d.available_after}'
                    for d in drifts
                    if d.drift
                )
            )
        else:
            Logger.base.info(f'[RECONCILE] Event {event_id} counters consistent')
        return report
