#!/usr/bin/env python3
"""
Inventory Reconciliation Script
Rebuild an event's tier and event seat counters from seat-holding transactions

Usage:
    python script/reconcile_event.py <event_id>

Run it while no checkout for the event is in flight (e.g. after a crash).
"""

import asyncio
import sys
import uuid

from src.platform.config.di import container
from src.platform.database.orm_db_setting import dispose_engine
from src.service.marketplace.app.command.reconcile_event_inventory_use_case import (
    ReconcileEventInventoryUseCase,
)


async def main(event_id: uuid.UUID) -> None:
    use_case = ReconcileEventInventoryUseCase(
        uow=container.unit_of_work(), policy=container.lifecycle_policy()
    )
    try:
        report = await use_case.execute(event_id=event_id)
    finally:
        await dispose_engine()

    print(
        f'event {report.event_id}: available '
        f'{report.event_available_before} -> {report.event_available_after}'
    )
    for tier in report.tiers:
        marker = '*' if tier.drift else ' '
        print(f' {marker} tier {tier.tier_id}: {tier.available_before} -> {tier.available_after}')
    print('repaired' if report.repaired else 'no drift found')


if __name__ == '__main__':
    if len(sys.argv) != 2:
        print(__doc__)
        exit(2)
    asyncio.run(main(uuid.UUID(sys.argv[1])))
