#!/usr/bin/env python3
"""
Expiry Sweep Script
Expire transactions whose payment deadline has passed and release their seats

Meant for an external scheduler (cron, k8s CronJob) when the in-process
sweeper is disabled (SWEEPER_ENABLED=false). Safe to run concurrently with
the API and with other sweeps.

Exit code is 1 when any row failed to expire.
"""

import asyncio

from src.platform.config.di import container
from src.platform.database.orm_db_setting import dispose_engine
from src.service.marketplace.app.command.sweep_expired_transactions_use_case import (
    SweepExpiredTransactionsUseCase,
)


async def main() -> int:
    use_case = SweepExpiredTransactionsUseCase(
        uow=container.unit_of_work(), policy=container.lifecycle_policy()
    )
    try:
        result = await use_case.sweep()
    finally:
        await dispose_engine()

    print(
        f'expired={result.expired_count} '
        f'released_seats={result.released_seat_count} '
        f'failed={result.failed_count}'
    )
    return 1 if result.failed_count else 0


if __name__ == '__main__':
    exit(asyncio.run(main()))
