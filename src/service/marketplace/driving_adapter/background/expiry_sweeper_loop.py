from typing import Callable, Optional

import anyio
from anyio.abc import TaskGroup

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.sweep_expired_transactions_use_case import (
    SweepExpiredTransactionsUseCase,
)


class ExpirySweeperLoop:
    """Run the expiry sweep every ``interval`` seconds inside the app's task group"""

    def __init__(
        self,
        *,
        use_case_factory: Callable[[], SweepExpiredTransactionsUseCase],
        interval: float,
        max_ticks: Optional[int] = None,
    ) -> None:
        self.use_case_factory = use_case_factory
        self.interval = interval
        # Bounded runs are only used by tests
        self.max_ticks = max_ticks
        self.ticks = 0

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._run_loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(f'[SWEEPER] Started, interval={self.interval}s')

    async def tick(self) -> None:
        try:
            await self.use_case_factory().sweep()
        except Exception as e:
            # One bad tick (database down) must not stop later ticks
            Logger.base.error(f'[SWEEPER] Sweep tick failed: {e}')
        self.ticks += 1

    async def _run_loop(self) -> None:
        while self.max_ticks is None or self.ticks < self.max_ticks:
            await self.tick()
            await anyio.sleep(self.interval)
