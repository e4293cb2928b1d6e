"""
Production FastAPI Application

HTTP API plus the in-process expiry sweeper.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.database.orm_db_setting import create_db_and_tables, dispose_engine, get_engine
from src.platform.logging.loguru_io import Logger
from src.platform.observability.tracing import TracingConfig
from src.service.marketplace.app.command.sweep_expired_transactions_use_case import (
    SweepExpiredTransactionsUseCase,
)
from src.service.marketplace.driven_adapter import model  # noqa: F401  (registers tables)
from src.service.marketplace.driving_adapter.background.expiry_sweeper_loop import (
    ExpirySweeperLoop,
)


def build_sweep_use_case() -> SweepExpiredTransactionsUseCase:
    return SweepExpiredTransactionsUseCase(
        uow=container.unit_of_work(), policy=container.lifecycle_policy()
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifespan: startup and shutdown."""
    Logger.base.info('[Marketplace] Starting up...')

    tracing = TracingConfig(service_name='marketplace')
    tracing.setup()

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('[Marketplace] Dependency injection wired')

    tracing.instrument_sqlalchemy(engine=get_engine())
    if settings.AUTO_CREATE_TABLES:
        await create_db_and_tables()

    async with anyio.create_task_group() as tg:
        if settings.SWEEPER_ENABLED:
            sweeper = ExpirySweeperLoop(
                use_case_factory=build_sweep_use_case,
                interval=settings.SWEEP_INTERVAL_SECONDS,
            )
            await sweeper.start(task_group=tg)

        Logger.base.info('[Marketplace] Ready to serve requests')
        yield

        Logger.base.info('[Marketplace] Shutting down...')
        tg.cancel_scope.cancel()

    await dispose_engine()
    tracing.shutdown()
    container.unwire()
    cleanup()
    Logger.base.info('[Marketplace] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
