from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, Optional
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_promotion_query_repo import IPromotionQueryRepo
from src.service.marketplace.domain.entity.promotion_entity import (
    Promotion,
    normalize_voucher_code,
)
from src.service.marketplace.driven_adapter.model.promotion_model import PromotionModel
from src.service.marketplace.driven_adapter.repo.model_mapper import to_promotion_entity


class PromotionQueryRepoImpl(IPromotionQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    @Logger.io
    async def find_by_code(self, *, event_id: uuid.UUID, code: str) -> Optional[Promotion]:
        async with self._get_session() as session:
            db_promotion = await session.scalar(
                select(PromotionModel).where(
                    PromotionModel.event_id == event_id,
                    func.upper(PromotionModel.code) == normalize_voucher_code(code),
                )
            )
            return to_promotion_entity(db_promotion) if db_promotion else None
