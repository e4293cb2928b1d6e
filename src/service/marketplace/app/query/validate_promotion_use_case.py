from datetime import datetime, timezone
from typing import Optional, Self
import uuid
from zoneinfo import ZoneInfo

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.exception.exceptions import PromotionNotFoundError, ValidationError
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.interface.i_promotion_query_repo import IPromotionQueryRepo
from src.service.marketplace.domain.entity.promotion_entity import (
    Promotion,
    normalize_voucher_code,
)


async def find_active_promotion(
    promotion_query_repo: IPromotionQueryRepo,
    *,
    event_id: uuid.UUID,
    code: str,
    now: Optional[datetime] = None,
    timezone_name: Optional[str] = None,
) -> Promotion:
    """
    Resolve a voucher code to a redeemable promotion of the event.

    Raises:
        ValidationError: blank code
        PromotionNotFoundError / PromotionInactiveError / PromotionExpiredError
    """
    normalized = normalize_voucher_code(code)
    if not normalized:
        raise ValidationError('Voucher code is empty', details=[{'field': 'voucher_code'}])

    promotion = await promotion_query_repo.find_by_code(event_id=event_id, code=normalized)
    if promotion is None:
        raise PromotionNotFoundError(f'Voucher {normalized} does not exist for this event')

    local_now = (now or datetime.now(timezone.utc)).astimezone(
        ZoneInfo(timezone_name or settings.PROMOTION_TIMEZONE)
    )
    promotion.ensure_redeemable(local_now=local_now)
    return promotion


class ValidatePromotionUseCase:
    def __init__(self, *, promotion_query_repo: IPromotionQueryRepo) -> None:
        self.promotion_query_repo = promotion_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        promotion_query_repo: IPromotionQueryRepo = Depends(
            Provide[Container.promotion_query_repo]
        ),
    ) -> Self:
        return cls(promotion_query_repo=promotion_query_repo)

    @Logger.io
    async def execute(
        self, *, event_id: uuid.UUID, code: str, now: Optional[datetime] = None
    ) -> Promotion:
        return await find_active_promotion(
            self.promotion_query_repo, event_id=event_id, code=code, now=now
        )
