import uuid

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.query.validate_promotion_use_case import ValidatePromotionUseCase
from src.service.marketplace.domain.entity.user_entity import AuthenticatedUser
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
)
from src.service.marketplace.driving_adapter.http_controller.schema.promotion_schema import (
    PromotionResponse,
)


router = APIRouter()


@router.get('/validate', status_code=status.HTTP_200_OK)
@Logger.io
async def validate_promotion(
    event_id: uuid.UUID,
    code: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: ValidatePromotionUseCase = Depends(ValidatePromotionUseCase.depends),
) -> PromotionResponse:
    promotion = await use_case.execute(event_id=event_id, code=code)
    return PromotionResponse(
        id=promotion.id,
        event_id=promotion.event_id,
        code=promotion.code,
        discount_type=promotion.discount_type.value,
        discount_value=promotion.discount_value,
        start_date=promotion.start_date,
        end_date=promotion.end_date,
        status=promotion.status.value,
    )
