from typing import List
import uuid

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.create_event_and_tiers_use_case import (
    CreateEventAndTiersUseCase,
)
from src.service.marketplace.app.command.reconcile_event_inventory_use_case import (
    ReconcileEventInventoryUseCase,
)
from src.service.marketplace.app.query.get_event_use_case import GetEventUseCase
from src.service.marketplace.app.query.list_events_use_case import ListEventsUseCase
from src.service.marketplace.domain.entity.event_entity import Event, TierSpec
from src.service.marketplace.domain.entity.user_entity import AuthenticatedUser
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    require_admin,
    require_organizer,
)
from src.service.marketplace.driving_adapter.http_controller.schema.event_schema import (
    EventCreateRequest,
    EventResponse,
    ReconciliationResponse,
    TicketTierResponse,
    TierDriftResponse,
)


router = APIRouter()


def _to_event_response(event: Event) -> EventResponse:
    return EventResponse(
        id=event.id,
        organizer_id=event.organizer_id,
        title=event.title,
        description=event.description,
        country=event.country,
        state=event.state,
        city=event.city,
        venue=event.venue,
        start_date=event.start_date,
        end_date=event.end_date,
        time_start=event.time_start,
        time_end=event.time_end,
        image_url=event.image_url,
        price=event.price,
        capacity=event.capacity,
        available_seats=event.available_seats,
        created_at=event.created_at,
        tiers=[
            TicketTierResponse(
                id=tier.id,
                name=tier.name,
                unit_price=tier.unit_price,
                total_seats=tier.total_seats,
                available_seats=tier.available_seats,
                status=tier.status.value,
            )
            for tier in event.tiers
        ],
    )


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_event(
    request: EventCreateRequest,
    current_user: AuthenticatedUser = Depends(require_organizer),
    use_case: CreateEventAndTiersUseCase = Depends(CreateEventAndTiersUseCase.depends),
) -> EventResponse:
    event = await use_case.create(
        organizer_id=current_user.id,
        title=request.title,
        start_date=request.start_date,
        tiers=[TierSpec(name=t.name, price=t.price, seats=t.seats) for t in request.tiers],
        price=request.price,
        description=request.description,
        country=request.country,
        state=request.state,
        city=request.city,
        venue=request.venue,
        end_date=request.end_date,
        time_start=request.time_start,
        time_end=request.time_end,
        image_url=request.image_url,
    )
    return _to_event_response(event)


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_events(
    use_case: ListEventsUseCase = Depends(ListEventsUseCase.depends),
) -> List[EventResponse]:
    events = await use_case.list_events()
    return [_to_event_response(event) for event in events]


@router.get('/{event_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_event(
    event_id: uuid.UUID,
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> EventResponse:
    event = await use_case.get_by_id(event_id=event_id)
    return _to_event_response(event)


@router.post('/{event_id}/reconcile', status_code=status.HTTP_200_OK)
@Logger.io
async def reconcile_event(
    event_id: uuid.UUID,
    current_user: AuthenticatedUser = Depends(require_admin),
    use_case: ReconcileEventInventoryUseCase = Depends(ReconcileEventInventoryUseCase.depends),
) -> ReconciliationResponse:
    report = await use_case.execute(event_id=event_id, caller_role=current_user.role)
    return ReconciliationResponse(
        event_id=report.event_id,
        event_available_before=report.event_available_before,
        event_available_after=report.event_available_after,
        repaired=report.repaired,
        tiers=[
            TierDriftResponse(
                tier_id=d.tier_id,
                available_before=d.available_before,
                available_after=d.available_after,
            )
            for d in report.tiers
        ],
    )
