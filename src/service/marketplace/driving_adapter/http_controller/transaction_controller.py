from datetime import timedelta
from typing import List, Optional
import uuid

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.marketplace.app.command.admin_set_transaction_status_use_case import (
    AdminSetTransactionStatusUseCase,
)
from src.service.marketplace.app.command.cancel_transaction_use_case import (
    CancelTransactionUseCase,
)
from src.service.marketplace.app.command.create_checkout_use_case import CreateCheckoutUseCase
from src.service.marketplace.app.command.submit_payment_proof_use_case import (
    SubmitPaymentProofUseCase,
)
from src.service.marketplace.app.command.sweep_expired_transactions_use_case import (
    SweepExpiredTransactionsUseCase,
)
from src.service.marketplace.app.query.get_transaction_use_case import GetTransactionUseCase
from src.service.marketplace.app.query.list_transactions_use_case import ListTransactionsUseCase
from src.service.marketplace.domain.entity.transaction_entity import Transaction
from src.service.marketplace.domain.entity.user_entity import AuthenticatedUser
from src.service.marketplace.domain.value_object.cart import CartLine
from src.service.marketplace.driving_adapter.http_controller.auth.role_auth import (
    get_current_user,
    require_admin,
)
from src.service.marketplace.driving_adapter.http_controller.schema.transaction_schema import (
    CheckoutRequest,
    ProofSubmitRequest,
    SweepResponse,
    TransactionDetailResponse,
    TransactionItemResponse,
    TransactionResponse,
    TransactionStatusUpdateRequest,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


def _payment_window() -> timedelta:
    return timedelta(minutes=settings.PAYMENT_DEADLINE_MINUTES)


def _to_transaction_response(transaction: Transaction) -> TransactionResponse:
    return TransactionResponse(
        id=transaction.id,
        event_id=transaction.event_id,
        user_id=transaction.user_id,
        status=transaction.status.value,
        voucher_code=transaction.voucher_code,
        subtotal_amount=transaction.subtotal_amount,
        discount_amount=transaction.discount_amount,
        paid_amount=transaction.paid_amount,
        proof_url=transaction.proof_url,
        created_at=transaction.created_at,
        updated_at=transaction.updated_at,
        payment_deadline=(
            transaction.payment_deadline(_payment_window()) if transaction.created_at else None
        ),
        items=[
            TransactionItemResponse(
                id=item.id,
                ticket_tier_id=item.ticket_tier_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
            )
            for item in transaction.items
        ],
    )


def _to_detail_response(detail: dict) -> TransactionDetailResponse:
    created_at = detail.get('created_at')
    return TransactionDetailResponse(
        **detail,
        payment_deadline=created_at + _payment_window() if created_at else None,
    )


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def create_checkout(
    request: CheckoutRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: CreateCheckoutUseCase = Depends(CreateCheckoutUseCase.depends),
) -> TransactionResponse:
    with tracer.start_as_current_span('controller.create_checkout') as span:
        span.set_attribute('event_id', str(request.event_id))
        span.set_attribute('user_id', str(current_user.id))

        transaction = await use_case.execute(
            event_id=request.event_id,
            user_id=current_user.id,
            lines=[
                CartLine(ticket_tier_id=item.ticket_tier_id, quantity=item.quantity)
                for item in request.items
            ],
            voucher_code=request.voucher_code,
        )
        return _to_transaction_response(transaction)


@router.get('', status_code=status.HTTP_200_OK)
@Logger.io
async def list_transactions(
    transaction_status: Optional[str] = None,
    all_users: bool = False,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: ListTransactionsUseCase = Depends(ListTransactionsUseCase.depends),
) -> List[TransactionDetailResponse]:
    """Own transactions; admins pass all_users=true for the confirmation queue."""
    details = await use_case.list_for(
        user=current_user, status=transaction_status, all_users=all_users
    )
    return [_to_detail_response(detail) for detail in details]


@router.post('/sweep', status_code=status.HTTP_200_OK)
@Logger.io
async def sweep_expired_transactions(
    current_user: AuthenticatedUser = Depends(require_admin),
    use_case: SweepExpiredTransactionsUseCase = Depends(SweepExpiredTransactionsUseCase.depends),
) -> SweepResponse:
    result = await use_case.sweep()
    return SweepResponse(
        expired_count=result.expired_count,
        released_seat_count=result.released_seat_count,
        failed_count=result.failed_count,
    )


@router.get('/{transaction_id}', status_code=status.HTTP_200_OK)
@Logger.io
async def get_transaction(
    transaction_id: uuid.UUID,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: GetTransactionUseCase = Depends(GetTransactionUseCase.depends),
) -> TransactionDetailResponse:
    detail = await use_case.get_detail(transaction_id=transaction_id, user=current_user)
    return _to_detail_response(detail)


@router.post('/{transaction_id}/proof', status_code=status.HTTP_200_OK)
@Logger.io
async def submit_payment_proof(
    transaction_id: uuid.UUID,
    request: ProofSubmitRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: SubmitPaymentProofUseCase = Depends(SubmitPaymentProofUseCase.depends),
) -> TransactionResponse:
    transaction = await use_case.execute(
        transaction_id=transaction_id,
        user_id=current_user.id,
        proof_url=request.proof_url,
    )
    return _to_transaction_response(transaction)


@router.patch('/{transaction_id}/status', status_code=status.HTTP_200_OK)
@Logger.io
async def admin_set_transaction_status(
    transaction_id: uuid.UUID,
    request: TransactionStatusUpdateRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: AdminSetTransactionStatusUseCase = Depends(
        AdminSetTransactionStatusUseCase.depends
    ),
) -> TransactionResponse:
    transaction = await use_case.execute(
        transaction_id=transaction_id,
        target_status=request.status,
        caller_role=current_user.role,
    )
    return _to_transaction_response(transaction)


@router.post('/{transaction_id}/cancel', status_code=status.HTTP_200_OK)
@Logger.io
async def cancel_transaction(
    transaction_id: uuid.UUID,
    current_user: AuthenticatedUser = Depends(get_current_user),
    use_case: CancelTransactionUseCase = Depends(CancelTransactionUseCase.depends),
) -> TransactionResponse:
    transaction = await use_case.execute(transaction_id=transaction_id, user_id=current_user.id)
    return _to_transaction_response(transaction)
