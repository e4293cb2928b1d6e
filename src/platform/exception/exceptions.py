from typing import Any


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    kind: str = 'error'

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        *,
        kind: str | None = None,
        details: Any = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        if kind is not None:
            self.kind = kind
        self.details = details
        super().__init__(message)


class DomainError(CustomBaseError):
    kind = 'validation_error'

    def __init__(self, message: str, status_code: int = 400, *, details: Any = None) -> None:
        super().__init__(message, status_code, details=details)


class ValidationError(DomainError):
    """Malformed input: empty cart, non-positive quantity, bad proof url, unknown status."""


class ForbiddenError(CustomBaseError):
    kind = 'forbidden'

    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    kind = 'not_found'

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message, 404, details=details)


class ConflictError(CustomBaseError):
    kind = 'conflict'

    def __init__(self, message: str, *, details: Any = None) -> None:
        super().__init__(message, 409, details=details)


class AuthenticationError(CustomBaseError):
    kind = 'unauthorized'

    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class UnknownTierError(CustomBaseError):
    kind = 'unknown_tier'

    def __init__(self, missing_tier_ids: list[Any]) -> None:
        super().__init__(
            f'Ticket tiers not found for this event: {", ".join(str(i) for i in missing_tier_ids)}',
            400,
            details={'missing_tier_ids': [str(i) for i in missing_tier_ids]},
        )
        self.missing_tier_ids = missing_tier_ids


class InsufficientStockError(ConflictError):
    kind = 'insufficient_stock'

    def __init__(self, shortfalls: list[dict[str, Any]]) -> None:
        super().__init__('Insufficient seats for requested tickets', details=shortfalls)
        self.shortfalls = shortfalls


class InvalidStateTransitionError(ConflictError):
    kind = 'invalid_state_transition'

    def __init__(self, message: str, *, current_status: str) -> None:
        super().__init__(message, details={'current_status': current_status})
        self.current_status = current_status


class PromotionNotFoundError(NotFoundError):
    kind = 'promotion_not_found'


class PromotionExpiredError(DomainError):
    kind = 'promotion_expired'


class PromotionInactiveError(DomainError):
    kind = 'promotion_inactive'


class StorageFailureError(CustomBaseError):
    """Storage refused an invariant-preserving write; the message returned to clients is opaque."""

    kind = 'storage_failure'

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)


class CapacityDriftError(StorageFailureError):
    pass
