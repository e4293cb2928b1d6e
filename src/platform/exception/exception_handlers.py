from typing import Any, Callable, Coroutine

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.responses import Response

from src.platform.exception.exceptions import CustomBaseError, StorageFailureError
from src.platform.logging.loguru_io import Logger

# Type alias for exception handlers (compatible with Starlette's expected signature)
ExceptionHandler = Callable[[Request, Exception], Coroutine[Any, Any, Response]]

INTERNAL_ERROR_MESSAGE = 'Internal server error'


def _error_body(*, message: str, kind: str, details: Any = None) -> dict[str, Any]:
    return {'detail': message, 'kind': kind, 'details': details}


async def custom_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, CustomBaseError) else CustomBaseError(str(exc))
    if isinstance(error, StorageFailureError):
        Logger.base.critical(f'[STORAGE] {request.method} {request.url.path}: {error.message}')
        return JSONResponse(
            status_code=error.status_code,
            content=_error_body(message=INTERNAL_ERROR_MESSAGE, kind=error.kind),
        )
    return JSONResponse(
        status_code=error.status_code,
        content=_error_body(message=error.message, kind=error.kind, details=error.details),
    )


async def value_error_handler(request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(message=str(exc), kind='validation_error'),
    )


async def validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    error = exc if isinstance(exc, RequestValidationError) else RequestValidationError([])
    fields = [
        {'field': '.'.join(str(part) for part in err.get('loc', ())), 'message': err.get('msg')}
        for err in error.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(message='Invalid request', kind='validation_error', details=fields),
    )


async def storage_error_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.opt(exception=exc).critical(
        f'[STORAGE] {request.method} {request.url.path}: {type(exc).__name__}'
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(message=INTERNAL_ERROR_MESSAGE, kind='storage_failure'),
    )


async def general_500_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    Logger.base.opt(exception=exc).error(f'Unhandled error on {request.method} {request.url.path}')
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(message=INTERNAL_ERROR_MESSAGE, kind='internal_error'),
    )


# Exception handler mapping
EXCEPTION_HANDLERS: dict[type[Exception], ExceptionHandler] = {
    CustomBaseError: custom_error_handler,
    ValueError: value_error_handler,
    RequestValidationError: validation_error_handler,
    SQLAlchemyError: storage_error_handler,
    Exception: general_500_exception_handler,  # Catch-all for unhandled exceptions
}


def register_exception_handlers(app: FastAPI) -> None:
    for exception_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exception_class, handler)
