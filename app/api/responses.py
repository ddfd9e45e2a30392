"""
HTTP boundary for service results.

Every endpoint hands its ``Result`` to ``render``; failure kinds are mapped to
status codes here and nowhere else:

- ValidationFailure -> 400 ``ValidationApiResponse``
- InvalidToken      -> 401 ``ErrorApiResponse``
- Unauthorized      -> 403 ``ErrorApiResponse``
- NotFound          -> 404 ``ErrorApiResponse``
- anything raised   -> 500 ``ErrorApiResponse`` (reported to Sentry)
"""

from typing import Any, Callable, Optional

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.logging import capture_error
from app.core.results import Failure, InvalidToken, NotFound, Ok, Result, Unauthorized, ValidationFailure
from app.helpers.getters import isProductionMode
from app.logging import get_logger
from app.schemas.common import ErrorApiResponse, ValidationApiResponse
from app.schemas.messages import describe_error

logger = get_logger("api")

GENERIC_ERROR_MESSAGE = "An internal server error occurred."

_STATUS_BY_FAILURE = {
    ValidationFailure: status.HTTP_400_BAD_REQUEST,
    InvalidToken: status.HTTP_401_UNAUTHORIZED,
    Unauthorized: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
}


class ResultFailure(Exception):
    """Raised from dependencies that can only fail (e.g. bearer-token resolution)."""

    def __init__(self, failure: Failure):
        super().__init__(getattr(failure, "message", str(failure)))
        self.failure = failure


def failure_response(failure: Failure) -> JSONResponse:
    status_code = _STATUS_BY_FAILURE[type(failure)]
    if isinstance(failure, ValidationFailure):
        body = ValidationApiResponse(errors=list(failure.errors))
    else:
        body = ErrorApiResponse(message=failure.message)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(failure, InvalidToken) else None
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def render(
    result: Result,
    status_code: int = status.HTTP_200_OK,
    serializer: Optional[Callable[[Any], Any]] = None,
) -> Response:
    """
    Turn a service result into an HTTP response.

    ``serializer`` converts the ``Ok`` payload (ORM rows into schemas, for
    instance) before encoding. A 204 status produces an empty body.
    """
    if not isinstance(result, Ok):
        return failure_response(result)

    if status_code == status.HTTP_204_NO_CONTENT:
        return Response(status_code=status_code)

    value = serializer(result.value) if serializer else result.value
    return JSONResponse(status_code=status_code, content=jsonable_encoder(value, by_alias=True))


# ==================== Exception handlers ====================

async def result_failure_handler(request: Request, exc: ResultFailure) -> JSONResponse:
    logger.warning("Request rejected", path=request.url.path, reason=type(exc.failure).__name__)
    return failure_response(exc.failure)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        errors.extend(describe_error(error))

    logger.warning("Malformed request", path=request.url.path, errors=len(errors))
    return failure_response(ValidationFailure(errors))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error_type=type(exc).__name__,
    )
    capture_error(
        exc,
        context={"request": {"path": request.url.path, "method": request.method}},
        tags={"error_type": type(exc).__name__},
    )

    message = GENERIC_ERROR_MESSAGE if isProductionMode() else str(exc) or GENERIC_ERROR_MESSAGE
    body = ErrorApiResponse(message=message)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ResultFailure, result_failure_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
