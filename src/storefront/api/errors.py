"""Map Storefront errors onto HTTP responses carrying a notification payload."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ValidationError

from storefront.exceptions import (
    CartEmpty,
    InsufficientStock,
    MalformedProduct,
    PaymentFailed,
    SubmissionInProgress,
    ValidationIncomplete,
)
from storefront.notifications import notification_for

logger = structlog.get_logger(__name__)

_STATUS_CODES = {
    InsufficientStock: 409,
    ValidationIncomplete: 422,
    CartEmpty: 422,
    MalformedProduct: 422,
    PaymentFailed: 402,
    SubmissionInProgress: 409,
}


def _body(exc: Exception, errors=None) -> dict:
    content = {"notification": notification_for(exc).to_dict()}
    if errors:
        content["errors"] = errors
    return content


async def _storefront_error(request: Request, exc: Exception) -> JSONResponse:
    status_code = _STATUS_CODES[type(exc)]
    logger.info(
        "Request rejected",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
    )
    return JSONResponse(status_code=status_code, content=_body(exc, getattr(exc, "messages", None)))


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Request failed validation", path=request.url.path, errors=exc.messages)
    return JSONResponse(status_code=422, content={"errors": exc.messages})


def install_error_handlers(app: FastAPI) -> None:
    for exc_class in _STATUS_CODES:
        app.add_exception_handler(exc_class, _storefront_error)
    app.add_exception_handler(ValidationError, _validation_error)
