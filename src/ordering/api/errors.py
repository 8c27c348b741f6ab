"""Translate domain errors into HTTP responses.

Every error body has the same shape, ``{"errors": {field: [messages]}}``.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.exceptions import (
    CapacityExceeded,
    CartFull,
    InvalidCoupon,
    InvalidTransition,
    LoyaltyBalanceChanged,
    PaymentError,
)

logger = structlog.get_logger(__name__)

STATUS_BY_ERROR = {
    ValidationError: 400,
    InvalidCoupon: 400,
    CapacityExceeded: 409,
    CartFull: 409,
    LoyaltyBalanceChanged: 409,
    InvalidTransition: 409,
    PaymentError: 402,
    ObjectNotFoundError: 404,
}


def error_body(exc) -> dict:
    messages = getattr(exc, "messages", None)
    if not isinstance(messages, dict):
        messages = {"_entity": [str(messages or exc)]}
    return {"errors": messages}


def _handler_for(status_code):
    async def handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
        if status_code == 404:
            logger.info("Not found", path=request.url.path)
        elif status_code >= 402:
            logger.warning("Request rejected", path=request.url.path, error=type(exc).__name__)
        return JSONResponse(status_code=status_code, content=error_body(exc))

    return handle_domain_error


def register_exception_handlers(app: FastAPI) -> None:
    for error_class, status_code in STATUS_BY_ERROR.items():
        app.add_exception_handler(error_class, _handler_for(status_code))
