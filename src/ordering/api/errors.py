"""Exception handlers that turn checkout errors into JSON responses.

Every failure body has the same shape::

    {"success": false, "message": "...", "redirect_to": null}

``redirect_to`` is only set for state conflicts the buyer can fix on another
screen (empty cart, missing address, missing payment method).
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from ordering.errors import (
    NotFoundError,
    PaymentGatewayError,
    StateConflictError,
    TransactionFailedError,
)

logger = structlog.get_logger(__name__)

GENERIC_PAYMENT_FAILURE = "Payment could not be processed"


def failure(status_code: int, message: str, redirect_to: str | None = None, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "redirect_to": redirect_to, **extra},
    )


def _validation_message(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for field, errors in messages.items():
            errors = errors if isinstance(errors, list) else [errors]
            parts.append(f"{field}: {', '.join(str(e) for e in errors)}")
        return "; ".join(parts)
    return str(messages)


async def _on_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return failure(400, _validation_message(exc.messages), errors=exc.messages)


async def _on_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = {".".join(str(p) for p in error["loc"]): [error["msg"]] for error in exc.errors()}
    return failure(400, _validation_message(messages), errors=messages)


async def _on_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return failure(404, exc.reason)


async def _on_object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return failure(404, "Not found")


async def _on_state_conflict(request: Request, exc: StateConflictError) -> JSONResponse:
    return failure(409, exc.reason, redirect_to=exc.remediation)


async def _on_gateway_error(request: Request, exc: PaymentGatewayError) -> JSONResponse:
    logger.error("Payment gateway failure", path=request.url.path, provider_detail=exc.detail, **exc.context)
    return failure(502, GENERIC_PAYMENT_FAILURE)


async def _on_transaction_failed(request: Request, exc: TransactionFailedError) -> JSONResponse:
    return failure(500, exc.reason)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _on_validation_error)
    app.add_exception_handler(RequestValidationError, _on_request_validation_error)
    app.add_exception_handler(NotFoundError, _on_not_found)
    app.add_exception_handler(ObjectNotFoundError, _on_object_not_found)
    app.add_exception_handler(StateConflictError, _on_state_conflict)
    app.add_exception_handler(PaymentGatewayError, _on_gateway_error)
    app.add_exception_handler(TransactionFailedError, _on_transaction_failed)
