"""Map the ordering error taxonomy onto HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from ordering.errors import (
    AccessDenied,
    InvalidTransition,
    NotFound,
    OutOfStock,
    TransactionFailure,
)

logger = structlog.get_logger(__name__)


def _body(exc, error: str, **extra) -> dict:
    messages = getattr(exc, "messages", None) or {"_error": [str(exc)]}
    return {"error": error, "message": str(exc), "messages": dict(messages), **extra}


async def _not_found(request: Request, exc: ObjectNotFoundError):
    return JSONResponse(status_code=404, content=_body(exc, "not_found"))


async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=_body(exc, "validation_error"))


async def _access_denied(request: Request, exc: AccessDenied):
    return JSONResponse(status_code=403, content=_body(exc, "access_denied"))


async def _out_of_stock(request: Request, exc: OutOfStock):
    return JSONResponse(
        status_code=409,
        content=_body(exc, "out_of_stock", lines=[shortfall.to_dict() for shortfall in exc.shortfalls]),
    )


async def _invalid_transition(request: Request, exc: InvalidTransition):
    return JSONResponse(
        status_code=409,
        content=_body(exc, "invalid_transition", current=exc.current, target=exc.target),
    )


async def _transaction_failure(request: Request, exc: TransactionFailure):
    logger.error("request_failed", path=request.url.path, operation=exc.operation)
    return JSONResponse(
        status_code=503,
        content={"error": "transaction_failure", "message": exc.message, "messages": {}},
    )


def register_error_handlers(app: FastAPI):
    """Register Protean's default handlers, then the ordering-specific ones on top."""
    register_exception_handlers(app)
    app.add_exception_handler(ObjectNotFoundError, _not_found)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(AccessDenied, _access_denied)
    app.add_exception_handler(OutOfStock, _out_of_stock)
    app.add_exception_handler(InvalidTransition, _invalid_transition)
    app.add_exception_handler(TransactionFailure, _transaction_failure)
