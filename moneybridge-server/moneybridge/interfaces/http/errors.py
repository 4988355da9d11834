"""Map domain errors onto HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from moneybridge.modules.common.exceptions import (
    ConfigurationError,
    DomainError,
    ForbiddenError,
    InsufficientBalance,
    InvalidStateTransition,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# ConflictError is an InvalidStateTransition, so both land on 409
STATUS_CODES: tuple[tuple[type[DomainError], int], ...] = (
    (InsufficientBalance, 400),
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (InvalidStateTransition, 409),
    (StorageError, 503),
    (ConfigurationError, 500),
)


def status_for(exc: DomainError) -> int:
    for error_type, status_code in STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s %s", request.method, request.url.path, exc.code, exc.message)
    else:
        logger.info("%s %s -> %s %s", request.method, request.url.path, status_code, exc.code)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(exc.to_dict()))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)


__all__ = ["register_exception_handlers", "status_for"]
