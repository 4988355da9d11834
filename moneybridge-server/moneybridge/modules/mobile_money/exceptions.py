"""Mobile-money errors are the shared taxonomy; re-exported for convenience."""

from moneybridge.modules.common.exceptions import (
    ConfigurationError,
    ConflictError,
    ForbiddenError,
    InsufficientBalance,
    InvalidStateTransition,
    NotFoundError,
    StorageError,
    ValidationError,
)


class RequestNotFoundError(NotFoundError):
    code = "request_not_found"

    def __init__(self, request_id: str) -> None:
        super().__init__("Mobile money request not found", request_id=request_id)


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "ForbiddenError",
    "InsufficientBalance",
    "InvalidStateTransition",
    "RequestNotFoundError",
    "StorageError",
    "ValidationError",
]
