"""Error taxonomy shared by every domain module.

Each error carries a stable ``code`` and a ``details`` mapping with the ids and
amounts the HTTP layer needs to build a response without re-reading state.
"""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain errors."""

    code = "domain_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ValidationError(DomainError):
    """Malformed input. Not retried."""

    code = "validation_error"


class NotFoundError(DomainError):
    """The referenced entity does not exist."""

    code = "not_found"


class InsufficientBalance(DomainError):
    """The wallet cannot cover the debit."""

    code = "insufficient_balance"

    def __init__(self, *, account_id: str, required_cents: int, available_cents: int) -> None:
        super().__init__(
            "Insufficient wallet balance",
            account_id=account_id,
            required_cents=required_cents,
            available_cents=available_cents,
            shortfall_cents=required_cents - available_cents,
        )
        self.required_cents = required_cents
        self.available_cents = available_cents
        self.shortfall_cents = required_cents - available_cents


class ForbiddenError(DomainError):
    """The actor lacks the capability for the requested operation."""

    code = "forbidden"


class InvalidStateTransition(DomainError):
    """The entity is not in a state that allows the event."""

    code = "invalid_state_transition"


class ConflictError(InvalidStateTransition):
    """A guarded update lost against a concurrent writer. Re-fetch and retry."""

    code = "conflict"


class ConfigurationError(DomainError):
    """Required runtime configuration is missing."""

    code = "configuration_error"


class StorageError(DomainError):
    """The transactional store failed; nothing was persisted."""

    code = "storage_error"


__all__ = [
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "ForbiddenError",
    "InsufficientBalance",
    "InvalidStateTransition",
    "NotFoundError",
    "StorageError",
    "ValidationError",
]
