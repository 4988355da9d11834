"""Shared abstractions used across domain modules."""

from .exceptions import (
    ConfigurationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    InsufficientBalance,
    InvalidStateTransition,
    NotFoundError,
    StorageError,
    ValidationError,
)
from .clock import Clock, ensure_utc, utcnow
from .pagination import Page, PageRequest

__all__ = [
    "Clock",
    "ConfigurationError",
    "ConflictError",
    "DomainError",
    "ForbiddenError",
    "InsufficientBalance",
    "InvalidStateTransition",
    "NotFoundError",
    "Page",
    "PageRequest",
    "StorageError",
    "ValidationError",
    "ensure_utc",
    "utcnow",
]
