"""Domain models for mobile-money requests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from moneybridge.modules.common.exceptions import ValidationError


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    FULFILLED = "FULFILLED"
    VERIFIED = "VERIFIED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @classmethod
    def parse(cls, value: "str | RequestStatus") -> "RequestStatus":
        if isinstance(value, RequestStatus):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown request status: {value}", status=str(value)) from exc


TERMINAL_STATUSES = frozenset({RequestStatus.VERIFIED, RequestStatus.CANCELLED, RequestStatus.EXPIRED})
# statuses in which fulfiller_id must be set
ASSIGNED_STATUSES = frozenset({RequestStatus.ACCEPTED, RequestStatus.FULFILLED, RequestStatus.VERIFIED})


class Provider(str, Enum):
    BKASH = "BKASH"
    NAGAD = "NAGAD"
    ROCKET = "ROCKET"

    @classmethod
    def parse(cls, value: "str | Provider | None") -> "Provider":
        if isinstance(value, Provider):
            return value
        try:
            return cls(str(value or "").strip().upper())
        except ValueError as exc:
            raise ValidationError(
                "Invalid provider",
                provider=value,
                supported=[provider.value for provider in cls],
            ) from exc


class VerificationDecision(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


@dataclass(slots=True)
class Party:
    """The slice of an account shown alongside a request."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(slots=True)
class FulfillmentEvidence:
    transaction_id: str
    sender_number: str
    screenshot: Optional[str] = None
    notes: Optional[str] = None

    def validate(self) -> "FulfillmentEvidence":
        transaction_id = (self.transaction_id or "").strip()
        sender_number = (self.sender_number or "").strip()
        if not transaction_id or not sender_number:
            raise ValidationError("Transaction ID and sender number are required")
        return FulfillmentEvidence(
            transaction_id=transaction_id,
            sender_number=sender_number,
            screenshot=self.screenshot,
            notes=self.notes,
        )


@dataclass(slots=True)
class MobileMoneyRequest:
    id: str
    requester_id: str
    provider: Provider
    amount_cents: int
    fees_cents: int
    total_amount_cents: int
    currency: str
    recipient_number: str
    reference: str
    status: RequestStatus
    created_at: datetime
    fulfiller_id: Optional[str] = None
    verified_by_id: Optional[str] = None
    description: Optional[str] = None
    transaction_id: Optional[str] = None
    sender_number: Optional[str] = None
    screenshot: Optional[str] = None
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    accepted_at: Optional[datetime] = None
    fulfilled_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    requester: Optional[Party] = None
    fulfiller: Optional[Party] = None
    verified_by: Optional[Party] = None


@dataclass(slots=True)
class RequestView:
    """A request as a particular actor is allowed to see it."""

    id: str
    requester_id: str
    provider: Provider
    amount_cents: int
    fees_cents: int
    total_amount_cents: int
    currency: str
    recipient_number: str
    reference: str
    status: RequestStatus
    created_at: datetime
    viewer_relation: str
    masked: bool
    fulfiller_id: Optional[str] = None
    verified_by_id: Optional[str] = None
    description: Optional[str] = None
    transaction_id: Optional[str] = None
    sender_number: Optional[str] = None
    screenshot: Optional[str] = None
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    accepted_at: Optional[datetime] = None
    fulfilled_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    requester: Optional[Party] = None
    fulfiller: Optional[Party] = None
    verified_by: Optional[Party] = None


@dataclass(slots=True, frozen=True)
class RequestFilters:
    status: Optional[RequestStatus] = None
    provider: Optional[Provider] = None
    requester_id: Optional[str] = None


@dataclass(slots=True)
class DashboardStats:
    total_requests: int = 0
    pending_requests: int = 0
    completed_requests: int = 0
    completed_amount_cents: int = 0
    this_month_amount_cents: int = 0
    by_status: dict[str, int] = field(default_factory=dict)
    recent: list[RequestView] = field(default_factory=list)
