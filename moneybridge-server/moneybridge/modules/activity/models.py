"""Domain models for the activity (audit) log."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


class ActivityAction:
    MOBILE_MONEY_REQUEST_CREATED = "MOBILE_MONEY_REQUEST_CREATED"
    MOBILE_MONEY_REQUEST_ACCEPTED = "MOBILE_MONEY_REQUEST_ACCEPTED"
    MOBILE_MONEY_REQUEST_FULFILLED = "MOBILE_MONEY_REQUEST_FULFILLED"
    MOBILE_MONEY_REQUEST_VERIFIED = "MOBILE_MONEY_REQUEST_VERIFIED"
    MOBILE_MONEY_REQUEST_REJECTED = "MOBILE_MONEY_REQUEST_REJECTED"
    MOBILE_MONEY_REQUEST_CANCELLED = "MOBILE_MONEY_REQUEST_CANCELLED"
    MOBILE_MONEY_REQUEST_EXPIRED = "MOBILE_MONEY_REQUEST_EXPIRED"
    WALLET_BALANCE_ADJUSTED = "WALLET_BALANCE_ADJUSTED"
    ACCOUNT_STATUS_CHANGED = "ACCOUNT_STATUS_CHANGED"


@dataclass(slots=True)
class ActivityRecord:
    id: int
    account_id: Optional[str]
    action: str
    entity: Optional[str]
    entity_id: Optional[str]
    description: Optional[str]
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
