"""Pydantic schemas used across the project."""
from datetime import datetime
from decimal import Decimal
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from moneybridge.modules.mobile_money.models import Provider, RequestStatus


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=100)


class TokenData(BaseModel):
    account_id: str
    username: str
    role: str


class AccountLoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: str
    username: str
    role: str
    is_admin: bool = False


class AccountResponse(BaseModel):
    id: str
    username: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AccountListResponse(BaseModel):
    items: list[AccountResponse]
    total: int
    page: int
    limit: int
    pages: int


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] = Field(default_factory=dict)


class PartyResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MobileMoneyRequestCreate(BaseModel):
    amount_cents: int = Field(..., description="Payout amount in cents")
    provider: str = Field(..., description="BKASH, NAGAD or ROCKET")
    recipient_number: str = Field(..., max_length=32)
    description: Optional[str] = Field(default=None, max_length=255)


class FulfillmentRequest(BaseModel):
    transaction_id: str = Field(..., max_length=100)
    sender_number: str = Field(..., max_length=32)
    screenshot: Optional[str] = None
    notes: Optional[str] = None


class VerificationRequest(BaseModel):
    decision: Literal["approve", "reject"] = "approve"
    reason: Optional[str] = Field(default=None, max_length=255)


class MobileMoneyRequestResponse(BaseModel):
    id: str
    requester_id: str
    fulfiller_id: Optional[str] = None
    verified_by_id: Optional[str] = None
    provider: Provider
    amount_cents: int
    fees_cents: int
    total_amount_cents: int
    currency: str
    recipient_number: str
    description: Optional[str] = None
    reference: str
    status: RequestStatus
    transaction_id: Optional[str] = None
    sender_number: Optional[str] = None
    screenshot: Optional[str] = None
    notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    accepted_at: Optional[datetime] = None
    fulfilled_at: Optional[datetime] = None
    verified_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    requester: Optional[PartyResponse] = None
    fulfiller: Optional[PartyResponse] = None
    verified_by: Optional[PartyResponse] = None
    viewer_relation: Optional[str] = None
    masked: bool = False

    model_config = ConfigDict(from_attributes=True)


class MobileMoneyRequestListResponse(BaseModel):
    items: list[MobileMoneyRequestResponse]
    total: int
    page: int
    limit: int
    pages: int


class MobileMoneyDashboardResponse(BaseModel):
    total_requests: int
    pending_requests: int
    completed_requests: int
    completed_amount_cents: int
    this_month_amount_cents: int
    by_status: dict[str, int] = Field(default_factory=dict)
    recent: list[MobileMoneyRequestResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ExpireResponse(BaseModel):
    expired: int
    request_ids: list[str] = Field(default_factory=list)


class WalletSnapshotResponse(BaseModel):
    account_id: str
    balance_cents: int
    currency: str
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionResponse(BaseModel):
    id: int
    type: str
    amount_cents: int
    currency: str
    reference: Optional[str] = None
    description: Optional[str] = None
    balance_before_cents: int
    balance_after_cents: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WalletTransactionListResponse(BaseModel):
    transactions: list[WalletTransactionResponse]
    total: int
    page: int
    limit: int


class BalanceAdjustmentRequest(BaseModel):
    delta_cents: int = Field(..., description="Positive to credit, negative to debit")
    note: Optional[str] = Field(default=None, max_length=255)


class LedgerCheckResponse(BaseModel):
    account_id: str
    entries: int
    balance_cents: int
    replayed_balance_cents: Optional[int] = None
    consistent: bool
    first_broken_entry_id: Optional[int] = None
    expected_before_cents: Optional[int] = None
    found_before_cents: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class FeeSettingsResponse(BaseModel):
    mobile_money_fee_percent: Decimal
    minimum_fee_cents: int
    maximum_fee_cents: int
    transfer_fee_percent: Decimal
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FeeSettingsUpdate(BaseModel):
    mobile_money_fee_percent: Decimal = Field(..., ge=0, le=100)
    minimum_fee_cents: int = Field(default=0, ge=0)
    maximum_fee_cents: int = Field(default=0, ge=0)
    transfer_fee_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)


class FeeQuoteResponse(BaseModel):
    amount_cents: int
    fee_cents: int
    total_cents: int

    model_config = ConfigDict(from_attributes=True)


class ActivityLogResponse(BaseModel):
    id: int
    account_id: Optional[str] = None
    action: str
    entity: Optional[str] = None
    entity_id: Optional[str] = None
    description: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ActivityLogListResponse(BaseModel):
    items: list[ActivityLogResponse]
    total: int
    page: int
    limit: int


class SuccessResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    database: str = "ok"
