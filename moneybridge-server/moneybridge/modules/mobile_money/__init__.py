"""Mobile-money request engine exports"""

from .exceptions import RequestNotFoundError
from .models import (
    DashboardStats,
    FulfillmentEvidence,
    MobileMoneyRequest,
    Party,
    Provider,
    RequestFilters,
    RequestStatus,
    RequestView,
    VerificationDecision,
)
from .policies import RefundOnRejection, RejectionDisabled, RejectionPolicy, build_rejection_policy
from .references import generate_reference, refund_reference
from .repository import MobileMoneyRequestRepository
from .service import MobileMoneyService
from .state_machine import TRANSITIONS, RequestEvent, next_status
from .visibility import VisibilityScope, mask_number, redact, visible_requests

__all__ = [
    "DashboardStats",
    "FulfillmentEvidence",
    "MobileMoneyRequest",
    "MobileMoneyRequestRepository",
    "MobileMoneyService",
    "Party",
    "Provider",
    "RefundOnRejection",
    "RejectionDisabled",
    "RejectionPolicy",
    "RequestEvent",
    "RequestFilters",
    "RequestNotFoundError",
    "RequestStatus",
    "RequestView",
    "TRANSITIONS",
    "VerificationDecision",
    "VisibilityScope",
    "build_rejection_policy",
    "generate_reference",
    "mask_number",
    "next_status",
    "redact",
    "refund_reference",
    "visible_requests",
]
