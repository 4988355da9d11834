"""Lifecycle rules for a single mobile-money request.

The transition table is the only place that says which event may move a
request out of which status. Guard helpers combine a table lookup with the
actor checks for that event; state is always checked before capability so a
stale caller learns that the request moved on rather than a misleading 403.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from moneybridge.modules.accounts.models import Account
from moneybridge.modules.common.clock import ensure_utc
from moneybridge.modules.common.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateTransition,
)

from .models import ASSIGNED_STATUSES, FulfillmentEvidence, MobileMoneyRequest, RequestStatus


class RequestEvent(str, Enum):
    ACCEPT = "accept"
    FULFILL = "fulfill"
    VERIFY = "verify"
    REJECT = "reject"
    CANCEL = "cancel"
    EXPIRE = "expire"


TRANSITIONS: dict[tuple[RequestStatus, RequestEvent], RequestStatus] = {
    (RequestStatus.PENDING, RequestEvent.ACCEPT): RequestStatus.ACCEPTED,
    (RequestStatus.ACCEPTED, RequestEvent.FULFILL): RequestStatus.FULFILLED,
    (RequestStatus.FULFILLED, RequestEvent.VERIFY): RequestStatus.VERIFIED,
    (RequestStatus.FULFILLED, RequestEvent.REJECT): RequestStatus.CANCELLED,
    (RequestStatus.PENDING, RequestEvent.CANCEL): RequestStatus.CANCELLED,
    (RequestStatus.ACCEPTED, RequestEvent.CANCEL): RequestStatus.CANCELLED,
    (RequestStatus.PENDING, RequestEvent.EXPIRE): RequestStatus.EXPIRED,
}


def next_status(request: MobileMoneyRequest, event: RequestEvent) -> RequestStatus:
    target = TRANSITIONS.get((request.status, event))
    if target is None:
        raise InvalidStateTransition(
            f"Cannot {event.value} a request that is {request.status.value}",
            request_id=request.id,
            current=request.status.value,
            event=event.value,
        )
    return target


def _require_active(actor: Account) -> None:
    if not actor.is_active:
        raise ForbiddenError("Account is disabled", account_id=actor.id)


def guard_accept(request: MobileMoneyRequest, actor: Account) -> RequestStatus:
    _require_active(actor)
    if request.status in ASSIGNED_STATUSES:
        raise ConflictError(
            "Request has already been accepted by someone else",
            request_id=request.id,
            current=request.status.value,
            event=RequestEvent.ACCEPT.value,
        )
    target = next_status(request, RequestEvent.ACCEPT)
    if request.requester_id == actor.id:
        raise ForbiddenError("You cannot accept your own request", request_id=request.id, account_id=actor.id)
    if request.fulfiller_id is not None:
        raise ConflictError(
            "Request has already been accepted by someone else",
            request_id=request.id,
            current=request.status.value,
            event=RequestEvent.ACCEPT.value,
        )
    return target


def guard_fulfill(
    request: MobileMoneyRequest,
    actor: Account,
    evidence: FulfillmentEvidence,
) -> tuple[RequestStatus, FulfillmentEvidence]:
    _require_active(actor)
    target = next_status(request, RequestEvent.FULFILL)
    if request.fulfiller_id != actor.id:
        raise ForbiddenError(
            "You are not authorized to fulfill this request",
            request_id=request.id,
            account_id=actor.id,
        )
    return target, evidence.validate()


def guard_verify(request: MobileMoneyRequest, actor: Account, event: RequestEvent = RequestEvent.VERIFY) -> RequestStatus:
    target = next_status(request, event)
    if not actor.is_admin():
        raise ForbiddenError("Admin access required", request_id=request.id, account_id=actor.id)
    return target


def guard_cancel(request: MobileMoneyRequest, actor: Account) -> RequestStatus:
    target = next_status(request, RequestEvent.CANCEL)
    if actor.is_admin():
        return target
    if request.requester_id != actor.id:
        raise ForbiddenError(
            "You can only cancel your own requests",
            request_id=request.id,
            account_id=actor.id,
        )
    _require_active(actor)
    return target


def guard_expire(request: MobileMoneyRequest, now: datetime, ttl: timedelta) -> RequestStatus:
    target = next_status(request, RequestEvent.EXPIRE)
    age = ensure_utc(now) - ensure_utc(request.created_at)
    if age <= ttl:
        raise InvalidStateTransition(
            "Request has not outlived its time-to-live",
            request_id=request.id,
            current=request.status.value,
            event=RequestEvent.EXPIRE.value,
            age_seconds=int(age.total_seconds()),
        )
    return target


__all__ = [
    "RequestEvent",
    "TRANSITIONS",
    "guard_accept",
    "guard_cancel",
    "guard_expire",
    "guard_fulfill",
    "guard_verify",
    "next_status",
]
