"""Who may see which requests, and how much of each."""

from __future__ import annotations

from dataclasses import dataclass, fields

from moneybridge.modules.accounts.models import Account

from .models import MobileMoneyRequest, Party, RequestStatus, RequestView

MASK_CHAR = "*"


@dataclass(slots=True, frozen=True)
class VisibilityScope:
    """Row-level predicate for one actor.

    Admins see everything. Anyone else sees requests they own or fulfil, plus
    other people's PENDING requests (the browse set). Storage backends turn
    this into their own query language; ``allows`` is the reference version.
    """

    actor_id: str
    is_admin: bool = False

    def allows(self, request: MobileMoneyRequest) -> bool:
        if self.is_admin:
            return True
        if request.requester_id == self.actor_id or request.fulfiller_id == self.actor_id:
            return True
        return request.status is RequestStatus.PENDING and request.requester_id != self.actor_id


def visible_requests(actor: Account) -> VisibilityScope:
    return VisibilityScope(actor_id=actor.id, is_admin=actor.is_admin())


def mask_number(number: str, head: int = 3, tail: int = 2) -> str:
    if not number:
        return number
    if len(number) <= head + tail:
        # too short to leave anything hidden between the kept digits
        return MASK_CHAR * len(number)
    return number[:head] + MASK_CHAR * (len(number) - head - tail) + number[len(number) - tail:]


def mask_email(email: str | None) -> str | None:
    if not email or "@" not in email:
        return email
    local, domain = email.split("@", 1)
    if len(local) <= 2:
        return f"{local[:1]}{MASK_CHAR * (len(local) - 1)}@{domain}"
    return f"{local[0]}{MASK_CHAR * (len(local) - 2)}{local[-1]}@{domain}"


def first_name(name: str | None) -> str | None:
    if not name:
        return name
    return name.split()[0]


def _reduce_party(party: Party | None) -> Party | None:
    if party is None:
        return None
    return Party(id=party.id, name=first_name(party.name), email=mask_email(party.email))


def viewer_relation(request: MobileMoneyRequest, actor: Account) -> str:
    if request.requester_id == actor.id:
        return "requester"
    if request.fulfiller_id is not None and request.fulfiller_id == actor.id:
        return "fulfiller"
    if actor.is_admin():
        return "admin"
    return "browser"


_SHARED_FIELDS = tuple(f.name for f in fields(MobileMoneyRequest))


def redact(request: MobileMoneyRequest, actor: Account, *, head: int = 3, tail: int = 2) -> RequestView:
    relation = viewer_relation(request, actor)
    values = {name: getattr(request, name) for name in _SHARED_FIELDS}
    if relation != "browser":
        return RequestView(viewer_relation=relation, masked=False, **values)

    values.update(
        recipient_number=mask_number(request.recipient_number, head, tail),
        requester=_reduce_party(request.requester),
        fulfiller=_reduce_party(request.fulfiller),
        verified_by=None,
        transaction_id=None,
        sender_number=None,
        screenshot=None,
        notes=None,
    )
    return RequestView(viewer_relation=relation, masked=True, **values)


__all__ = [
    "VisibilityScope",
    "mask_email",
    "mask_number",
    "redact",
    "viewer_relation",
    "visible_requests",
]
