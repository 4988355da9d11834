"""Pluggable outcome for an admin rejecting a fulfilled request."""

from __future__ import annotations

from typing import Protocol

from moneybridge.modules.common.exceptions import ConfigurationError, ValidationError

from .models import MobileMoneyRequest, RequestStatus


class RejectionPolicy(Protocol):
    name: str

    def target_status(self, request: MobileMoneyRequest) -> RequestStatus:
        """Status the request moves to; raise to refuse the rejection."""
        ...

    def refund_cents(self, request: MobileMoneyRequest) -> int:
        """Amount returned to the requester's wallet."""
        ...


class RejectionDisabled:
    name = "disabled"

    def target_status(self, request: MobileMoneyRequest) -> RequestStatus:
        raise ValidationError(
            "Rejecting fulfilled requests is disabled",
            request_id=request.id,
            policy=self.name,
        )

    def refund_cents(self, request: MobileMoneyRequest) -> int:
        return 0


class RefundOnRejection:
    """Close the request and give the requester back everything they paid."""

    name = "refund"

    def target_status(self, request: MobileMoneyRequest) -> RequestStatus:
        return RequestStatus.CANCELLED

    def refund_cents(self, request: MobileMoneyRequest) -> int:
        return request.total_amount_cents


_POLICIES: dict[str, type] = {
    RejectionDisabled.name: RejectionDisabled,
    RefundOnRejection.name: RefundOnRejection,
}


def build_rejection_policy(name: str) -> RejectionPolicy:
    try:
        return _POLICIES[name]()
    except KeyError as exc:
        raise ConfigurationError(f"Unknown rejection policy: {name}", policy=name) from exc
