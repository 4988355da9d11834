"""Mobile-money request service.

Every state-changing operation runs inside ``LedgerStore.run_in_transaction``:
the status compare-and-swap, any balance movement and the audit entry commit
together or not at all. The service keeps no state between calls.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.core.config import MobileMoneySettings, get_settings
from moneybridge.modules.accounts.models import Account
from moneybridge.modules.activity.models import ActivityAction
from moneybridge.modules.activity.repository import AuditLog
from moneybridge.modules.common.clock import Clock, utcnow
from moneybridge.modules.common.exceptions import ConflictError, ForbiddenError, InvalidStateTransition, ValidationError
from moneybridge.modules.common.pagination import Page, PageRequest
from moneybridge.modules.fees.calculator import quote
from moneybridge.modules.fees.models import FeeQuote
from moneybridge.modules.fees.repository import FeeSettingsProvider
from moneybridge.modules.wallets.models import TransactionMeta, TransactionType
from moneybridge.modules.wallets.repository import LedgerStore

from .exceptions import RequestNotFoundError
from .models import (
    DashboardStats,
    FulfillmentEvidence,
    MobileMoneyRequest,
    Provider,
    RequestFilters,
    RequestStatus,
    RequestView,
    VerificationDecision,
)
from .policies import RejectionPolicy, build_rejection_policy
from .references import generate_reference, refund_reference
from .repository import MobileMoneyRequestRepository
from .state_machine import (
    RequestEvent,
    guard_accept,
    guard_cancel,
    guard_expire,
    guard_fulfill,
    guard_verify,
)
from .visibility import VisibilityScope, redact, visible_requests

logger = logging.getLogger(__name__)

ENTITY = "mobile_money_request"
RECIPIENT_PATTERN = re.compile(r"^\+?\d{6,20}$")
COMPLETED_STATUSES = (RequestStatus.FULFILLED, RequestStatus.VERIFIED)


@dataclass(slots=True)
class MobileMoneyService:
    ledger: LedgerStore
    requests: MobileMoneyRequestRepository
    fee_settings: FeeSettingsProvider
    audit: AuditLog
    settings: MobileMoneySettings = field(default_factory=MobileMoneySettings)
    rejection_policy: RejectionPolicy | None = None
    clock: Clock = utcnow

    def __post_init__(self) -> None:
        if self.rejection_policy is None:
            self.rejection_policy = build_rejection_policy(self.settings.rejection_policy)

    @classmethod
    def with_session(cls, session: AsyncSession, settings: MobileMoneySettings | None = None) -> "MobileMoneyService":
        from moneybridge.infrastructure.database.repositories.activity_log_repository import SqlActivityLog
        from moneybridge.infrastructure.database.repositories.fee_settings_repository import SqlFeeSettingsProvider
        from moneybridge.infrastructure.database.repositories.mobile_money_repository import (
            SqlMobileMoneyRequestRepository,
        )
        from moneybridge.infrastructure.database.repositories.wallet_repository import SqlLedgerStore

        return cls(
            ledger=SqlLedgerStore(session),
            requests=SqlMobileMoneyRequestRepository(session),
            fee_settings=SqlFeeSettingsProvider(session),
            audit=SqlActivityLog(session),
            settings=settings or get_settings().mobile_money,
        )

    # -- queries -----------------------------------------------------------

    async def quote_fee(self, amount_cents: int) -> FeeQuote:
        self._validate_amount(amount_cents)
        return quote(amount_cents, await self.fee_settings.get_active_fee_settings())

    async def get_request(self, actor: Account, request_id: str) -> RequestView:
        request = await self.requests.find_by_id(request_id)
        # invisible requests are reported as missing rather than forbidden
        if request is None or not visible_requests(actor).allows(request):
            raise RequestNotFoundError(request_id)
        return self.view(request, actor)

    async def list_requests(
        self,
        actor: Account,
        filters: RequestFilters | None = None,
        page: PageRequest | None = None,
    ) -> Page[RequestView]:
        filters = filters or RequestFilters()
        page = page or PageRequest()
        result = await self.requests.query(visible_requests(actor), filters, page)
        return Page(
            items=[self.view(request, actor) for request in result.items],
            page=result.page,
            limit=result.limit,
            total=result.total,
        )

    async def dashboard(self, actor: Account, now: datetime | None = None) -> DashboardStats:
        now = now or self.clock()
        totals = await self.requests.status_totals(actor.id)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        recent = await self.requests.query(
            VisibilityScope(actor_id=actor.id),
            RequestFilters(requester_id=actor.id),
            PageRequest(page=1, limit=5),
        )
        return DashboardStats(
            total_requests=sum(count for count, _ in totals.values()),
            pending_requests=totals.get(RequestStatus.PENDING, (0, 0))[0],
            completed_requests=sum(totals.get(status, (0, 0))[0] for status in COMPLETED_STATUSES),
            completed_amount_cents=sum(totals.get(status, (0, 0))[1] for status in COMPLETED_STATUSES),
            this_month_amount_cents=await self.requests.completed_amount_since(actor.id, month_start),
            by_status={status.value: count for status, (count, _) in totals.items()},
            recent=[self.view(request, actor) for request in recent.items],
        )

    # -- lifecycle ---------------------------------------------------------

    async def create_request(
        self,
        requester: Account,
        *,
        amount_cents: int,
        provider: Provider | str,
        recipient_number: str,
        description: str | None = None,
    ) -> MobileMoneyRequest:
        if not requester.is_active:
            raise ForbiddenError("Account is disabled", account_id=requester.id)
        self._validate_amount(amount_cents)
        provider = Provider.parse(provider)
        recipient = self._normalize_recipient(recipient_number)

        async def _create() -> MobileMoneyRequest:
            fee_quote = quote(amount_cents, await self.fee_settings.get_active_fee_settings())
            reference = generate_reference(provider)
            entry = await self.ledger.adjust_balance(
                requester.id,
                -fee_quote.total_cents,
                TransactionMeta(
                    type=TransactionType.MOBILE_MONEY_OUT,
                    reference=reference,
                    description=f"{provider.value} withdrawal request - {recipient}",
                ),
            )
            request = await self.requests.insert(
                requester_id=requester.id,
                provider=provider,
                amount_cents=amount_cents,
                fees_cents=fee_quote.fee_cents,
                total_amount_cents=fee_quote.total_cents,
                currency=self.settings.currency,
                recipient_number=recipient,
                description=description or f"{provider.value} withdrawal",
                reference=reference,
                created_at=self.clock(),
            )
            await self._record(
                requester.id,
                ActivityAction.MOBILE_MONEY_REQUEST_CREATED,
                None,
                request,
                amount_cents=amount_cents,
                fees_cents=fee_quote.fee_cents,
                total_amount_cents=fee_quote.total_cents,
                balance_before_cents=entry.balance_before_cents,
                balance_after_cents=entry.balance_after_cents,
            )
            return request

        request = await self.ledger.run_in_transaction(_create)
        logger.info(
            "Mobile money request %s (%s) created by %s: %s %s + fee %s via %s",
            request.id,
            request.reference,
            requester.id,
            request.amount_cents,
            request.currency,
            request.fees_cents,
            request.provider.value,
        )
        return request

    async def accept_request(self, actor: Account, request_id: str) -> MobileMoneyRequest:
        async def _accept() -> MobileMoneyRequest:
            request = await self._load(request_id)
            target = guard_accept(request, actor)
            updated = await self._swap(
                request,
                target,
                RequestEvent.ACCEPT,
                {"fulfiller_id": actor.id, "accepted_at": self.clock()},
                require_unassigned=True,
            )
            await self._record(actor.id, ActivityAction.MOBILE_MONEY_REQUEST_ACCEPTED, request.status, updated)
            return updated

        return self._logged(await self._run(_accept, request_id, actor.id, RequestEvent.ACCEPT), actor.id)

    async def fulfill_request(
        self,
        actor: Account,
        request_id: str,
        evidence: FulfillmentEvidence,
    ) -> MobileMoneyRequest:
        async def _fulfill() -> MobileMoneyRequest:
            request = await self._load(request_id)
            target, checked = guard_fulfill(request, actor, evidence)
            updated = await self._swap(
                request,
                target,
                RequestEvent.FULFILL,
                {
                    "fulfilled_at": self.clock(),
                    "transaction_id": checked.transaction_id,
                    "sender_number": checked.sender_number,
                    "screenshot": checked.screenshot,
                    "notes": checked.notes,
                },
                expected_fulfiller_id=actor.id,
            )
            await self._record(
                actor.id,
                ActivityAction.MOBILE_MONEY_REQUEST_FULFILLED,
                request.status,
                updated,
                transaction_id=checked.transaction_id,
            )
            return updated

        return self._logged(await self._run(_fulfill, request_id, actor.id, RequestEvent.FULFILL), actor.id)

    async def verify_request(
        self,
        admin: Account,
        request_id: str,
        decision: VerificationDecision | str = VerificationDecision.APPROVE,
        *,
        reason: str | None = None,
    ) -> MobileMoneyRequest:
        decision = self._parse_decision(decision)
        event = RequestEvent.VERIFY if decision is VerificationDecision.APPROVE else RequestEvent.REJECT

        async def _verify() -> MobileMoneyRequest:
            request = await self._load(request_id)
            now = self.clock()
            if decision is VerificationDecision.APPROVE:
                target = guard_verify(request, admin)
                updated = await self._swap(
                    request,
                    target,
                    event,
                    {"verified_by_id": admin.id, "verified_at": now},
                )
                extra: dict[str, Any] = {}
                if self.settings.credit_fulfiller_on_verify and updated.fulfiller_id:
                    payout = await self.ledger.adjust_balance(
                        updated.fulfiller_id,
                        updated.amount_cents,
                        TransactionMeta(
                            type=TransactionType.MOBILE_MONEY_IN,
                            reference=updated.reference,
                            description=f"Payout for {updated.provider.value} request {updated.reference}",
                        ),
                    )
                    extra["fulfiller_credit_cents"] = payout.amount_cents
                await self._record(admin.id, ActivityAction.MOBILE_MONEY_REQUEST_VERIFIED, request.status, updated, **extra)
                return updated

            guard_verify(request, admin, RequestEvent.REJECT)
            target = self.rejection_policy.target_status(request)
            updated = await self._swap(
                request,
                target,
                event,
                {
                    "verified_by_id": admin.id,
                    "verified_at": now,
                    "closed_at": now,
                    "rejection_reason": reason,
                    "fulfiller_id": None,
                },
            )
            refund = self.rejection_policy.refund_cents(request)
            if refund:
                await self._refund(updated, refund, f"Refund for rejected {updated.provider.value} request - {updated.recipient_number}")
            await self._record(
                admin.id,
                ActivityAction.MOBILE_MONEY_REQUEST_REJECTED,
                request.status,
                updated,
                policy=self.rejection_policy.name,
                fulfiller_id=request.fulfiller_id,
                refund_cents=refund,
                reason=reason,
            )
            return updated

        return self._logged(await self._run(_verify, request_id, admin.id, event), admin.id)

    async def cancel_request(self, actor: Account, request_id: str) -> MobileMoneyRequest:
        """Cancel a PENDING or ACCEPTED request and refund the requester in full."""

        async def _cancel() -> MobileMoneyRequest:
            request = await self._load(request_id)
            target = guard_cancel(request, actor)
            updated = await self._swap(
                request,
                target,
                RequestEvent.CANCEL,
                {"closed_at": self.clock(), "fulfiller_id": None},
            )
            refund = await self._refund(
                updated,
                updated.total_amount_cents,
                f"Refund for cancelled {updated.provider.value} request - {updated.recipient_number}",
            )
            await self._record(
                actor.id,
                ActivityAction.MOBILE_MONEY_REQUEST_CANCELLED,
                request.status,
                updated,
                fulfiller_id=request.fulfiller_id,
                refund_cents=refund.amount_cents,
                balance_after_cents=refund.balance_after_cents,
            )
            return updated

        return self._logged(await self._run(_cancel, request_id, actor.id, RequestEvent.CANCEL), actor.id)

    async def expire_request(self, request_id: str, now: datetime | None = None) -> MobileMoneyRequest:
        now = now or self.clock()
        ttl = timedelta(minutes=self.settings.pending_ttl_minutes)

        async def _expire() -> MobileMoneyRequest:
            request = await self._load(request_id)
            target = guard_expire(request, now, ttl)
            updated = await self._swap(request, target, RequestEvent.EXPIRE, {"closed_at": now})
            refund = await self._refund(
                updated,
                updated.total_amount_cents,
                f"Refund for expired {updated.provider.value} request - {updated.recipient_number}",
            )
            await self._record(
                None,
                ActivityAction.MOBILE_MONEY_REQUEST_EXPIRED,
                request.status,
                updated,
                refund_cents=refund.amount_cents,
            )
            return updated

        return self._logged(await self._run(_expire, request_id, None, RequestEvent.EXPIRE), "system")

    async def expire_stale_requests(self, now: datetime | None = None, limit: int = 100) -> list[MobileMoneyRequest]:
        """Expire every PENDING request past its TTL; requests that moved on meanwhile are skipped."""
        now = now or self.clock()
        cutoff = now - timedelta(minutes=self.settings.pending_ttl_minutes)
        expired: list[MobileMoneyRequest] = []
        for request_id in await self.requests.list_stale_ids(cutoff, limit):
            try:
                expired.append(await self.expire_request(request_id, now=now))
            except InvalidStateTransition as exc:
                logger.info("Skipped expiring %s: %s", request_id, exc.message)
        return expired

    # -- helpers -----------------------------------------------------------

    async def _run(self, fn, request_id: str, actor_id: str | None, event: RequestEvent) -> MobileMoneyRequest:
        try:
            return await self.ledger.run_in_transaction(fn)
        except (InvalidStateTransition, ForbiddenError, ValidationError) as exc:
            logger.warning(
                "Rejected %s on request %s by %s: %s",
                event.value,
                request_id,
                actor_id or "system",
                exc.message,
            )
            raise

    @staticmethod
    def _logged(request: MobileMoneyRequest, actor_id: str) -> MobileMoneyRequest:
        logger.info(
            "Mobile money request %s (%s) is now %s [actor=%s]",
            request.id,
            request.reference,
            request.status.value,
            actor_id,
        )
        return request

    async def _load(self, request_id: str) -> MobileMoneyRequest:
        request = await self.requests.find_by_id(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    async def _swap(
        self,
        request: MobileMoneyRequest,
        target: RequestStatus,
        event: RequestEvent,
        patch: dict[str, Any],
        **conditions: Any,
    ) -> MobileMoneyRequest:
        swapped = await self.requests.conditional_update(
            request.id,
            request.status,
            {"status": target, **patch},
            **conditions,
        )
        if not swapped:
            raise ConflictError(
                "Request was modified concurrently, re-fetch and retry",
                request_id=request.id,
                current=request.status.value,
                event=event.value,
            )
        return await self._load(request.id)

    async def _refund(self, request: MobileMoneyRequest, amount_cents: int, description: str):
        return await self.ledger.adjust_balance(
            request.requester_id,
            amount_cents,
            TransactionMeta(
                type=TransactionType.MOBILE_MONEY_REFUND,
                reference=refund_reference(request.reference),
                description=description,
            ),
        )

    async def _record(
        self,
        actor_id: str | None,
        action: str,
        before: RequestStatus | None,
        request: MobileMoneyRequest,
        **extra: Any,
    ) -> None:
        await self.audit.append(
            account_id=actor_id,
            action=action,
            entity=ENTITY,
            entity_id=request.id,
            description=f"{before.value if before else 'NEW'} -> {request.status.value}",
            metadata={
                "before": before.value if before else None,
                "after": request.status.value,
                "reference": request.reference,
                **extra,
            },
        )

    def view(self, request: MobileMoneyRequest, actor: Account) -> RequestView:
        return redact(request, actor, head=self.settings.mask_head, tail=self.settings.mask_tail)

    def _validate_amount(self, amount_cents: int) -> None:
        if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
            raise ValidationError("Amount must be a whole number of cents", amount_cents=amount_cents)
        if amount_cents < self.settings.minimum_amount_cents:
            raise ValidationError(
                "Amount is below the minimum",
                amount_cents=amount_cents,
                minimum_amount_cents=self.settings.minimum_amount_cents,
            )

    @staticmethod
    def _normalize_recipient(recipient_number: str | None) -> str:
        recipient = re.sub(r"[\s-]", "", recipient_number or "")
        if not recipient:
            raise ValidationError("Missing required fields: recipientNumber", missing_fields=["recipientNumber"])
        if not RECIPIENT_PATTERN.match(recipient):
            raise ValidationError("Recipient number is not a valid mobile number", recipient_number=recipient_number)
        return recipient

    @staticmethod
    def _parse_decision(decision: VerificationDecision | str) -> VerificationDecision:
        if isinstance(decision, VerificationDecision):
            return decision
        try:
            return VerificationDecision(str(decision).strip().lower())
        except ValueError as exc:
            raise ValidationError("Decision must be 'approve' or 'reject'", decision=decision) from exc
