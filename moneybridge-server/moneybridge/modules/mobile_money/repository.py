"""Repository protocol for mobile-money requests."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol, Sequence

from moneybridge.modules.common.pagination import Page, PageRequest

from .models import MobileMoneyRequest, Provider, RequestFilters, RequestStatus
from .visibility import VisibilityScope


class MobileMoneyRequestRepository(Protocol):
    async def insert(
        self,
        *,
        requester_id: str,
        provider: Provider,
        amount_cents: int,
        fees_cents: int,
        total_amount_cents: int,
        currency: str,
        recipient_number: str,
        description: str | None,
        reference: str,
        created_at: datetime,
    ) -> MobileMoneyRequest:
        ...

    async def find_by_id(self, request_id: str) -> MobileMoneyRequest | None:
        ...

    async def conditional_update(
        self,
        request_id: str,
        expected_status: RequestStatus,
        patch: dict[str, Any],
        *,
        require_unassigned: bool = False,
        expected_fulfiller_id: str | None = None,
    ) -> bool:
        """Apply ``patch`` only if the row still has ``expected_status``.

        Must be a single compare-and-swap statement. Returns ``False`` when
        another writer got there first.
        """
        ...

    async def query(
        self,
        scope: VisibilityScope,
        filters: RequestFilters,
        page: PageRequest,
    ) -> Page[MobileMoneyRequest]:
        ...

    async def list_stale_ids(self, created_before: datetime, limit: int) -> Sequence[str]:
        """Ids of PENDING requests created before the cutoff, oldest first."""
        ...

    async def status_totals(self, requester_id: str) -> dict[RequestStatus, tuple[int, int]]:
        """``{status: (count, amount_cents)}`` for one requester."""
        ...

    async def completed_amount_since(self, requester_id: str, since: datetime) -> int:
        ...
