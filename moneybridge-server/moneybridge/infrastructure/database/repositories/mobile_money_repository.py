"""SQLAlchemy implementation of the mobile-money request repository."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Sequence

from sqlalchemy import and_, asc, desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from moneybridge.db.models import Account as AccountModel, MobileMoneyRequest as RequestModel
from moneybridge.modules.common.clock import ensure_utc
from moneybridge.modules.common.exceptions import StorageError
from moneybridge.modules.common.pagination import Page, PageRequest
from moneybridge.modules.mobile_money.models import (
    MobileMoneyRequest,
    Party,
    Provider,
    RequestFilters,
    RequestStatus,
)
from moneybridge.modules.mobile_money.visibility import VisibilityScope

_COMPLETED = (RequestStatus.FULFILLED.value, RequestStatus.VERIFIED.value)


class SqlMobileMoneyRequestRepository:
    """Request repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

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
        model = RequestModel(
            requester_id=requester_id,
            provider=provider.value,
            amount_cents=amount_cents,
            fees_cents=fees_cents,
            total_amount_cents=total_amount_cents,
            currency=currency,
            recipient_number=recipient_number,
            description=description,
            reference=reference,
            status=RequestStatus.PENDING.value,
            created_at=created_at,
        )
        self._session.add(model)
        await self._session.flush()
        request = await self.find_by_id(model.id)
        if request is None:
            raise StorageError("Inserted request could not be reloaded", request_id=model.id)
        return request

    async def find_by_id(self, request_id: str) -> MobileMoneyRequest | None:
        stmt = (
            self._select()
            .where(RequestModel.id == request_id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.unique().scalar_one_or_none()
        return self.to_domain(model) if model is not None else None

    async def conditional_update(
        self,
        request_id: str,
        expected_status: RequestStatus,
        patch: dict[str, Any],
        *,
        require_unassigned: bool = False,
        expected_fulfiller_id: str | None = None,
    ) -> bool:
        conditions = [RequestModel.id == request_id, RequestModel.status == expected_status.value]
        if require_unassigned:
            conditions.append(RequestModel.fulfiller_id.is_(None))
        if expected_fulfiller_id is not None:
            conditions.append(RequestModel.fulfiller_id == expected_fulfiller_id)

        values = {key: value.value if isinstance(value, Enum) else value for key, value in patch.items()}
        stmt = (
            update(RequestModel)
            .where(*conditions)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def query(
        self,
        scope: VisibilityScope,
        filters: RequestFilters,
        page: PageRequest,
    ) -> Page[MobileMoneyRequest]:
        conditions = self._conditions(scope, filters)
        stmt = (
            self._select()
            .where(*conditions)
            .order_by(desc(RequestModel.created_at), desc(RequestModel.id))
            .offset(page.offset)
            .limit(page.limit)
        )
        result = await self._session.execute(stmt)
        items = [self.to_domain(model) for model in result.unique().scalars().all()]
        total = await self._session.scalar(select(func.count()).select_from(RequestModel).where(*conditions))
        return Page(items=items, page=page.page, limit=page.limit, total=int(total or 0))

    async def list_stale_ids(self, created_before: datetime, limit: int) -> Sequence[str]:
        stmt = (
            select(RequestModel.id)
            .where(
                RequestModel.status == RequestStatus.PENDING.value,
                RequestModel.created_at < created_before,
            )
            .order_by(asc(RequestModel.created_at))
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def status_totals(self, requester_id: str) -> dict[RequestStatus, tuple[int, int]]:
        stmt = (
            select(RequestModel.status, func.count(), func.coalesce(func.sum(RequestModel.amount_cents), 0))
            .where(RequestModel.requester_id == requester_id)
            .group_by(RequestModel.status)
        )
        result = await self._session.execute(stmt)
        return {RequestStatus(status): (int(count), int(amount)) for status, count, amount in result.all()}

    async def completed_amount_since(self, requester_id: str, since: datetime) -> int:
        stmt = select(func.coalesce(func.sum(RequestModel.amount_cents), 0)).where(
            RequestModel.requester_id == requester_id,
            RequestModel.status.in_(_COMPLETED),
            RequestModel.created_at >= since,
        )
        return int(await self._session.scalar(stmt) or 0)

    @staticmethod
    def _select():
        return select(RequestModel).options(
            joinedload(RequestModel.requester),
            joinedload(RequestModel.fulfiller),
            joinedload(RequestModel.verified_by),
        )

    @staticmethod
    def _conditions(scope: VisibilityScope, filters: RequestFilters) -> list:
        conditions = []
        if not scope.is_admin:
            conditions.append(
                or_(
                    RequestModel.requester_id == scope.actor_id,
                    RequestModel.fulfiller_id == scope.actor_id,
                    and_(
                        RequestModel.status == RequestStatus.PENDING.value,
                        RequestModel.requester_id != scope.actor_id,
                    ),
                )
            )
        if filters.status is not None:
            conditions.append(RequestModel.status == filters.status.value)
        if filters.provider is not None:
            conditions.append(RequestModel.provider == filters.provider.value)
        if filters.requester_id is not None:
            conditions.append(RequestModel.requester_id == filters.requester_id)
        return conditions

    @staticmethod
    def _party(model: AccountModel | None) -> Party | None:
        if model is None:
            return None
        return Party(id=model.id, name=model.name or model.username, email=model.email)

    @classmethod
    def to_domain(cls, model: RequestModel) -> MobileMoneyRequest:
        return MobileMoneyRequest(
            id=model.id,
            requester_id=model.requester_id,
            provider=Provider(model.provider),
            amount_cents=model.amount_cents,
            fees_cents=model.fees_cents,
            total_amount_cents=model.total_amount_cents,
            currency=model.currency,
            recipient_number=model.recipient_number,
            reference=model.reference,
            status=RequestStatus(model.status),
            created_at=ensure_utc(model.created_at),
            fulfiller_id=model.fulfiller_id,
            verified_by_id=model.verified_by_id,
            description=model.description,
            transaction_id=model.transaction_id,
            sender_number=model.sender_number,
            screenshot=model.screenshot,
            notes=model.notes,
            rejection_reason=model.rejection_reason,
            accepted_at=ensure_utc(model.accepted_at),
            fulfilled_at=ensure_utc(model.fulfilled_at),
            verified_at=ensure_utc(model.verified_at),
            closed_at=ensure_utc(model.closed_at),
            requester=cls._party(model.requester),
            fulfiller=cls._party(model.fulfiller),
            verified_by=cls._party(model.verified_by),
        )
