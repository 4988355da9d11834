"""SQLAlchemy implementation of the audit trail."""

from __future__ import annotations

import json
from typing import Any, Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.db.models import ActivityLog
from moneybridge.modules.activity.models import ActivityRecord
from moneybridge.modules.common.clock import ensure_utc


class SqlActivityLog:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(
        self,
        *,
        account_id: str | None,
        action: str,
        entity: str | None = None,
        entity_id: str | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> ActivityRecord:
        row = ActivityLog(
            account_id=account_id,
            action=action,
            entity=entity,
            entity_id=entity_id,
            description=description,
            meta=json.dumps(metadata, ensure_ascii=False, default=str) if metadata else None,
        )
        self.session.add(row)
        await self.session.flush()
        return self._to_domain(row)

    async def list_logs(
        self,
        *,
        account_id: str | None,
        action: str | None,
        entity: str | None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[ActivityRecord], int]:
        conditions = []
        if account_id:
            conditions.append(ActivityLog.account_id == account_id)
        if action:
            conditions.append(ActivityLog.action == action)
        if entity:
            conditions.append(ActivityLog.entity == entity)

        stmt = (
            select(ActivityLog)
            .where(*conditions)
            .order_by(desc(ActivityLog.created_at), desc(ActivityLog.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.scalar(select(func.count()).select_from(ActivityLog).where(*conditions))
        return [self._to_domain(row) for row in result.scalars().all()], int(total or 0)

    @staticmethod
    def _to_domain(row: ActivityLog) -> ActivityRecord:
        return ActivityRecord(
            id=row.id,
            account_id=row.account_id,
            action=row.action,
            entity=row.entity,
            entity_id=row.entity_id,
            description=row.description,
            metadata=json.loads(row.meta) if row.meta else {},
            created_at=ensure_utc(row.created_at),
        )
