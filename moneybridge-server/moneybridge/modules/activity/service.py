"""Read side of the activity log."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.modules.accounts.models import Account
from moneybridge.modules.common.pagination import Page, PageRequest

from .models import ActivityRecord
from .repository import AuditLog


@dataclass(slots=True)
class ActivityLogService:
    repository: AuditLog

    @classmethod
    def with_session(cls, session: AsyncSession) -> "ActivityLogService":
        from moneybridge.infrastructure.database.repositories.activity_log_repository import SqlActivityLog

        return cls(SqlActivityLog(session))

    async def list_logs(
        self,
        actor: Account,
        page: PageRequest,
        *,
        account_id: str | None = None,
        action: str | None = None,
        entity: str | None = None,
    ) -> Page[ActivityRecord]:
        # regular users only ever see their own trail
        if not actor.is_admin():
            account_id = actor.id
        items, total = await self.repository.list_logs(
            account_id=account_id,
            action=action,
            entity=entity,
            limit=page.limit,
            offset=page.offset,
        )
        return Page(items=list(items), page=page.page, limit=page.limit, total=total)
