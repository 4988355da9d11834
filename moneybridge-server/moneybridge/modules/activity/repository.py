"""Repository protocol for the audit trail."""

from __future__ import annotations

from typing import Any, Protocol, Sequence

from .models import ActivityRecord


class AuditLog(Protocol):
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
        ...

    async def list_logs(
        self,
        *,
        account_id: str | None,
        action: str | None,
        entity: str | None,
        limit: int,
        offset: int,
    ) -> tuple[Sequence[ActivityRecord], int]:
        ...
