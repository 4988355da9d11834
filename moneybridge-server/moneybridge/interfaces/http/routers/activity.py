"""Audit trail endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from moneybridge.core.security import get_current_account
from moneybridge.interfaces.http.deps import get_activity_log_service
from moneybridge.modules.accounts import Account as AccountDomain
from moneybridge.modules.activity import ActivityLogService
from moneybridge.modules.common.pagination import PageRequest
from moneybridge.schemas import ActivityLogListResponse, ActivityLogResponse

router = APIRouter()


@router.get("", response_model=ActivityLogListResponse, summary="Own activity; admins may filter any account")
async def list_activity_logs(
    account_id: Optional[str] = None,
    action: Optional[str] = None,
    entity: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    account: AccountDomain = Depends(get_current_account),
    service: ActivityLogService = Depends(get_activity_log_service),
) -> ActivityLogListResponse:
    result = await service.list_logs(
        account,
        PageRequest(page=page, limit=limit),
        account_id=account_id,
        action=action,
        entity=entity,
    )
    return ActivityLogListResponse(
        items=[ActivityLogResponse.model_validate(record) for record in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )
