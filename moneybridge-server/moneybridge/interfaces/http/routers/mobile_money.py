"""Mobile-money request endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from moneybridge.core.security import get_current_account, get_current_admin
from moneybridge.interfaces.http.deps import get_mobile_money_service
from moneybridge.modules.accounts import Account as AccountDomain
from moneybridge.modules.common.pagination import PageRequest
from moneybridge.modules.mobile_money import (
    FulfillmentEvidence,
    MobileMoneyRequest,
    MobileMoneyService,
    Provider,
    RequestFilters,
    RequestStatus,
)
from moneybridge.schemas import (
    FulfillmentRequest,
    MobileMoneyDashboardResponse,
    MobileMoneyRequestCreate,
    MobileMoneyRequestListResponse,
    MobileMoneyRequestResponse,
    VerificationRequest,
)

router = APIRouter()


def _view(service: MobileMoneyService, request: MobileMoneyRequest, account: AccountDomain) -> MobileMoneyRequestResponse:
    return MobileMoneyRequestResponse.model_validate(service.view(request, account))


@router.get("/requests", response_model=MobileMoneyRequestListResponse, summary="List visible requests")
async def list_requests(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    provider: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestListResponse:
    filters = RequestFilters(
        status=RequestStatus.parse(status_filter) if status_filter else None,
        provider=Provider.parse(provider) if provider else None,
    )
    result = await service.list_requests(account, filters, PageRequest(page=page, limit=limit))
    return MobileMoneyRequestListResponse(
        items=[MobileMoneyRequestResponse.model_validate(item) for item in result.items],
        total=result.total,
        page=result.page,
        limit=result.limit,
        pages=result.pages,
    )


@router.post(
    "/requests",
    response_model=MobileMoneyRequestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a request and debit the wallet",
)
async def create_request(
    payload: MobileMoneyRequestCreate,
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestResponse:
    request = await service.create_request(
        account,
        amount_cents=payload.amount_cents,
        provider=payload.provider,
        recipient_number=payload.recipient_number,
        description=payload.description,
    )
    return _view(service, request, account)


@router.get("/dashboard", response_model=MobileMoneyDashboardResponse, summary="Requester statistics")
async def dashboard(
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyDashboardResponse:
    return MobileMoneyDashboardResponse.model_validate(await service.dashboard(account))


@router.get("/requests/{request_id}", response_model=MobileMoneyRequestResponse, summary="Request detail")
async def get_request(
    request_id: str,
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestResponse:
    return MobileMoneyRequestResponse.model_validate(await service.get_request(account, request_id))


@router.post("/requests/{request_id}/accept", response_model=MobileMoneyRequestResponse, summary="Accept a request")
async def accept_request(
    request_id: str,
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestResponse:
    request = await service.accept_request(account, request_id)
    return _view(service, request, account)


@router.post("/requests/{request_id}/fulfill", response_model=MobileMoneyRequestResponse, summary="Submit payout evidence")
async def fulfill_request(
    request_id: str,
    payload: FulfillmentRequest,
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestResponse:
    evidence = FulfillmentEvidence(
        transaction_id=payload.transaction_id,
        sender_number=payload.sender_number,
        screenshot=payload.screenshot,
        notes=payload.notes,
    )
    request = await service.fulfill_request(account, request_id, evidence)
    return _view(service, request, account)


@router.post("/requests/{request_id}/cancel", response_model=MobileMoneyRequestResponse, summary="Cancel and refund")
async def cancel_request(
    request_id: str,
    account: AccountDomain = Depends(get_current_account),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestResponse:
    request = await service.cancel_request(account, request_id)
    return _view(service, request, account)


@router.post("/requests/{request_id}/verify", response_model=MobileMoneyRequestResponse, summary="Approve or reject a fulfilment")
async def verify_request(
    request_id: str,
    payload: VerificationRequest,
    admin: AccountDomain = Depends(get_current_admin),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> MobileMoneyRequestResponse:
    request = await service.verify_request(admin, request_id, payload.decision, reason=payload.reason)
    return _view(service, request, admin)
