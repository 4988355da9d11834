"""Fee schedule endpoints."""
from fastapi import APIRouter, Depends, Query

from moneybridge.interfaces.http.deps import get_fee_settings_service, get_mobile_money_service
from moneybridge.modules.fees import FeeSettingsService
from moneybridge.modules.mobile_money import MobileMoneyService
from moneybridge.schemas import FeeQuoteResponse, FeeSettingsResponse

router = APIRouter()


@router.get("", response_model=FeeSettingsResponse, summary="Active fee settings")
async def active_fee_settings(
    service: FeeSettingsService = Depends(get_fee_settings_service),
) -> FeeSettingsResponse:
    return FeeSettingsResponse.model_validate(await service.current())


@router.get("/quote", response_model=FeeQuoteResponse, summary="Fee and total for an amount")
async def quote_fee(
    amount_cents: int = Query(...),
    service: MobileMoneyService = Depends(get_mobile_money_service),
) -> FeeQuoteResponse:
    return FeeQuoteResponse.model_validate(await service.quote_fee(amount_cents))
