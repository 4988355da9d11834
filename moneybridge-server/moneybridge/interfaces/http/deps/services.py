"""Domain service providers for the money-moving routers."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.modules.activity import ActivityLogService
from moneybridge.modules.fees import FeeSettingsService
from moneybridge.modules.mobile_money import MobileMoneyService
from moneybridge.modules.wallets import WalletService

from .database import get_db_session


def get_mobile_money_service(db: AsyncSession = Depends(get_db_session)) -> MobileMoneyService:
    return MobileMoneyService.with_session(db)


def get_wallet_service(db: AsyncSession = Depends(get_db_session)) -> WalletService:
    return WalletService.with_session(db)


def get_fee_settings_service(db: AsyncSession = Depends(get_db_session)) -> FeeSettingsService:
    return FeeSettingsService.with_session(db)


def get_activity_log_service(db: AsyncSession = Depends(get_db_session)) -> ActivityLogService:
    return ActivityLogService.with_session(db)


__all__ = [
    "get_activity_log_service",
    "get_fee_settings_service",
    "get_mobile_money_service",
    "get_wallet_service",
]
