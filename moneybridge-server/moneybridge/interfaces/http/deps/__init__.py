"""Reusable FastAPI dependencies."""

from .database import get_db_session
from .account import get_account_service
from .services import (
    get_activity_log_service,
    get_fee_settings_service,
    get_mobile_money_service,
    get_wallet_service,
)

__all__ = [
    "get_db_session",
    "get_account_service",
    "get_activity_log_service",
    "get_fee_settings_service",
    "get_mobile_money_service",
    "get_wallet_service",
]
