"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .activity_log_repository import SqlActivityLog
from .fee_settings_repository import SqlFeeSettingsProvider
from .mobile_money_repository import SqlMobileMoneyRequestRepository
from .wallet_repository import SqlLedgerStore

__all__ = [
    "SqlAccountRepository",
    "SqlActivityLog",
    "SqlFeeSettingsProvider",
    "SqlMobileMoneyRequestRepository",
    "SqlLedgerStore",
]
