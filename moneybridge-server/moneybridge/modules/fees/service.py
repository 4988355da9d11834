"""Fee schedule administration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.modules.accounts.models import Account
from moneybridge.modules.common.exceptions import ConfigurationError, ForbiddenError, ValidationError

from .models import FeeSettings
from .repository import FeeSettingsStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FeeSettingsService:
    store: FeeSettingsStore

    @classmethod
    def with_session(cls, session: AsyncSession) -> "FeeSettingsService":
        from moneybridge.infrastructure.database.repositories.fee_settings_repository import SqlFeeSettingsProvider

        return cls(SqlFeeSettingsProvider(session))

    async def current(self) -> FeeSettings:
        settings = await self.store.get_active_fee_settings()
        if settings is None:
            raise ConfigurationError("Fee settings not configured")
        return settings

    async def update(
        self,
        admin: Account,
        *,
        mobile_money_fee_percent: Decimal | str | float,
        minimum_fee_cents: int = 0,
        maximum_fee_cents: int = 0,
        transfer_fee_percent: Decimal | str | float = 0,
    ) -> FeeSettings:
        if not admin.is_admin():
            raise ForbiddenError("Admin access required", account_id=admin.id)
        try:
            settings = await self.store.activate(
                mobile_money_fee_percent=Decimal(str(mobile_money_fee_percent)),
                minimum_fee_cents=minimum_fee_cents,
                maximum_fee_cents=maximum_fee_cents,
                transfer_fee_percent=Decimal(str(transfer_fee_percent)),
            )
        except InvalidOperation as exc:
            raise ValidationError("Fee percent must be a number", mobile_money_fee_percent=str(mobile_money_fee_percent)) from exc
        except ConfigurationError as exc:
            # bad values from an admin form are input errors, not a broken deployment
            raise ValidationError(exc.message, **exc.details) from exc
        logger.info("Fee settings updated by %s", admin.username)
        return settings
