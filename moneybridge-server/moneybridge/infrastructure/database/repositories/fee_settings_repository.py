"""SQLAlchemy-backed provider for the active fee schedule."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import desc, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.db.models import FeeSettings as FeeSettingsModel
from moneybridge.modules.common.clock import ensure_utc
from moneybridge.modules.fees.models import FeeSettings

logger = logging.getLogger(__name__)


class SqlFeeSettingsProvider:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_active_fee_settings(self) -> FeeSettings | None:
        stmt = (
            select(FeeSettingsModel)
            .where(FeeSettingsModel.is_active.is_(True))
            .order_by(desc(FeeSettingsModel.created_at))
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self.to_domain(model) if model is not None else None

    async def activate(
        self,
        *,
        mobile_money_fee_percent: Decimal | str | float,
        minimum_fee_cents: int = 0,
        maximum_fee_cents: int = 0,
        transfer_fee_percent: Decimal | str | float = 0,
    ) -> FeeSettings:
        """Insert a new active schedule and retire the previous one."""
        # validate before touching the table
        FeeSettings(
            mobile_money_fee_percent=Decimal(str(mobile_money_fee_percent)),
            minimum_fee_cents=minimum_fee_cents,
            maximum_fee_cents=maximum_fee_cents,
            transfer_fee_percent=Decimal(str(transfer_fee_percent)),
        )
        await self._session.execute(
            update(FeeSettingsModel)
            .where(FeeSettingsModel.is_active.is_(True))
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        model = FeeSettingsModel(
            mobile_money_fee_percent=float(mobile_money_fee_percent),
            transfer_fee_percent=float(transfer_fee_percent),
            minimum_fee_cents=minimum_fee_cents,
            maximum_fee_cents=maximum_fee_cents,
            is_active=True,
        )
        self._session.add(model)
        await self._session.flush()
        logger.info(
            "Activated fee settings %s: %s%% (min=%s, max=%s)",
            model.id,
            mobile_money_fee_percent,
            minimum_fee_cents,
            maximum_fee_cents,
        )
        return self.to_domain(model)

    @staticmethod
    def to_domain(model: FeeSettingsModel) -> FeeSettings:
        # Float column; go through str so 1.8 stays 1.8
        return FeeSettings(
            mobile_money_fee_percent=Decimal(str(model.mobile_money_fee_percent)),
            minimum_fee_cents=model.minimum_fee_cents or 0,
            maximum_fee_cents=model.maximum_fee_cents or 0,
            transfer_fee_percent=Decimal(str(model.transfer_fee_percent or 0)),
            id=model.id,
            created_at=ensure_utc(model.created_at),
        )
