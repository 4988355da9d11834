"""Provider protocols for the active fee schedule."""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from .models import FeeSettings


class FeeSettingsProvider(Protocol):
    async def get_active_fee_settings(self) -> FeeSettings | None:
        ...


class FeeSettingsStore(FeeSettingsProvider, Protocol):
    async def activate(
        self,
        *,
        mobile_money_fee_percent: Decimal | str | float,
        minimum_fee_cents: int = 0,
        maximum_fee_cents: int = 0,
        transfer_fee_percent: Decimal | str | float = 0,
    ) -> FeeSettings:
        """Make a new schedule the active one."""
        ...


class StaticFeeSettingsProvider:
    """Serves a fixed schedule; used by tests."""

    def __init__(self, settings: FeeSettings | None) -> None:
        self._settings = settings

    async def get_active_fee_settings(self) -> FeeSettings | None:
        return self._settings
