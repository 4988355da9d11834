"""Domain models for fee configuration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from moneybridge.modules.common.exceptions import ConfigurationError


@dataclass(slots=True, frozen=True)
class FeeSettings:
    """Admin-configured fee schedule. Amounts are in cents, zero disables a bound."""

    mobile_money_fee_percent: Decimal
    minimum_fee_cents: int = 0
    maximum_fee_cents: int = 0
    transfer_fee_percent: Decimal = Decimal("0")
    id: Optional[str] = None
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not Decimal("0") <= self.mobile_money_fee_percent <= Decimal("100"):
            raise ConfigurationError(
                "Mobile money fee percent must be between 0 and 100",
                mobile_money_fee_percent=str(self.mobile_money_fee_percent),
            )
        if self.minimum_fee_cents < 0 or self.maximum_fee_cents < 0:
            raise ConfigurationError("Fee bounds cannot be negative")
        if self.maximum_fee_cents > 0 and self.minimum_fee_cents > self.maximum_fee_cents:
            raise ConfigurationError(
                "Minimum fee cannot exceed maximum fee",
                minimum_fee_cents=self.minimum_fee_cents,
                maximum_fee_cents=self.maximum_fee_cents,
            )


@dataclass(slots=True, frozen=True)
class FeeQuote:
    amount_cents: int
    fee_cents: int

    @property
    def total_cents(self) -> int:
        return self.amount_cents + self.fee_cents
