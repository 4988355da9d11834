"""Pure fee arithmetic.

Fees are a percentage of the requested amount, clamped to the configured
minimum and maximum and rounded half-up to whole cents. Nothing here touches
storage, so the rules can be exercised with hand-built ``FeeSettings``.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from moneybridge.modules.common.exceptions import ConfigurationError, ValidationError

from .models import FeeQuote, FeeSettings

_HUNDRED = Decimal("100")
_ONE_CENT = Decimal("1")


def compute_fee(amount_cents: int, settings: FeeSettings | None) -> int:
    if settings is None:
        raise ConfigurationError("Fee settings not configured")
    if amount_cents < 0:
        raise ValidationError("Amount cannot be negative", amount_cents=amount_cents)

    fee = Decimal(amount_cents) * settings.mobile_money_fee_percent / _HUNDRED

    if settings.minimum_fee_cents > 0 and fee < settings.minimum_fee_cents:
        fee = Decimal(settings.minimum_fee_cents)
    elif settings.maximum_fee_cents > 0 and fee > settings.maximum_fee_cents:
        fee = Decimal(settings.maximum_fee_cents)

    return int(fee.quantize(_ONE_CENT, rounding=ROUND_HALF_UP))


def quote(amount_cents: int, settings: FeeSettings | None) -> FeeQuote:
    return FeeQuote(amount_cents=amount_cents, fee_cents=compute_fee(amount_cents, settings))


__all__ = ["compute_fee", "quote"]
