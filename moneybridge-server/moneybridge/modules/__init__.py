"""Domain modules and their public exports."""

from . import accounts, activity, common, fees, mobile_money, wallets

__all__ = [
    "accounts",
    "activity",
    "common",
    "fees",
    "mobile_money",
    "wallets",
]
