"""Fee domain exports"""

from .calculator import compute_fee, quote
from .models import FeeQuote, FeeSettings
from .repository import FeeSettingsProvider, FeeSettingsStore, StaticFeeSettingsProvider
from .service import FeeSettingsService

__all__ = [
    "FeeQuote",
    "FeeSettings",
    "FeeSettingsProvider",
    "FeeSettingsService",
    "FeeSettingsStore",
    "StaticFeeSettingsProvider",
    "compute_fee",
    "quote",
]
