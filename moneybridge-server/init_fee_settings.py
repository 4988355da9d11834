"""
Seed the active fee settings row (1.8% mobile-money fee, no bounds).
"""
import asyncio
import sys

from moneybridge.infrastructure.database import get_session, init_db
from moneybridge.infrastructure.database.repositories import SqlFeeSettingsProvider


async def seed_fee_settings(percent: str = "1.8", minimum_fee_cents: int = 0, maximum_fee_cents: int = 0):
    await init_db()

    async for db in get_session():
        provider = SqlFeeSettingsProvider(db)
        current = await provider.get_active_fee_settings()
        if current is not None and len(sys.argv) == 1:
            print(f"Active fee settings already present ({current.mobile_money_fee_percent}%), nothing to do")
            return

        settings = await provider.activate(
            mobile_money_fee_percent=percent,
            minimum_fee_cents=minimum_fee_cents,
            maximum_fee_cents=maximum_fee_cents,
        )
        print(
            f"Fee settings active: {settings.mobile_money_fee_percent}% "
            f"(min={settings.minimum_fee_cents}, max={settings.maximum_fee_cents} cents)"
        )


if __name__ == "__main__":
    # usage: python init_fee_settings.py [percent] [minimum_fee_cents] [maximum_fee_cents]
    args = sys.argv[1:]
    asyncio.run(
        seed_fee_settings(
            args[0] if len(args) > 0 else "1.8",
            int(args[1]) if len(args) > 1 else 0,
            int(args[2]) if len(args) > 2 else 0,
        )
    )
