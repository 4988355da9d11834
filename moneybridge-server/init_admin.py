"""
Create the default super admin account for first login.
"""
import asyncio

from sqlalchemy import select

from moneybridge.db.models import Account
from moneybridge.infrastructure.database import get_session, init_db
from moneybridge.modules.accounts import AccountCreateInput, AccountService


async def create_default_admin():
    """Create the default admin unless one already exists."""
    await init_db()

    async for db in get_session():
        stmt = select(Account).where(Account.role.in_(["admin", "super_admin"])).limit(1)
        result = await db.execute(stmt)
        if result.scalar_one_or_none():
            print("Admin account already exists, nothing to do")
            return

        service = AccountService.with_session(db)
        await service.create_account(
            AccountCreateInput(
                username="admin",
                password="admin123",
                name="Administrator",
                role="super_admin",
                email="admin@example.com",
                is_active=True,
            )
        )

        print("=" * 50)
        print("Default admin account created")
        print("=" * 50)
        print("username: admin")
        print("password: admin123")
        print("=" * 50)
        print("Change the password after the first login!")
        print("=" * 50)


if __name__ == "__main__":
    asyncio.run(create_default_admin())
