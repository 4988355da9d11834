"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from sqlalchemy import desc, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.db.models import Account as AccountModel, Wallet as WalletModel, utcnow
from moneybridge.modules.accounts.models import Account


class SqlAccountRepository:
    """Account repository backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._first(select(AccountModel).where(AccountModel.id == account_id))

    async def get_by_username(self, username: str) -> Account | None:
        return await self._first(select(AccountModel).where(AccountModel.username == username))

    async def get_by_email(self, email: str) -> Account | None:
        return await self._first(select(AccountModel).where(AccountModel.email == email))

    async def create_account(
        self,
        *,
        username: str,
        password_hash: str,
        role: str,
        name: str | None,
        email: str | None,
        is_active: bool,
        currency: str,
    ) -> Account:
        model = AccountModel(
            username=username,
            password_hash=password_hash,
            role=role,
            name=name,
            email=email,
            is_active=is_active,
        )
        self._session.add(model)
        await self._session.flush()
        self._session.add(WalletModel(account_id=model.id, balance_cents=0, currency=currency))
        await self._session.flush()
        await self._session.refresh(model)
        return self.to_domain(model)

    async def set_last_login(self, account_id: str, timestamp: datetime) -> None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(last_login_at=timestamp)
        )
        await self._session.execute(stmt)

    async def set_active(self, account_id: str, is_active: bool) -> Account | None:
        stmt = (
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(is_active=is_active, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)
        return await self._first(
            select(AccountModel)
            .where(AccountModel.id == account_id)
            .execution_options(populate_existing=True)
        )

    async def list_accounts(
        self,
        *,
        search: str | None,
        exclude_roles: Iterable[str],
        limit: int,
        offset: int,
    ) -> tuple[Sequence[Account], int]:
        conditions = []
        excluded = list(exclude_roles)
        if excluded:
            conditions.append(AccountModel.role.not_in(excluded))
        if search:
            pattern = f"%{search.strip()}%"
            conditions.append(
                or_(
                    AccountModel.username.ilike(pattern),
                    AccountModel.name.ilike(pattern),
                    AccountModel.email.ilike(pattern),
                )
            )

        stmt = (
            select(AccountModel)
            .where(*conditions)
            .order_by(desc(AccountModel.created_at), desc(AccountModel.id))
            .limit(limit)
            .offset(offset)
        )
        result = await self._session.execute(stmt)
        items = [self.to_domain(model) for model in result.scalars().all()]

        total = await self._session.scalar(select(func.count()).select_from(AccountModel).where(*conditions))
        return items, int(total or 0)

    async def _first(self, stmt) -> Account | None:
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self.to_domain(model) if model is not None else None

    @staticmethod
    def to_domain(model: AccountModel) -> Account:
        return Account(
            id=str(model.id),
            username=model.username,
            role=model.role or "user",
            is_active=bool(model.is_active),
            password_hash=model.password_hash,
            name=model.name,
            email=model.email,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )
