"""Domain services for account management."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from moneybridge.core.config import get_settings
from moneybridge.core.crypto import hash_password, verify_password
from moneybridge.modules.activity.models import ActivityAction
from moneybridge.modules.activity.repository import AuditLog
from moneybridge.modules.common.exceptions import ForbiddenError, ValidationError
from moneybridge.modules.common.pagination import Page, PageRequest

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import ADMIN_ROLES, Account, AccountCreateInput
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(
        self,
        repository: AccountRepository,
        currency: str = "BDT",
        audit: AuditLog | None = None,
    ) -> None:
        self._repository = repository
        self._currency = currency
        self._audit = audit

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        from moneybridge.infrastructure.database.repositories.account_repository import SqlAccountRepository
        from moneybridge.infrastructure.database.repositories.activity_log_repository import SqlActivityLog

        return cls(
            SqlAccountRepository(session),
            currency=get_settings().mobile_money.currency,
            audit=SqlActivityLog(session),
        )

    async def get_by_id(self, account_id: str) -> Account | None:
        return await self._repository.get_by_id(account_id)

    async def require(self, account_id: str) -> Account:
        account = await self._repository.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def authenticate(self, username: str, password: str) -> Account | None:
        account = await self._repository.get_by_username(username)
        if account is None or not account.is_active:
            return None
        if not verify_password(password, account.password_hash):
            return None
        await self._repository.set_last_login(account.id, datetime.now(timezone.utc))
        return account

    async def create_account(self, payload: AccountCreateInput) -> Account:
        """Create an account together with its empty wallet."""
        if await self._repository.get_by_username(payload.username) is not None:
            raise AccountAlreadyExistsError(f"Username already taken: {payload.username}", username=payload.username)
        if payload.email and await self._repository.get_by_email(payload.email) is not None:
            raise AccountAlreadyExistsError(f"Email already registered: {payload.email}", email=payload.email)

        account = await self._repository.create_account(
            username=payload.username,
            password_hash=hash_password(payload.password),
            role=payload.role,
            name=payload.name,
            email=payload.email,
            is_active=payload.is_active,
            currency=self._currency,
        )
        logger.info("Account %s created (role=%s)", account.username, account.role)
        return account

    async def list_accounts(self, page: PageRequest, search: str | None = None) -> Page[Account]:
        """Non-admin accounts, newest first, optionally filtered by username, name or email."""
        items, total = await self._repository.list_accounts(
            search=search or None,
            exclude_roles=ADMIN_ROLES,
            limit=page.limit,
            offset=page.offset,
        )
        return Page(items=list(items), page=page.page, limit=page.limit, total=total)

    async def toggle_status(self, admin: Account, account_id: str) -> Account:
        """Flip ``is_active`` on a regular account. Admin accounts are never toggled."""
        if not admin.is_admin():
            raise ForbiddenError("Admin access required", account_id=admin.id)
        target = await self.require(account_id)
        if target.id == admin.id:
            raise ValidationError("You cannot change your own status", account_id=account_id)
        if target.is_admin():
            raise ForbiddenError("Cannot change status of admin accounts", account_id=account_id)

        updated = await self._repository.set_active(account_id, not target.is_active)
        if updated is None:
            raise AccountNotFoundError(account_id)
        if self._audit is not None:
            await self._audit.append(
                account_id=admin.id,
                action=ActivityAction.ACCOUNT_STATUS_CHANGED,
                entity="account",
                entity_id=account_id,
                description=f"Account {updated.username} {'activated' if updated.is_active else 'deactivated'}",
                metadata={"before": target.is_active, "after": updated.is_active},
            )
        logger.info(
            "Account %s %s by admin %s",
            updated.username,
            "activated" if updated.is_active else "deactivated",
            admin.id,
        )
        return updated
