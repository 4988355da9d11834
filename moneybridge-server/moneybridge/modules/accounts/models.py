"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

ADMIN_ROLES = frozenset({"admin", "super_admin"})


@dataclass(slots=True)
class Account:
    id: str
    username: str
    role: str
    is_active: bool
    password_hash: str = field(default="", repr=False)
    name: Optional[str] = None
    email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def is_super_admin(self) -> bool:
        return self.role == "super_admin"

    @property
    def display_name(self) -> str:
        return self.name or self.username


@dataclass(slots=True)
class AccountCreateInput:
    username: str
    password: str
    name: Optional[str] = None
    role: str = "user"
    email: Optional[str] = None
    is_active: bool = True
