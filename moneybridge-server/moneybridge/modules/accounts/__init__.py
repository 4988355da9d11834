"""Account domain exports."""

from .exceptions import AccountAlreadyExistsError, AccountNotFoundError
from .models import ADMIN_ROLES, Account, AccountCreateInput
from .service import AccountService

__all__ = [
    "ADMIN_ROLES",
    "Account",
    "AccountAlreadyExistsError",
    "AccountCreateInput",
    "AccountNotFoundError",
    "AccountService",
]
