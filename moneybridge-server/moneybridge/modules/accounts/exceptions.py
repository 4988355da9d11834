"""Account domain specific exceptions."""

from moneybridge.modules.common.exceptions import NotFoundError, ValidationError


class AccountAlreadyExistsError(ValidationError):
    """Raised when attempting to create an account with duplicate username or email."""

    code = "account_exists"


class AccountNotFoundError(NotFoundError):
    """Raised when the requested account cannot be found."""

    code = "account_not_found"

    def __init__(self, account_id: str) -> None:
        super().__init__(f"Account not found: {account_id}", account_id=account_id)
