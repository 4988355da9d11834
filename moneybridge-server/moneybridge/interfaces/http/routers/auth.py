"""Authentication endpoints for web and mobile clients."""
from fastapi import APIRouter, Depends, HTTPException, status

from moneybridge.core.security import create_access_token, get_current_account
from moneybridge.interfaces.http.deps import get_account_service
from moneybridge.modules.accounts import Account as AccountDomain, AccountCreateInput, AccountService
from moneybridge.schemas import AccountLoginResponse, AccountResponse, LoginRequest, RegisterRequest

router = APIRouter()


def _login_response(account: AccountDomain) -> AccountLoginResponse:
    return AccountLoginResponse(
        access_token=create_access_token(account.id, account.username, account.role),
        account_id=account.id,
        username=account.username,
        role=account.role,
        is_admin=account.is_admin(),
    )


@router.post("/login", response_model=AccountLoginResponse, summary="Log in with username and password")
async def login(
    payload: LoginRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AccountLoginResponse:
    account = await account_service.authenticate(payload.username, payload.password)
    if not account:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return _login_response(account)


@router.post(
    "/register",
    response_model=AccountLoginResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user account with an empty wallet",
)
async def register(
    payload: RegisterRequest,
    account_service: AccountService = Depends(get_account_service),
) -> AccountLoginResponse:
    # self-service sign-up always yields a plain user
    account = await account_service.create_account(
        AccountCreateInput(
            username=payload.username,
            password=payload.password,
            name=payload.name,
            email=payload.email,
            role="user",
        )
    )
    return _login_response(account)


@router.get("/me", response_model=AccountResponse, summary="Current account")
async def me(account: AccountDomain = Depends(get_current_account)) -> AccountResponse:
    return AccountResponse.model_validate(account)
