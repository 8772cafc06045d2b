"""Shared FastAPI dependencies.

Every external client and service is provided through a function here so
tests can swap it with ``app.dependency_overrides``.
"""

from functools import lru_cache

from fastapi import Depends, HTTPException, Request

from config import settings
from integrations.appwrite_client import AppwriteGateway, SessionContext
from integrations.dwolla_client import DwollaClient
from integrations.plaid_client import PlaidClient
from schemas.user import User
from services.account_service import AccountService
from services.bank_service import BankService
from services.dashboard_service import DashboardService
from services.link_service import LinkService
from services.results import ActionResult, ErrorKind
from services.revalidation import ViewRevalidator, view_revalidator
from services.user_service import UserService

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.AMBIGUOUS: 404,
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.UPSTREAM: 502,
    ErrorKind.INVARIANT: 500,
}


def raise_for_result(result: ActionResult, detail: str) -> None:
    """Raise an HTTPException for a failed action; do nothing on success."""
    if result.is_ok:
        return
    status_code = _STATUS_BY_KIND.get(result.error, 500)
    payload = {"message": detail, "error": result.error.value}
    if result.step:
        payload["step"] = result.step
    raise HTTPException(status_code=status_code, detail=payload)


# ------------------------------------------------------------------
# External clients
# ------------------------------------------------------------------


def get_appwrite_gateway() -> AppwriteGateway:
    return AppwriteGateway()


@lru_cache
def get_plaid_client() -> PlaidClient:
    return PlaidClient()


@lru_cache
def get_dwolla_client() -> DwollaClient:
    return DwollaClient()


def get_revalidator() -> ViewRevalidator:
    return view_revalidator


# ------------------------------------------------------------------
# Session
# ------------------------------------------------------------------


def get_session_context(request: Request) -> SessionContext:
    """Read the session cookie into an explicit SessionContext."""
    return SessionContext(secret=request.cookies.get(settings.SESSION_COOKIE_NAME))


# ------------------------------------------------------------------
# Services
# ------------------------------------------------------------------


def get_user_service(
    gateway: AppwriteGateway = Depends(get_appwrite_gateway),
    dwolla: DwollaClient = Depends(get_dwolla_client),
) -> UserService:
    return UserService(gateway, dwolla)


def get_bank_service(
    gateway: AppwriteGateway = Depends(get_appwrite_gateway),
) -> BankService:
    return BankService(gateway)


def get_link_service(
    plaid: PlaidClient = Depends(get_plaid_client),
    dwolla: DwollaClient = Depends(get_dwolla_client),
    bank_service: BankService = Depends(get_bank_service),
    revalidator: ViewRevalidator = Depends(get_revalidator),
) -> LinkService:
    return LinkService(plaid, dwolla, bank_service, revalidator)


def get_account_service(
    plaid: PlaidClient = Depends(get_plaid_client),
    bank_service: BankService = Depends(get_bank_service),
) -> AccountService:
    return AccountService(plaid, bank_service)


def get_dashboard_service(
    user_service: UserService = Depends(get_user_service),
    account_service: AccountService = Depends(get_account_service),
) -> DashboardService:
    return DashboardService(user_service, account_service)


def require_user(
    session: SessionContext = Depends(get_session_context),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """The signed-in user, or 401."""
    user = user_service.get_logged_in_user(session).unwrap_or_none()
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return user
