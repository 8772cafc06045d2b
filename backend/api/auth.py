"""Authentication endpoints: sign-in, sign-up, current user, logout."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from api.dependencies import (
    get_dwolla_client,
    get_session_context,
    get_user_service,
    raise_for_result,
    require_user,
)
from config import settings
from integrations.appwrite_client import SessionContext
from integrations.dwolla_client import DwollaClient
from schemas.user import SignInParams, SignUpParams, User
from services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def set_session_cookie(response: Response, secret: str) -> None:
    """Issue the session cookie (path=/, HttpOnly, SameSite=Strict, Secure)."""
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        secret,
        path="/",
        httponly=True,
        samesite="strict",
        secure=True,
    )


@router.post("/sign-in", response_model=User)
def sign_in(
    body: SignInParams,
    response: Response,
    service: UserService = Depends(get_user_service),
):
    """Sign in with email and password."""
    result = service.sign_in(body)
    raise_for_result(result, "Invalid email or password")
    set_session_cookie(response, result.value.session_secret)
    return result.value.user


@router.post("/sign-up", response_model=User, status_code=status.HTTP_201_CREATED)
def sign_up(
    body: SignUpParams,
    response: Response,
    dwolla: DwollaClient = Depends(get_dwolla_client),
    service: UserService = Depends(get_user_service),
):
    """Register a new user and sign them in."""
    if not dwolla.is_configured():
        raise HTTPException(status_code=400, detail="Dwolla is not configured")

    result = service.sign_up(body)
    raise_for_result(result, "Sign-up failed")
    set_session_cookie(response, result.value.session_secret)
    return result.value.user


@router.get("/me", response_model=User)
def me(user: User = Depends(require_user)):
    """Return the signed-in user."""
    return user


@router.post("/logout")
def logout(
    response: Response,
    session: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service),
):
    """Drop the session cookie and invalidate the session server-side."""
    response.delete_cookie(
        settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="strict",
        secure=True,
    )
    result = service.logout_account(session)
    if not result.is_ok:
        logger.info("Server-side logout skipped: %s", result.message)
    return {"status": "ok"}
