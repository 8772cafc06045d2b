"""Plaid Link API endpoints.

Server side of the browser-based Link flow: creating link tokens for the
signed-in user and exchanging the resulting public token for a funded,
stored bank account.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from api.dependencies import get_link_service, get_plaid_client, raise_for_result, require_user
from integrations.plaid_client import PlaidClient
from schemas.bank import BankAccountResponse
from schemas.user import User
from services.link_service import LinkService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/plaid", tags=["plaid"])


# ------------------------------------------------------------------
# Request / Response schemas
# ------------------------------------------------------------------


class LinkTokenResponse(BaseModel):
    link_token: str


class ExchangeTokenRequest(BaseModel):
    public_token: str
    # Account picked in Link's account-select pane, if enabled
    account_id: str | None = None


class ExchangeTokenResponse(BaseModel):
    public_token_exchange: str = "complete"
    bank: BankAccountResponse


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@router.post("/link-token", response_model=LinkTokenResponse)
def create_link_token(
    user: User = Depends(require_user),
    client: PlaidClient = Depends(get_plaid_client),
    service: LinkService = Depends(get_link_service),
):
    """Create a Plaid Link token for the frontend."""
    if not client.is_configured():
        raise HTTPException(status_code=400, detail="Plaid is not configured")

    result = service.create_link_token(user)
    raise_for_result(result, "Failed to create link token")
    return LinkTokenResponse(link_token=result.value)


@router.post("/exchange-token", response_model=ExchangeTokenResponse)
def exchange_token(
    body: ExchangeTokenRequest,
    user: User = Depends(require_user),
    service: LinkService = Depends(get_link_service),
):
    """Exchange a Plaid Link public_token and store the resulting bank account."""
    result = service.exchange_public_token(body.public_token, user, body.account_id)
    raise_for_result(result, "Failed to exchange token")
    return ExchangeTokenResponse(bank=BankAccountResponse.from_bank(result.value.bank))
