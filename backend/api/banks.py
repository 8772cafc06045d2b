"""Bank record endpoints.

Read-only views over the signed-in user's stored bank accounts.  Records
owned by someone else are reported as not found.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_bank_service, raise_for_result, require_user
from schemas.bank import BankAccount, BankAccountResponse
from schemas.user import User
from services.bank_service import BankService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/banks", tags=["banks"])


def _owned(bank: BankAccount, user: User) -> BankAccountResponse:
    if bank.user_id != user.id:
        raise HTTPException(status_code=404, detail="Bank not found")
    return BankAccountResponse.from_bank(bank)


@router.get("", response_model=list[BankAccountResponse])
def list_banks(
    user: User = Depends(require_user),
    service: BankService = Depends(get_bank_service),
):
    """List the signed-in user's banks."""
    result = service.get_banks(user.id)
    raise_for_result(result, "Failed to list banks")
    return [BankAccountResponse.from_bank(bank) for bank in result.value]


@router.get("/by-account/{account_id}", response_model=BankAccountResponse)
def get_bank_by_account_id(
    account_id: str,
    user: User = Depends(require_user),
    service: BankService = Depends(get_bank_service),
):
    """Look up a bank by its Plaid account id (exactly one match required)."""
    result = service.get_bank_by_account_id(account_id)
    raise_for_result(result, f"Bank not found for account: {account_id}")
    return _owned(result.value, user)


@router.get("/{document_id}", response_model=BankAccountResponse)
def get_bank(
    document_id: str,
    user: User = Depends(require_user),
    service: BankService = Depends(get_bank_service),
):
    """Look up a bank by its record id."""
    result = service.get_bank(document_id)
    raise_for_result(result, f"Bank not found: {document_id}")
    return _owned(result.value, user)
