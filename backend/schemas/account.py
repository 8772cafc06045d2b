"""Pydantic schemas for account summaries and transactions.

These are derived from Plaid data on every request and never stored.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountSummary(BaseModel):
    """One linked bank account with live balances."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    available_balance: Decimal = Field(alias="availableBalance")
    current_balance: Decimal = Field(alias="currentBalance")
    institution_id: Optional[str] = Field(default=None, alias="institutionId")
    name: str
    official_name: Optional[str] = Field(default=None, alias="officialName")
    mask: Optional[str] = None
    type: str
    subtype: Optional[str] = None
    appwrite_item_id: str = Field(alias="appwriteItemId")
    shareable_id: str = Field(alias="sharableId")


class Transaction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    payment_channel: Optional[str] = Field(default=None, alias="paymentChannel")
    type: Optional[str] = None
    account_id: str = Field(alias="accountId")
    amount: Decimal
    pending: bool = False
    category: str = ""
    date: str
    image: Optional[str] = None


class AccountsOverview(BaseModel):
    """All of a user's linked accounts plus totals."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[AccountSummary]
    total_banks: int = Field(alias="totalBanks")
    total_current_balance: Decimal = Field(alias="totalCurrentBalance")


class AccountDetail(BaseModel):
    """One account with its transactions, newest first."""

    data: AccountSummary
    transactions: list[Transaction]
