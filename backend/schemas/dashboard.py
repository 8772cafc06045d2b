"""Dashboard view model."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.account import AccountSummary, Transaction
from schemas.user import User


class TransactionPage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    total_pages: int = Field(alias="totalPages")
    items: list[Transaction]


class DashboardResponse(BaseModel):
    """Everything the home page renders for the signed-in user."""

    model_config = ConfigDict(populate_by_name=True)

    greeting_name: str = Field(alias="greetingName")
    user: Optional[User] = None
    accounts: list[AccountSummary]
    total_banks: int = Field(alias="totalBanks")
    total_current_balance: Decimal = Field(alias="totalCurrentBalance")
    appwrite_item_id: str = Field(alias="appwriteItemId")
    selected_account: Optional[AccountSummary] = Field(default=None, alias="selectedAccount")
    recent_transactions: TransactionPage = Field(alias="recentTransactions")
    # Sidebar shows at most two bank cards
    sidebar_banks: list[AccountSummary] = Field(alias="sidebarBanks")
    # Sidebar spending breakdown uses every transaction of the selected account
    transactions: list[Transaction]
