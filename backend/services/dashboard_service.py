"""Home dashboard composition."""

import logging
import math
from typing import Optional

from integrations.appwrite_client import SessionContext
from schemas.dashboard import DashboardResponse, TransactionPage
from services.account_service import AccountService
from services.user_service import UserService

logger = logging.getLogger(__name__)

ROWS_PER_PAGE = 10
SIDEBAR_BANK_LIMIT = 2


class DashboardService:
    """Resolves user -> accounts -> selected account -> transactions."""

    def __init__(self, user_service: UserService, account_service: AccountService):
        self._user_service = user_service
        self._account_service = account_service

    def compose(
        self,
        session: SessionContext,
        account_selector: Optional[str] = None,
        page: int = 1,
    ) -> Optional[DashboardResponse]:
        """Build the dashboard for the session's user.

        Args:
            session: The caller's session.
            account_selector: Bank record id to show; defaults to the first
                account, as does an id the user does not own.
            page: 1-based page of recent transactions.

        Returns:
            The dashboard, or ``None`` when there is no user or no linked account.
        """
        user = self._user_service.get_logged_in_user(session).unwrap_or_none()
        if user is None:
            return None

        overview = self._account_service.get_accounts(user.id).unwrap_or_none()
        if overview is None or not overview.data:
            logger.debug("No accounts to show for user %s", user.id)
            return None

        owned_ids = {account.appwrite_item_id for account in overview.data}
        if account_selector and account_selector not in owned_ids:
            logger.warning(
                "User %s asked for bank %s they do not own; showing first account",
                user.id,
                account_selector,
            )
            account_selector = None
        appwrite_item_id = account_selector or overview.data[0].appwrite_item_id
        detail = self._account_service.get_account(appwrite_item_id).unwrap_or_none()
        transactions = detail.transactions if detail else []

        total_pages = math.ceil(len(transactions) / ROWS_PER_PAGE)
        start = (page - 1) * ROWS_PER_PAGE

        return DashboardResponse(
            greeting_name=user.full_name.strip() or "Guest",
            user=user,
            accounts=overview.data,
            total_banks=overview.total_banks,
            total_current_balance=overview.total_current_balance,
            appwrite_item_id=appwrite_item_id,
            selected_account=detail.data if detail else None,
            recent_transactions=TransactionPage(
                page=page,
                total_pages=total_pages,
                items=transactions[start:start + ROWS_PER_PAGE],
            ),
            sidebar_banks=overview.data[:SIDEBAR_BANK_LIMIT],
            transactions=transactions,
        )
