"""Account summaries and transaction detail for linked banks.

Balances and transactions are read live from Plaid using the access token
stored on each bank record; nothing here is persisted.
"""

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from integrations.plaid_client import PlaidClient
from schemas.account import AccountDetail, AccountSummary, AccountsOverview, Transaction
from schemas.bank import BankAccount
from services.bank_service import BankService
from services.results import ActionError, ActionResult, ErrorKind, classify_exception

logger = logging.getLogger(__name__)


class AccountService:
    """Builds account views from bank records plus Plaid data."""

    def __init__(self, plaid: PlaidClient, bank_service: BankService):
        self._plaid = plaid
        self._bank_service = bank_service

    def get_accounts(self, user_id: str) -> ActionResult[AccountsOverview]:
        """Summaries of every bank linked by ``user_id`` plus totals."""
        banks_result = self._bank_service.get_banks(user_id)
        if not banks_result.is_ok:
            return ActionResult.fail(banks_result.error, banks_result.message)

        try:
            accounts = [self._summarize(bank) for bank in banks_result.value]
        except Exception as e:
            logger.error("Failed to build accounts for user %s: %s", user_id, e)
            return ActionResult.fail(classify_exception(e), str(e))

        total_current_balance = sum((a.current_balance for a in accounts), Decimal("0"))
        return ActionResult.ok(
            AccountsOverview(
                data=accounts,
                total_banks=len(accounts),
                total_current_balance=total_current_balance,
            )
        )

    def get_account(self, appwrite_item_id: str) -> ActionResult[AccountDetail]:
        """One bank's account summary and its transactions, newest first."""
        bank_result = self._bank_service.get_bank(appwrite_item_id)
        if not bank_result.is_ok:
            return ActionResult.fail(bank_result.error, bank_result.message)
        bank = bank_result.value

        try:
            summary = self._summarize(bank)
            raw_transactions = self._plaid.get_transactions(bank.access_token)
        except Exception as e:
            logger.error("Failed to get account %s: %s", appwrite_item_id, e)
            return ActionResult.fail(classify_exception(e), str(e))

        transactions = [
            self._map_transaction(txn)
            for txn in raw_transactions
            if txn.get("account_id") == bank.account_id
        ]
        transactions.sort(key=lambda t: t.date, reverse=True)
        return ActionResult.ok(AccountDetail(data=summary, transactions=transactions))

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def _summarize(self, bank: BankAccount) -> AccountSummary:
        """Fetch the bank's Plaid account and institution and map them."""
        response = self._plaid.get_accounts(bank.access_token)
        accounts = response["accounts"]
        if not accounts:
            raise ActionError(ErrorKind.NOT_FOUND, f"Item {bank.bank_id} has no accounts")

        # Prefer the account recorded at link time; fall back to the first one
        account = next(
            (a for a in accounts if a.get("account_id") == bank.account_id),
            accounts[0],
        )

        institution_id = response["item"].get("institution_id")
        institution = self._plaid.get_institution(institution_id) if institution_id else {}

        balances = account.get("balances") or {}
        summary = AccountSummary(
            id=account["account_id"],
            available_balance=self._to_decimal(balances.get("available")),
            current_balance=self._to_decimal(balances.get("current")),
            institution_id=institution.get("institution_id") or institution_id,
            name=account.get("name") or "",
            official_name=account.get("official_name"),
            mask=account.get("mask"),
            type=str(account.get("type") or ""),
            subtype=str(account["subtype"]) if account.get("subtype") else None,
            appwrite_item_id=bank.id,
            shareable_id=bank.shareable_id,
        )
        return summary

    def _map_transaction(self, txn: dict) -> Transaction:
        """Map a Plaid transaction to the dashboard shape."""
        category = ""
        pfc = txn.get("personal_finance_category") or {}
        if pfc.get("primary"):
            category = pfc["primary"]
        elif txn.get("category"):
            category = txn["category"][0]

        txn_date = txn.get("date")
        if isinstance(txn_date, (date, datetime)):
            txn_date = txn_date.isoformat()

        channel = txn.get("payment_channel")
        return Transaction(
            id=txn.get("transaction_id", ""),
            name=txn.get("name") or txn.get("merchant_name") or "",
            payment_channel=str(channel) if channel else None,
            type=str(channel) if channel else None,
            account_id=txn.get("account_id", ""),
            amount=self._to_decimal(txn.get("amount")),
            pending=bool(txn.get("pending")),
            category=category,
            date=txn_date or "",
            image=txn.get("logo_url"),
        )

    @staticmethod
    def _to_decimal(value) -> Decimal:
        """Convert a value to Decimal, treating missing or bad values as zero."""
        if value is None:
            return Decimal("0")
        try:
            return Decimal(str(value))
        except (InvalidOperation, ValueError):
            return Decimal("0")
