"""Bank link handshake.

Linking a bank is a strictly sequential pipeline of upstream calls::

    exchange_public_token -> select_account -> create_processor_token
        -> add_funding_source -> create_bank_account -> revalidate

Only ``create_bank_account`` writes locally, and it runs last, so a
failure anywhere earlier leaves no bank record behind.  Upstream side
effects of completed steps are undone in reverse order according to each
step's :class:`CompensationPolicy`; an undo that itself fails is logged
as needing manual reconciliation.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from config import settings
from integrations.dwolla_client import DwollaClient
from integrations.plaid_client import PlaidClient
from schemas.bank import BankAccount, BankAccountCreate
from schemas.user import User
from services.bank_service import BankService
from services.results import (
    ActionError,
    ActionResult,
    ErrorKind,
    InvariantError,
    classify_exception,
)
from services.revalidation import ViewRevalidator, view_revalidator
from utils.ids import encrypt_id

logger = logging.getLogger(__name__)

ROOT_PATH = "/"


class AccountSelectionPolicy(str, Enum):
    """Which account of a freshly linked Item becomes the bank record."""

    FIRST = "first"
    REJECT_IF_MULTIPLE = "reject_if_multiple"
    EXPLICIT = "explicit"


class CompensationPolicy(str, Enum):
    """What happens to a completed step when a later step fails."""

    NO_ROLLBACK_NEEDED = "no_rollback_needed"
    BEST_EFFORT_UNDO = "best_effort_undo"
    MANUAL_RECONCILIATION_REQUIRED = "manual_reconciliation_required"


STEP_POLICIES: dict[str, CompensationPolicy] = {
    "exchange_public_token": CompensationPolicy.BEST_EFFORT_UNDO,
    "select_account": CompensationPolicy.NO_ROLLBACK_NEEDED,
    # Processor tokens die with the Item, so undoing the exchange covers them
    "create_processor_token": CompensationPolicy.NO_ROLLBACK_NEEDED,
    "add_funding_source": CompensationPolicy.BEST_EFFORT_UNDO,
    "create_bank_account": CompensationPolicy.NO_ROLLBACK_NEEDED,
    "revalidate": CompensationPolicy.NO_ROLLBACK_NEEDED,
}


@dataclass
class HandshakeOutcome:
    bank: BankAccount
    completed_steps: list[str]


@dataclass
class _Saga:
    """Runs named steps in order and remembers how to undo them."""

    completed: list[str] = field(default_factory=list)
    _undo: list[tuple[str, Callable[[], None]]] = field(default_factory=list)
    needs_reconciliation: list[str] = field(default_factory=list)

    def run(
        self,
        step: str,
        fn: Callable[[], Any],
        undo: Optional[Callable[[Any], None]] = None,
    ) -> Any:
        """Run one step; ``undo`` receives the step's result if it must be rolled back."""
        result = fn()
        self.completed.append(step)
        policy = STEP_POLICIES[step]
        if policy == CompensationPolicy.BEST_EFFORT_UNDO and undo is not None and result:
            self._undo.append((step, lambda: undo(result)))
        return result

    def compensate(self) -> None:
        for step, undo in reversed(self._undo):
            try:
                undo()
                logger.info("Compensated handshake step %s", step)
            except Exception as e:
                logger.error(
                    "Could not undo handshake step %s (%s): %s",
                    step,
                    CompensationPolicy.MANUAL_RECONCILIATION_REQUIRED.value,
                    e,
                )
                self.needs_reconciliation.append(step)


class LinkService:
    """Plaid Link token creation and the public-token handshake."""

    def __init__(
        self,
        plaid: PlaidClient,
        dwolla: DwollaClient,
        bank_service: BankService,
        revalidator: ViewRevalidator = view_revalidator,
        selection_policy: AccountSelectionPolicy | str | None = None,
    ):
        self._plaid = plaid
        self._dwolla = dwolla
        self._bank_service = bank_service
        self._revalidator = revalidator
        self._selection_policy = AccountSelectionPolicy(
            selection_policy or settings.ACCOUNT_SELECTION_POLICY
        )

    def create_link_token(self, user: User) -> ActionResult[str]:
        """Request a Link token for ``user``; single attempt, no retry."""
        try:
            token = self._plaid.create_link_token(
                client_user_id=user.id, client_name=user.full_name
            )
        except Exception as e:
            logger.error("Failed to create link token for user %s: %s", user.id, e)
            return ActionResult.fail(classify_exception(e), str(e))
        return ActionResult.ok(token)

    def exchange_public_token(
        self,
        public_token: str,
        user: User,
        account_id: str | None = None,
    ) -> ActionResult[HandshakeOutcome]:
        """Turn a Link ``public_token`` into a funded, stored bank account.

        Args:
            public_token: Token from Plaid Link's onSuccess callback.
            user: The signed-in user (must have a Dwolla customer).
            account_id: Account chosen in Link, if the client passed one.
        """
        saga = _Saga()
        step = "exchange_public_token"
        try:
            exchange = saga.run(
                step,
                lambda: self._plaid.exchange_public_token(public_token),
                undo=lambda result: self._plaid.remove_item(result["access_token"]),
            )
            access_token = exchange["access_token"]
            item_id = exchange["item_id"]

            step = "select_account"
            account = saga.run(
                step,
                lambda: self._select_account(
                    self._plaid.get_accounts(access_token)["accounts"], account_id
                ),
            )

            step = "create_processor_token"
            processor_token = saga.run(
                step,
                lambda: self._plaid.create_processor_token(
                    access_token, account["account_id"], processor="dwolla"
                ),
            )

            step = "add_funding_source"
            if not user.dwolla_customer_id:
                raise InvariantError(f"User {user.id} has no Dwolla customer")
            funding_source_url = saga.run(
                step,
                lambda: self._dwolla.add_funding_source(
                    user.dwolla_customer_id, processor_token, account["name"]
                ),
                undo=self._dwolla.remove_funding_source,
            )
            if not funding_source_url:
                raise InvariantError("Error occurred while adding funding source")

            step = "create_bank_account"
            bank = saga.run(
                step,
                lambda: self._create_bank(
                    BankAccountCreate(
                        user_id=user.id,
                        bank_id=item_id,
                        account_id=account["account_id"],
                        access_token=access_token,
                        funding_source_url=funding_source_url,
                        shareable_id=encrypt_id(account["account_id"]),
                    )
                ),
            )
        except Exception as e:
            logger.error("Error occurred while exchanging token at step %s: %s", step, e)
            saga.compensate()
            message = str(e)
            if saga.needs_reconciliation:
                message += (
                    "; manual reconciliation required for: "
                    + ", ".join(saga.needs_reconciliation)
                )
            return ActionResult.fail(classify_exception(e), message, step=step)

        try:
            saga.run("revalidate", lambda: self._revalidator.revalidate_path(ROOT_PATH))
        except Exception as e:
            # Bank record is already stored
            logger.error("Could not revalidate %s after linking bank %s: %s", ROOT_PATH, bank.id, e)
        logger.info("Linked item %s for user %s as bank %s", item_id, user.id, bank.id)
        return ActionResult.ok(HandshakeOutcome(bank=bank, completed_steps=saga.completed))

    def _select_account(self, accounts: list[dict], account_id: str | None) -> dict:
        """Pick the account to fund according to the selection policy.

        An ``account_id`` sent by the client always wins; the policy only
        decides what happens without one.
        """
        if not accounts:
            raise ActionError(ErrorKind.NOT_FOUND, "Linked item has no accounts")

        if account_id:
            for account in accounts:
                if account.get("account_id") == account_id:
                    return account
            raise ActionError(ErrorKind.NOT_FOUND, f"Account {account_id} is not in the linked item")

        if self._selection_policy == AccountSelectionPolicy.EXPLICIT:
            raise ActionError(ErrorKind.NOT_FOUND, "No account selected")
        if (
            self._selection_policy == AccountSelectionPolicy.REJECT_IF_MULTIPLE
            and len(accounts) > 1
        ):
            raise ActionError(
                ErrorKind.AMBIGUOUS,
                f"Linked item has {len(accounts)} accounts; select one explicitly",
            )
        return accounts[0]

    def _create_bank(self, fields: BankAccountCreate) -> BankAccount:
        result = self._bank_service.create_bank_account(fields)
        if not result.is_ok:
            raise ActionError(result.error, result.message)
        return result.value
