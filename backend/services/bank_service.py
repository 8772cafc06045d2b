"""Bank record service: create and look up locally stored bank accounts."""

import logging

from config import settings
from integrations.appwrite_client import AppwriteGateway, ID, Query
from schemas.bank import BankAccount, BankAccountCreate
from services.results import ActionResult, ErrorKind, classify_exception

logger = logging.getLogger(__name__)


class BankService:
    """CRUD-style access to the bank collection (create and read only)."""

    def __init__(
        self,
        gateway: AppwriteGateway,
        database_id: str | None = None,
        collection_id: str | None = None,
    ):
        self._gateway = gateway
        self._database_id = database_id or settings.APPWRITE_DATABASE_ID
        self._collection_id = collection_id or settings.APPWRITE_BANK_COLLECTION_ID

    def create_bank_account(self, fields: BankAccountCreate) -> ActionResult[BankAccount]:
        """Create a bank document."""
        try:
            with self._gateway.create_admin_client() as client:
                document = client.databases.create_document(
                    self._database_id,
                    self._collection_id,
                    ID.unique(),
                    fields.to_document(),
                )
            bank = BankAccount.model_validate(document)
        except Exception as e:
            logger.error("Failed to create bank account for user %s: %s", fields.user_id, e)
            return ActionResult.fail(classify_exception(e), str(e))

        logger.info("Bank account %s created for user %s", bank.id, bank.user_id)
        return ActionResult.ok(bank)

    def get_banks(self, user_id: str) -> ActionResult[list[BankAccount]]:
        """List every bank owned by ``user_id``, in the order the backend returns them."""
        try:
            result = self._list([Query.equal("userId", [user_id])])
            banks = [BankAccount.model_validate(doc) for doc in result["documents"]]
        except Exception as e:
            logger.error("Failed to list banks for user %s: %s", user_id, e)
            return ActionResult.fail(classify_exception(e), str(e))
        return ActionResult.ok(banks)

    def get_bank(self, document_id: str) -> ActionResult[BankAccount]:
        """Fetch one bank by its document id."""
        try:
            result = self._list([Query.equal("$id", [document_id])])
            documents = result["documents"]
            if not documents:
                return ActionResult.fail(ErrorKind.NOT_FOUND, f"Bank {document_id} not found")
            return ActionResult.ok(BankAccount.model_validate(documents[0]))
        except Exception as e:
            logger.error("Failed to get bank %s: %s", document_id, e)
            return ActionResult.fail(classify_exception(e), str(e))

    def get_bank_by_account_id(self, account_id: str) -> ActionResult[BankAccount]:
        """Fetch the bank whose Plaid account id is ``account_id``.

        Exactly one match is required: zero matches is ``not_found`` and
        more than one is ``ambiguous``.
        """
        try:
            result = self._list([Query.equal("accountId", [account_id])])
        except Exception as e:
            logger.error("Failed to get bank by account id %s: %s", account_id, e)
            return ActionResult.fail(classify_exception(e), str(e))

        total = result["total"]
        if total == 0:
            return ActionResult.fail(ErrorKind.NOT_FOUND, f"No bank for account {account_id}")
        if total > 1:
            logger.warning("%d banks share account id %s", total, account_id)
            return ActionResult.fail(
                ErrorKind.AMBIGUOUS, f"{total} banks share account {account_id}"
            )
        return ActionResult.ok(BankAccount.model_validate(result["documents"][0]))

    def _list(self, queries: list[str]) -> dict:
        with self._gateway.create_admin_client() as client:
            return client.databases.list_documents(
                self._database_id, self._collection_id, queries
            )
