"""User directory actions: sign-in, sign-up, session lookup, and logout.

Identity and sessions belong to Appwrite; this service only sequences the
calls and shapes the results.  The caller's session is passed in
explicitly as a :class:`~integrations.appwrite_client.SessionContext`.
"""

import logging
from dataclasses import dataclass

from config import settings
from integrations.appwrite_client import AppwriteGateway, ID, Query, SessionContext
from integrations.dwolla_client import DwollaClient
from schemas.user import SignInParams, SignUpParams, User
from services.results import (
    ActionResult,
    ErrorKind,
    InvariantError,
    classify_exception,
)
from utils.ids import extract_customer_id_from_url

logger = logging.getLogger(__name__)


@dataclass
class SignInResult:
    """A signed-in user and the session secret to hand back as a cookie."""

    user: User
    session_secret: str


class UserService:
    """Service for the user collection and session lifecycle."""

    def __init__(
        self,
        gateway: AppwriteGateway,
        dwolla: DwollaClient,
        database_id: str | None = None,
        collection_id: str | None = None,
    ):
        self._gateway = gateway
        self._dwolla = dwolla
        self._database_id = database_id or settings.APPWRITE_DATABASE_ID
        self._collection_id = collection_id or settings.APPWRITE_USER_COLLECTION_ID

    def get_user_info(self, user_id: str) -> ActionResult[User]:
        """Look up the directory record of identity ``user_id``."""
        try:
            with self._gateway.create_admin_client() as client:
                result = client.databases.list_documents(
                    self._database_id,
                    self._collection_id,
                    [Query.equal("userId", [user_id])],
                )
            documents = result["documents"]
            if not documents:
                return ActionResult.fail(ErrorKind.NOT_FOUND, f"User {user_id} not found")
            return ActionResult.ok(User.model_validate(documents[0]))
        except Exception as e:
            logger.error("Failed to get user info for %s: %s", user_id, e)
            return ActionResult.fail(classify_exception(e), str(e))

    def sign_in(self, params: SignInParams) -> ActionResult[SignInResult]:
        """Exchange email and password for a session and the user's record."""
        try:
            with self._gateway.create_admin_client() as client:
                session = client.account.create_email_password_session(
                    str(params.email), params.password
                )
            secret = self._session_secret(session)
        except Exception as e:
            logger.warning("Sign-in failed for %s: %s", params.email, e)
            return ActionResult.fail(classify_exception(e), str(e))

        user_result = self.get_user_info(session["userId"])
        if not user_result.is_ok:
            return ActionResult.fail(user_result.error, user_result.message)

        logger.info("User %s signed in", user_result.value.id)
        return ActionResult.ok(SignInResult(user=user_result.value, session_secret=secret))

    def sign_up(self, params: SignUpParams) -> ActionResult[SignInResult]:
        """Create identity, Dwolla customer, and user record, then sign in.

        Steps run in order and stop at the first failure.  Nothing created
        by an earlier step is undone; the user document is only written once
        both the identity account and the Dwolla customer exist.
        """
        step = "create_account"
        try:
            with self._gateway.create_admin_client() as client:
                new_account = client.account.create(
                    ID.unique(),
                    str(params.email),
                    params.password,
                    f"{params.first_name} {params.last_name}",
                )
                if not new_account or not new_account.get("$id"):
                    raise InvariantError("Error occurred while creating user account")

                step = "create_dwolla_customer"
                customer_url = self._dwolla.create_customer(params.dwolla_customer_fields())
                if not customer_url:
                    raise InvariantError("Error occurred while creating Dwolla customer")

                step = "create_user_document"
                document = client.databases.create_document(
                    self._database_id,
                    self._collection_id,
                    ID.unique(),
                    {
                        **params.profile_fields(),
                        "dwollaCustomerId": extract_customer_id_from_url(customer_url),
                        "dwollaCustomerUrl": customer_url,
                        "userId": new_account["$id"],
                    },
                )
                user = User.model_validate(document)

                step = "create_session"
                session = client.account.create_email_password_session(
                    str(params.email), params.password
                )
                secret = self._session_secret(session)
        except Exception as e:
            logger.error("Sign-up failed at step %s for %s: %s", step, params.email, e)
            return ActionResult.fail(classify_exception(e), str(e), step=step)

        logger.info("User %s signed up", user.id)
        return ActionResult.ok(SignInResult(user=user, session_secret=secret))

    def get_logged_in_user(self, session: SessionContext) -> ActionResult[User]:
        """Resolve the session's owner to a directory record.

        Never raises; a missing or expired session is ``unauthenticated``.
        """
        try:
            with self._gateway.create_session_client(session) as client:
                account = client.account.get()
        except Exception as e:
            logger.debug("No logged-in user: %s", e)
            return ActionResult.fail(ErrorKind.UNAUTHENTICATED, str(e))

        return self.get_user_info(account["$id"])

    def logout_account(self, session: SessionContext) -> ActionResult[None]:
        """Invalidate the current session server-side."""
        try:
            with self._gateway.create_session_client(session) as client:
                client.account.delete_session("current")
        except Exception as e:
            logger.warning("Logout failed: %s", e)
            return ActionResult.fail(classify_exception(e), str(e))
        return ActionResult.ok(None)

    @staticmethod
    def _session_secret(session: dict) -> str:
        secret = session.get("secret")
        if not secret:
            raise InvariantError("Session was created without a secret")
        return secret
