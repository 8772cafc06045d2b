"""Plaid API client.

Wraps the plaid-python SDK for the bank-linking flow (link tokens,
public-token exchange, processor tokens for Dwolla) and for reading
account balances and transactions on the dashboard.

Responses are returned as plain dicts so services never touch SDK model
classes, and every ``ApiException`` is translated into the
:mod:`integrations.exceptions` hierarchy.
"""

import json
import logging
from typing import Any, Callable

import urllib3
from plaid import ApiException, Environment
from plaid.api.plaid_api import PlaidApi
from plaid.api_client import ApiClient
from plaid.configuration import Configuration
from plaid.model.accounts_get_request import AccountsGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.institutions_get_by_id_request import InstitutionsGetByIdRequest
from plaid.model.item_public_token_exchange_request import ItemPublicTokenExchangeRequest
from plaid.model.item_remove_request import ItemRemoveRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.processor_token_create_request import ProcessorTokenCreateRequest
from plaid.model.products import Products
from plaid.model.transactions_sync_request import TransactionsSyncRequest

from config import settings
from integrations.exceptions import (
    UpstreamAPIError,
    UpstreamAuthError,
    UpstreamConnectionError,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Plaid"

# Map PLAID_ENVIRONMENT setting to SDK host URLs.
# Plaid's Development environment is deprecated; only sandbox and production
# are supported.
_ENVIRONMENT_MAP: dict[str, str] = {
    "sandbox": Environment.Sandbox,
    "production": Environment.Production,
}

_AUTH_ERROR_CODES = frozenset(
    {
        "INVALID_ACCESS_TOKEN",
        "INVALID_API_KEYS",
        "ITEM_LOGIN_REQUIRED",
        "INVALID_PUBLIC_TOKEN",
    }
)


class PlaidClient:
    """Wrapper around the Plaid API."""

    def __init__(
        self,
        client_id: str | None = None,
        secret: str | None = None,
        environment: str | None = None,
    ):
        self._client_id = client_id or settings.PLAID_CLIENT_ID
        self._secret = secret or settings.PLAID_SECRET
        self._environment = environment or settings.PLAID_ENVIRONMENT

        # Lazily created on first use
        self._api: PlaidApi | None = None

    def _get_api(self) -> PlaidApi:
        """Return (and cache) a PlaidApi instance."""
        if self._api is None:
            env_key = self._environment.lower()
            host = _ENVIRONMENT_MAP.get(env_key)
            if host is None:
                logger.warning(
                    "Unknown PLAID_ENVIRONMENT=%r, falling back to sandbox. "
                    "Valid values: sandbox, production",
                    self._environment,
                )
                host = Environment.Sandbox
            logger.info(
                "Plaid API client: environment=%s, host=%s, client_id=<configured>",
                env_key,
                host,
            )
            configuration = Configuration(
                host=host,
                api_key={
                    "clientId": self._client_id,
                    "secret": self._secret,
                },
            )
            api_client = ApiClient(configuration)
            self._api = PlaidApi(api_client)
        return self._api

    def is_configured(self) -> bool:
        """Check if Plaid credentials are configured."""
        return bool(self._client_id) and bool(self._secret)

    # ------------------------------------------------------------------
    # Link Token & Token Exchange
    # ------------------------------------------------------------------

    def create_link_token(self, client_user_id: str, client_name: str) -> str:
        """Create a Plaid Link token scoped to one user.

        Args:
            client_user_id: Stable id of the end user (the user document id).
            client_name: Display name shown inside Plaid Link.

        Returns:
            The link_token string to be passed to Plaid Link.
        """
        request = LinkTokenCreateRequest(
            user=LinkTokenCreateRequestUser(client_user_id=client_user_id),
            client_name=client_name,
            products=[Products(p) for p in settings.plaid_products_list],
            country_codes=[CountryCode(c) for c in settings.plaid_country_codes_list],
            language=settings.PLAID_LANGUAGE,
        )
        response = self._call(self._get_api().link_token_create, request)
        return response["link_token"]

    def exchange_public_token(self, public_token: str) -> dict:
        """Exchange a Plaid Link public_token for a permanent access_token.

        Returns:
            Dict with ``access_token`` and ``item_id``.
        """
        request = ItemPublicTokenExchangeRequest(public_token=public_token)
        response = self._call(self._get_api().item_public_token_exchange, request)
        return {
            "access_token": response["access_token"],
            "item_id": response["item_id"],
        }

    def create_processor_token(
        self, access_token: str, account_id: str, processor: str = "dwolla"
    ) -> str:
        """Create a processor token binding one account to a payment processor."""
        request = ProcessorTokenCreateRequest(
            access_token=access_token,
            account_id=account_id,
            processor=processor,
        )
        response = self._call(self._get_api().processor_token_create, request)
        return response["processor_token"]

    def remove_item(self, access_token: str) -> None:
        """Revoke an access token by calling Plaid's /item/remove endpoint."""
        self._call(
            self._get_api().item_remove, ItemRemoveRequest(access_token=access_token)
        )

    # ------------------------------------------------------------------
    # Accounts, institutions, transactions
    # ------------------------------------------------------------------

    def get_accounts(self, access_token: str) -> dict:
        """Fetch the accounts of an Item.

        Returns:
            Dict with ``item`` and ``accounts`` (list of account dicts).
        """
        request = AccountsGetRequest(access_token=access_token)
        response = self._call(self._get_api().accounts_get, request).to_dict()
        return {
            "item": response.get("item") or {},
            "accounts": response.get("accounts") or [],
        }

    def get_institution(self, institution_id: str) -> dict:
        """Fetch institution metadata (name, logo, ...)."""
        request = InstitutionsGetByIdRequest(
            institution_id=institution_id,
            country_codes=[CountryCode(c) for c in settings.plaid_country_codes_list],
        )
        response = self._call(self._get_api().institutions_get_by_id, request).to_dict()
        return response.get("institution") or {}

    def get_transactions(self, access_token: str) -> list[dict]:
        """Fetch all added transactions of an Item via /transactions/sync.

        Pages through the sync cursor until ``has_more`` is false.
        """
        api = self._get_api()
        transactions: list[dict] = []
        cursor: str | None = None
        has_more = True

        while has_more:
            if cursor:
                request = TransactionsSyncRequest(access_token=access_token, cursor=cursor)
            else:
                request = TransactionsSyncRequest(access_token=access_token)
            response = self._call(api.transactions_sync, request).to_dict()
            transactions.extend(response.get("added") or [])
            has_more = bool(response.get("has_more"))
            cursor = response.get("next_cursor")

        logger.debug("Plaid: %d transactions synced", len(transactions))
        return transactions

    # ------------------------------------------------------------------
    # Error mapping
    # ------------------------------------------------------------------

    def _call(self, fn: Callable[[Any], Any], request: Any) -> Any:
        """Invoke an SDK method, translating SDK errors."""
        try:
            return fn(request)
        except ApiException as e:
            raise self._map_plaid_error(e) from e
        except urllib3.exceptions.HTTPError as e:
            raise UpstreamConnectionError(
                f"Plaid request failed: {e}", service_name=SERVICE_NAME
            ) from e

    @staticmethod
    def _map_plaid_error(exc: ApiException) -> UpstreamAPIError | UpstreamAuthError:
        """Map a Plaid ApiException to an upstream error."""
        status = exc.status or 0
        message = str(exc)

        # Try to extract error_code from the body
        error_code = ""
        try:
            body = json.loads(exc.body) if exc.body else {}
            error_code = body.get("error_code", "")
            error_message = body.get("error_message", "")
            if error_message:
                message = f"Plaid error ({error_code}): {error_message}"
        except (ValueError, TypeError, AttributeError):
            pass

        if status in (401, 403) or error_code in _AUTH_ERROR_CODES:
            return UpstreamAuthError(message, service_name=SERVICE_NAME)
        return UpstreamAPIError(
            message,
            service_name=SERVICE_NAME,
            status_code=status or None,
            error_code=error_code or None,
        )
