"""Dwolla payment-rail client.

Creates personal customers at sign-up and attaches funding sources to
them once a bank account has been linked through Plaid.  Dwolla answers
creation calls with ``201 Created`` and the new resource's URL in the
``Location`` header; that URL is what the rest of the app stores.
"""

import logging
import threading
import time
from typing import Any, Optional

import httpx

from config import settings
from integrations.exceptions import (
    UpstreamConnectionError,
    UpstreamDataError,
    raise_for_status,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Dwolla"

_ENVIRONMENT_HOSTS: dict[str, str] = {
    "sandbox": "https://api-sandbox.dwolla.com",
    "production": "https://api.dwolla.com",
}

_HAL_JSON = "application/vnd.dwolla.v1.hal+json"

# Refresh the OAuth token slightly before Dwolla expires it
_TOKEN_EXPIRY_MARGIN_SECONDS = 60


class DwollaClient:
    """Thin wrapper around the Dwolla v2 REST API."""

    def __init__(
        self,
        key: Optional[str] = None,
        secret: Optional[str] = None,
        environment: Optional[str] = None,
        timeout: float = 30.0,
    ):
        self._key = key or settings.DWOLLA_KEY
        self._secret = secret or settings.DWOLLA_SECRET
        env_key = (environment or settings.DWOLLA_ENVIRONMENT).lower()
        base_url = _ENVIRONMENT_HOSTS.get(env_key)
        if base_url is None:
            logger.warning(
                "Unknown DWOLLA_ENVIRONMENT=%r, falling back to sandbox", env_key
            )
            base_url = _ENVIRONMENT_HOSTS["sandbox"]
        self._client = httpx.Client(
            base_url=base_url,
            headers={"Accept": _HAL_JSON},
            timeout=timeout,
        )
        self._access_token: str | None = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def is_configured(self) -> bool:
        """Check if Dwolla credentials are configured."""
        return bool(self._key) and bool(self._secret)

    # ------------------------------------------------------------------
    # Customers & funding sources
    # ------------------------------------------------------------------

    def create_customer(self, params: dict[str, Any]) -> str:
        """Create a Dwolla customer.

        Args:
            params: Customer fields (firstName, lastName, email, type,
                address1, city, state, postalCode, dateOfBirth, ssn).

        Returns:
            The new customer's URL.
        """
        response = self._request("POST", "/customers", json_body=params)
        return self._location(response)

    def create_on_demand_authorization(self) -> dict:
        """Create an on-demand transfer authorization.

        Returns:
            The ``_links`` block to attach to a new funding source.
        """
        response = self._request("POST", "/on-demand-authorizations")
        links = response.json().get("_links")
        if not links:
            raise UpstreamDataError(
                "Dwolla on-demand authorization has no _links",
                service_name=SERVICE_NAME,
            )
        return links

    def add_funding_source(
        self, customer_id: str, processor_token: str, bank_name: str
    ) -> str:
        """Attach a Plaid-verified bank account to a customer.

        Returns:
            The new funding source's URL.
        """
        links = self.create_on_demand_authorization()
        body = {
            "plaidToken": processor_token,
            "name": bank_name,
            "_links": links,
        }
        response = self._request(
            "POST", f"/customers/{customer_id}/funding-sources", json_body=body
        )
        url = self._location(response)
        logger.info("Dwolla funding source created for customer %s", customer_id)
        return url

    def remove_funding_source(self, funding_source_url: str) -> None:
        """Soft-remove a funding source."""
        self._request("POST", funding_source_url, json_body={"removed": True})

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get_access_token(self) -> str:
        """Return a cached client-credentials token, fetching a new one when stale."""
        with self._token_lock:
            if self._access_token and time.monotonic() < self._token_expires_at:
                return self._access_token
            try:
                response = self._client.post(
                    "/token",
                    data={"grant_type": "client_credentials"},
                    auth=(self._key, self._secret),
                )
            except httpx.RequestError as e:
                raise UpstreamConnectionError(
                    f"Dwolla token request failed: {e}", service_name=SERVICE_NAME
                ) from e
            raise_for_status(
                response.status_code,
                f"Dwolla token request rejected ({response.status_code})",
                SERVICE_NAME,
            )
            body = response.json()
            self._access_token = body["access_token"]
            expires_in = int(body.get("expires_in", 3600))
            self._token_expires_at = (
                time.monotonic() + max(expires_in - _TOKEN_EXPIRY_MARGIN_SECONDS, 0)
            )
            return self._access_token

    def _request(
        self, method: str, path: str, json_body: dict | None = None
    ) -> httpx.Response:
        headers = {
            "Authorization": f"Bearer {self._get_access_token()}",
            "Content-Type": _HAL_JSON,
        }
        try:
            response = self._client.request(method, path, json=json_body, headers=headers)
        except httpx.TimeoutException as e:
            raise UpstreamConnectionError(
                f"Dwolla request timed out: {method} {path}", service_name=SERVICE_NAME
            ) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"Dwolla request failed: {e}", service_name=SERVICE_NAME
            ) from e

        if response.status_code >= 400:
            message, code = self._parse_error(response)
            raise_for_status(
                response.status_code,
                f"Dwolla error ({response.status_code}): {message}",
                SERVICE_NAME,
                error_code=code,
            )
        return response

    @staticmethod
    def _location(response: httpx.Response) -> str:
        location = response.headers.get("location")
        if not location:
            raise UpstreamDataError(
                "Dwolla response is missing the Location header",
                service_name=SERVICE_NAME,
            )
        return location

    @staticmethod
    def _parse_error(response: httpx.Response) -> tuple[str, str | None]:
        try:
            body = response.json()
        except ValueError:
            return response.text or "unknown error", None
        message = body.get("message", "unknown error")
        # Validation errors nest the useful detail under _embedded.errors
        embedded = (body.get("_embedded") or {}).get("errors") or []
        if embedded:
            message = f"{message} ({'; '.join(e.get('message', '') for e in embedded)})"
        return message, body.get("code")
