"""Appwrite REST client for identity and document storage.

Appwrite owns authentication, sessions, and the document database that
holds user profiles and linked bank records.  This module talks to its
REST API over httpx and exposes the two client modes the app needs:

* an **admin** client authenticated with the server API key, used to
  create and list documents regardless of who is calling, and
* a **session** client that acts as the owner of a session secret, used
  for "who am I" lookups and logout.

A fresh client is built for every call; nothing is cached between
requests.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx

from config import settings
from integrations.exceptions import (
    UpstreamAuthError,
    UpstreamConnectionError,
    UpstreamDataError,
    raise_for_status,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Appwrite"

# Response format pinned so list endpoints keep the {total, documents} shape.
_RESPONSE_FORMAT = "1.5.0"


@dataclass(frozen=True)
class SessionContext:
    """The caller's session, read from the request cookie once per request."""

    secret: str | None = None

    @property
    def is_anonymous(self) -> bool:
        return not self.secret


class ID:
    """Document/user id helpers."""

    @staticmethod
    def unique() -> str:
        """Placeholder that asks Appwrite to generate the id server-side."""
        return "unique()"


class Query:
    """Builders for Appwrite query strings."""

    @staticmethod
    def equal(attribute: str, values: list[Any]) -> str:
        return json.dumps({"method": "equal", "attribute": attribute, "values": values})


class AppwriteClient:
    """A single Appwrite connection in either admin or session mode."""

    def __init__(
        self,
        endpoint: str,
        project_id: str,
        *,
        api_key: str | None = None,
        session: str | None = None,
        timeout: float = 30.0,
    ):
        headers = {
            "X-Appwrite-Project": project_id,
            "X-Appwrite-Response-Format": _RESPONSE_FORMAT,
        }
        if api_key:
            headers["X-Appwrite-Key"] = api_key
        if session:
            headers["X-Appwrite-Session"] = session
        self._client = httpx.Client(
            base_url=endpoint.rstrip("/"),
            headers=headers,
            timeout=timeout,
        )
        self.account = AccountApi(self)
        self.databases = DatabasesApi(self)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def __enter__(self) -> "AppwriteClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        json_body: dict | None = None,
        params: list[tuple[str, str]] | None = None,
    ) -> dict:
        """Send a request and return the decoded JSON body.

        Raises:
            UpstreamConnectionError: network failure or timeout.
            UpstreamAuthError: HTTP 401/403.
            UpstreamAPIError: any other 4xx/5xx.
            UpstreamDataError: a success response that is not JSON.
        """
        try:
            response = self._client.request(method, path, json=json_body, params=params)
        except httpx.TimeoutException as e:
            raise UpstreamConnectionError(
                f"Appwrite request timed out: {method} {path}", service_name=SERVICE_NAME
            ) from e
        except httpx.RequestError as e:
            raise UpstreamConnectionError(
                f"Appwrite request failed: {e}", service_name=SERVICE_NAME
            ) from e

        if response.status_code >= 400:
            message, error_type = self._parse_error(response)
            logger.debug("Appwrite %s %s -> %d %s", method, path, response.status_code, message)
            raise_for_status(
                response.status_code,
                f"Appwrite error ({response.status_code}): {message}",
                SERVICE_NAME,
                error_code=error_type,
            )

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamDataError(
                f"Appwrite returned a non-JSON body for {method} {path}",
                service_name=SERVICE_NAME,
            ) from e

    @staticmethod
    def _parse_error(response: httpx.Response) -> tuple[str, str | None]:
        try:
            body = response.json()
        except ValueError:
            return response.text or "unknown error", None
        return body.get("message", "unknown error"), body.get("type")


class AccountApi:
    """Identity operations (``/account``)."""

    def __init__(self, client: AppwriteClient):
        self._client = client

    def create(self, user_id: str, email: str, password: str, name: str | None = None) -> dict:
        body = {"userId": user_id, "email": email, "password": password}
        if name:
            body["name"] = name
        return self._client.request("POST", "/account", json_body=body)

    def create_email_password_session(self, email: str, password: str) -> dict:
        return self._client.request(
            "POST",
            "/account/sessions/email",
            json_body={"email": email, "password": password},
        )

    def get(self) -> dict:
        return self._client.request("GET", "/account")

    def delete_session(self, session_id: str = "current") -> None:
        self._client.request("DELETE", f"/account/sessions/{session_id}")


class DatabasesApi:
    """Document operations (``/databases``)."""

    def __init__(self, client: AppwriteClient):
        self._client = client

    def create_document(
        self,
        database_id: str,
        collection_id: str,
        document_id: str,
        data: dict,
    ) -> dict:
        return self._client.request(
            "POST",
            f"/databases/{database_id}/collections/{collection_id}/documents",
            json_body={"documentId": document_id, "data": data},
        )

    def list_documents(
        self,
        database_id: str,
        collection_id: str,
        queries: list[str] | None = None,
    ) -> dict:
        """List documents matching ``queries``.

        Returns:
            Dict with ``total`` and ``documents``.
        """
        params = [("queries[]", q) for q in queries or []]
        result = self._client.request(
            "GET",
            f"/databases/{database_id}/collections/{collection_id}/documents",
            params=params,
        )
        if "documents" not in result:
            raise UpstreamDataError(
                "Appwrite list response is missing 'documents'",
                service_name=SERVICE_NAME,
            )
        result.setdefault("total", len(result["documents"]))
        return result


class AppwriteGateway:
    """Factory for admin and session clients."""

    def __init__(
        self,
        endpoint: str | None = None,
        project_id: str | None = None,
        api_key: str | None = None,
    ):
        self._endpoint = endpoint or settings.APPWRITE_ENDPOINT
        self._project_id = project_id or settings.APPWRITE_PROJECT_ID
        self._api_key = api_key or settings.APPWRITE_API_KEY

    def create_admin_client(self) -> AppwriteClient:
        """Client with API-key privileges."""
        return AppwriteClient(self._endpoint, self._project_id, api_key=self._api_key)

    def create_session_client(self, session: SessionContext) -> AppwriteClient:
        """Client acting as the owner of ``session``.

        Raises:
            UpstreamAuthError: if the session carries no secret.
        """
        if session.is_anonymous:
            raise UpstreamAuthError("No session", service_name=SERVICE_NAME)
        return AppwriteClient(self._endpoint, self._project_id, session=session.secret)
