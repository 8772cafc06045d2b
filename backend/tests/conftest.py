"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from api.dependencies import (
    get_appwrite_gateway,
    get_dwolla_client,
    get_plaid_client,
    get_revalidator,
)
from config import settings
from main import app
from services.revalidation import ViewRevalidator
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    TEST_BANK_COLLECTION_ID,
    TEST_DATABASE_ID,
    TEST_USER_COLLECTION_ID,
    appwrite_backend,
    dwolla,
    gateway,
    plaid,
    signed_in_user,
)


@pytest.fixture(autouse=True)
def appwrite_collections(monkeypatch):
    """Point every service at the test database and collections."""
    monkeypatch.setattr(settings, "APPWRITE_DATABASE_ID", TEST_DATABASE_ID)
    monkeypatch.setattr(settings, "APPWRITE_USER_COLLECTION_ID", TEST_USER_COLLECTION_ID)
    monkeypatch.setattr(settings, "APPWRITE_BANK_COLLECTION_ID", TEST_BANK_COLLECTION_ID)
    monkeypatch.setattr(settings, "ACCOUNT_SELECTION_POLICY", "first")


@pytest.fixture
def revalidator() -> ViewRevalidator:
    return ViewRevalidator()


@pytest.fixture(name="client")
def client_fixture(gateway, plaid, dwolla, revalidator):
    """Create a test client wired to the in-memory upstreams.

    The base URL is https so that Secure session cookies are sent back.
    """
    app.dependency_overrides[get_appwrite_gateway] = lambda: gateway
    app.dependency_overrides[get_plaid_client] = lambda: plaid
    app.dependency_overrides[get_dwolla_client] = lambda: dwolla
    app.dependency_overrides[get_revalidator] = lambda: revalidator
    client = TestClient(app, base_url="https://testserver")
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_client(client, signed_in_user):
    """A test client carrying the seeded user's session cookie."""
    _, secret = signed_in_user
    client.cookies.set(settings.SESSION_COOKIE_NAME, secret)
    return client
