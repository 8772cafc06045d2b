"""Test fixtures and sample data."""
import pytest

from tests.fixtures.mocks import (
    MockAppwriteBackend,
    MockAppwriteGateway,
    MockDwollaClient,
    MockPlaidClient,
)

TEST_DATABASE_ID = "test-db"
TEST_USER_COLLECTION_ID = "users"
TEST_BANK_COLLECTION_ID = "banks"

SAMPLE_SIGN_UP = {
    "firstName": "Ada",
    "lastName": "Lovelace",
    "address1": "12 St James's Square",
    "city": "New York",
    "state": "NY",
    "postalCode": "10001",
    "dateOfBirth": "1990-12-10",
    "ssn": "1234",
    "email": "ada@example.com",
    "password": "correct-horse",
}


def seed_user(
    backend: MockAppwriteBackend,
    email: str = "ada@example.com",
    password: str = "correct-horse",
    first_name: str = "Ada",
    last_name: str = "Lovelace",
    dwolla_customer_id: str | None = "cust-123",
) -> tuple[dict, str]:
    """Create an identity, its user document, and an open session.

    Returns:
        (user document, session secret)
    """
    identity = backend.add_identity(email, password, f"{first_name} {last_name}")
    document = {
        "$id": backend.next_id("doc"),
        "userId": identity["$id"],
        "email": email,
        "firstName": first_name,
        "lastName": last_name,
        "address1": "12 St James's Square",
        "city": "New York",
        "state": "NY",
        "postalCode": "10001",
        "dateOfBirth": "1990-12-10",
        "ssn": "1234",
        "dwollaCustomerId": dwolla_customer_id,
        "dwollaCustomerUrl": (
            f"https://api-sandbox.dwolla.com/customers/{dwolla_customer_id}"
            if dwolla_customer_id
            else None
        ),
    }
    backend.documents(TEST_DATABASE_ID, TEST_USER_COLLECTION_ID).append(document)
    return document, backend.open_session(identity["$id"])


def seed_bank(
    backend: MockAppwriteBackend,
    user_id: str,
    account_id: str = "acc_checking",
    bank_id: str = "item_001",
) -> dict:
    """Store a bank document as a completed link handshake would."""
    document = {
        "$id": backend.next_id("bank"),
        "userId": user_id,
        "bankId": bank_id,
        "accountId": account_id,
        "accessToken": f"access-{bank_id}",
        "fundingSourceUrl": "https://api-sandbox.dwolla.com/funding-sources/fs-456",
        "sharableId": f"share-{account_id}",
    }
    backend.documents(TEST_DATABASE_ID, TEST_BANK_COLLECTION_ID).append(document)
    return document


@pytest.fixture
def appwrite_backend() -> MockAppwriteBackend:
    """A fresh in-memory Appwrite project."""
    return MockAppwriteBackend()


@pytest.fixture
def gateway(appwrite_backend: MockAppwriteBackend) -> MockAppwriteGateway:
    return MockAppwriteGateway(appwrite_backend)


@pytest.fixture
def plaid() -> MockPlaidClient:
    return MockPlaidClient()


@pytest.fixture
def dwolla() -> MockDwollaClient:
    return MockDwollaClient()


@pytest.fixture
def signed_in_user(appwrite_backend: MockAppwriteBackend) -> tuple[dict, str]:
    """A user document with an open session: (document, session secret)."""
    return seed_user(appwrite_backend)
