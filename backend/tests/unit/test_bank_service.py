"""Tests for BankService."""

import pytest

from schemas.bank import BankAccountCreate
from services.bank_service import BankService
from services.results import ErrorKind
from tests.fixtures import TEST_BANK_COLLECTION_ID, TEST_DATABASE_ID, seed_bank


@pytest.fixture
def service(gateway):
    return BankService(gateway)


def _fields(**overrides) -> BankAccountCreate:
    values = {
        "user_id": "doc_user",
        "bank_id": "item_001",
        "account_id": "acc_checking",
        "access_token": "access-sandbox-1",
        "funding_source_url": "https://api-sandbox.dwolla.com/funding-sources/fs-1",
        "shareable_id": "YWNjX2NoZWNraW5n",
    }
    values.update(overrides)
    return BankAccountCreate(**values)


class TestCreateBankAccount:
    def test_created_bank_is_found_by_account_id(self, service, appwrite_backend):
        created = service.create_bank_account(_fields())

        assert created.is_ok
        [document] = appwrite_backend.documents(TEST_DATABASE_ID, TEST_BANK_COLLECTION_ID)
        assert document["accessToken"] == "access-sandbox-1"
        assert document["sharableId"] == "YWNjX2NoZWNraW5n"

        found = service.get_bank_by_account_id("acc_checking")
        assert found.value == created.value

    def test_create_failure(self, service, appwrite_backend):
        appwrite_backend.fail_on["create_document"] = "api"

        result = service.create_bank_account(_fields())

        assert result.error == ErrorKind.UPSTREAM
        assert appwrite_backend.documents(TEST_DATABASE_ID, TEST_BANK_COLLECTION_ID) == []


class TestGetBanks:
    def test_only_the_users_banks_in_backend_order(self, service, appwrite_backend):
        first = seed_bank(appwrite_backend, "doc_user", account_id="acc_1")
        seed_bank(appwrite_backend, "someone_else", account_id="acc_2")
        second = seed_bank(appwrite_backend, "doc_user", account_id="acc_3")

        result = service.get_banks("doc_user")

        assert [b.id for b in result.value] == [first["$id"], second["$id"]]

    def test_no_banks(self, service):
        assert service.get_banks("doc_user").value == []

    def test_list_failure(self, service, appwrite_backend):
        appwrite_backend.fail_on["list_documents"] = "auth"

        assert service.get_banks("doc_user").error == ErrorKind.UNAUTHENTICATED


class TestGetBank:
    def test_by_document_id(self, service, appwrite_backend):
        document = seed_bank(appwrite_backend, "doc_user")

        bank = service.get_bank(document["$id"]).value

        assert bank.account_id == "acc_checking"
        assert bank.shareable_id == "share-acc_checking"

    def test_missing(self, service):
        assert service.get_bank("nope").error == ErrorKind.NOT_FOUND


class TestGetBankByAccountId:
    def test_zero_matches_is_not_found(self, service):
        assert service.get_bank_by_account_id("acc_missing").error == ErrorKind.NOT_FOUND

    def test_one_match(self, service, appwrite_backend):
        document = seed_bank(appwrite_backend, "doc_user", account_id="acc_1")

        assert service.get_bank_by_account_id("acc_1").value.id == document["$id"]

    def test_two_matches_is_ambiguous(self, service, appwrite_backend):
        seed_bank(appwrite_backend, "doc_user", account_id="acc_1")
        seed_bank(appwrite_backend, "doc_other", account_id="acc_1")

        result = service.get_bank_by_account_id("acc_1")

        assert result.error == ErrorKind.AMBIGUOUS
        assert result.value is None
