"""Tests for Settings validation and required-configuration checks."""

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from config import REQUIRED_FIELDS, Settings

_COMPLETE = {
    "APPWRITE_ENDPOINT": "https://appwrite.example.com/v1",
    "APPWRITE_PROJECT_ID": "proj",
    "APPWRITE_API_KEY": "key",
    "APPWRITE_DATABASE_ID": "db",
    "APPWRITE_USER_COLLECTION_ID": "users",
    "APPWRITE_BANK_COLLECTION_ID": "banks",
    "PLAID_CLIENT_ID": "cid",
    "PLAID_SECRET": "psecret",
    "DWOLLA_KEY": "dkey",
    "DWOLLA_SECRET": "dsecret",
}


def _settings(**overrides) -> Settings:
    env = {k: v for k, v in os.environ.items() if k not in REQUIRED_FIELDS}
    with (
        patch.dict(os.environ, env, clear=True),
        patch("config.get_credential", return_value=None),
    ):
        return Settings(_env_file=None, **overrides)


class TestRequiredConfiguration:
    def test_complete_configuration_passes(self):
        s = _settings(**_COMPLETE)
        assert s.missing_required() == []
        s.validate_required()

    def test_missing_fields_are_listed(self):
        partial = {k: v for k, v in _COMPLETE.items() if k not in ("PLAID_SECRET", "DWOLLA_KEY")}
        s = _settings(**partial)
        assert s.missing_required() == ["PLAID_SECRET", "DWOLLA_KEY"]

    def test_validate_required_names_missing_fields(self):
        s = _settings(**{**_COMPLETE, "APPWRITE_PROJECT_ID": ""})
        with pytest.raises(RuntimeError, match="APPWRITE_PROJECT_ID"):
            s.validate_required()


class TestAccountSelectionPolicy:
    def test_default_is_first(self):
        assert _settings().ACCOUNT_SELECTION_POLICY == "first"

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("explicit", "explicit"),
            ("REJECT_IF_MULTIPLE", "reject_if_multiple"),
            ("reject-if-multiple", "reject_if_multiple"),
            (" First ", "first"),
        ],
    )
    def test_values_are_normalized(self, raw, expected):
        assert _settings(ACCOUNT_SELECTION_POLICY=raw).ACCOUNT_SELECTION_POLICY == expected

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValidationError, match="ACCOUNT_SELECTION_POLICY"):
            _settings(ACCOUNT_SELECTION_POLICY="random")


class TestPlaidLists:
    def test_products_and_country_codes_split(self):
        s = _settings(PLAID_PRODUCTS="auth, transactions", PLAID_COUNTRY_CODES="US,CA,")
        assert s.plaid_products_list == ["auth", "transactions"]
        assert s.plaid_country_codes_list == ["US", "CA"]
