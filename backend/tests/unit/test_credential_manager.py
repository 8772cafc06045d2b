"""Tests for services.credential_manager."""

import sys
from unittest.mock import MagicMock, patch

from services.credential_manager import CREDENTIAL_KEYS, SERVICE_NAME, get_credential


# ---------------------------------------------------------------------------
# get_credential
# ---------------------------------------------------------------------------


class TestGetCredential:
    def test_returns_value(self):
        mock_keyring = MagicMock()
        mock_keyring.get_password.return_value = "secret123"
        with patch.dict(sys.modules, {"keyring": mock_keyring}):
            result = get_credential("PLAID_SECRET")
        assert result == "secret123"
        mock_keyring.get_password.assert_called_once_with(SERVICE_NAME, "PLAID_SECRET")

    def test_returns_none_when_not_found(self):
        mock_keyring = MagicMock()
        mock_keyring.get_password.return_value = None
        with patch.dict(sys.modules, {"keyring": mock_keyring}):
            result = get_credential("PLAID_SECRET")
        assert result is None

    def test_returns_none_when_keyring_not_installed(self):
        with patch.dict(sys.modules, {"keyring": None}):
            result = get_credential("PLAID_SECRET")
        assert result is None

    def test_returns_none_on_keyring_exception(self):
        mock_keyring = MagicMock()
        mock_keyring.get_password.side_effect = Exception("keyring error")
        with patch.dict(sys.modules, {"keyring": mock_keyring}):
            result = get_credential("DWOLLA_SECRET")
        assert result is None


# ---------------------------------------------------------------------------
# CREDENTIAL_KEYS
# ---------------------------------------------------------------------------


class TestCredentialKeys:
    def test_contains_expected_keys(self):
        assert CREDENTIAL_KEYS == {
            "APPWRITE_API_KEY",
            "PLAID_CLIENT_ID",
            "PLAID_SECRET",
            "DWOLLA_KEY",
            "DWOLLA_SECRET",
        }

    def test_excludes_non_secret_keys(self):
        assert "APPWRITE_ENDPOINT" not in CREDENTIAL_KEYS
        assert "APPWRITE_PROJECT_ID" not in CREDENTIAL_KEYS
        assert "PLAID_ENVIRONMENT" not in CREDENTIAL_KEYS
        assert "LOG_LEVEL" not in CREDENTIAL_KEYS

    def test_is_frozen(self):
        assert isinstance(CREDENTIAL_KEYS, frozenset)
