"""Keyring-backed credential storage for service secrets.

Thin wrapper around the ``keyring`` library so that Appwrite, Plaid and
Dwolla secrets can live in the OS keychain instead of ``.env``.  The
``keyring`` import is lazy; when it is missing every lookup simply
returns ``None`` and settings fall through to environment variables.
"""

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "horizon-banking"

CREDENTIAL_KEYS: frozenset[str] = frozenset(
    {
        "APPWRITE_API_KEY",
        "PLAID_CLIENT_ID",
        "PLAID_SECRET",
        "DWOLLA_KEY",
        "DWOLLA_SECRET",
    }
)


def get_credential(key: str) -> str | None:
    """Retrieve a credential from the keychain.

    Args:
        key: The credential name (e.g. ``"PLAID_SECRET"``).

    Returns:
        The credential value, or ``None`` if not found or keyring
        is unavailable.
    """
    try:
        import keyring
    except ImportError:
        return None

    try:
        return keyring.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("keyring lookup failed for %s", key, exc_info=True)
        return None

