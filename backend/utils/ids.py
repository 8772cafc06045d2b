"""Identifier helpers: shareable-id obfuscation and Dwolla URL parsing."""

import base64
import binascii


def encrypt_id(value: str) -> str:
    """Obfuscate an id so it can be shared in URLs without exposing it verbatim.

    This is URL-safe base64, not encryption: it hides raw Plaid account ids
    from casual view and nothing more.
    """
    return base64.urlsafe_b64encode(value.encode("utf-8")).decode("ascii")


def decrypt_id(token: str) -> str:
    """Reverse :func:`encrypt_id`.

    Raises:
        ValueError: if ``token`` is not valid shareable-id text.
    """
    try:
        return base64.urlsafe_b64decode(token.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError) as e:
        raise ValueError(f"Invalid shareable id: {token!r}") from e


def extract_customer_id_from_url(url: str) -> str:
    """Return the customer id from a Dwolla customer URL.

    ``https://api-sandbox.dwolla.com/customers/abc-123`` -> ``abc-123``
    """
    return url.rstrip("/").rsplit("/", 1)[-1]
