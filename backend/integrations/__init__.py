"""External API integrations.

This package contains:
- Appwrite client: identity, sessions, and document storage
- Plaid client: bank linking, balances, and transactions
- Dwolla client: payment-rail customers and funding sources
- Upstream exceptions shared by all three
"""

from integrations.appwrite_client import AppwriteGateway, SessionContext
from integrations.dwolla_client import DwollaClient
from integrations.plaid_client import PlaidClient

__all__ = [
    "AppwriteGateway",
    "DwollaClient",
    "PlaidClient",
    "SessionContext",
]
