"""API route handlers."""
from . import auth, banks, dashboard, plaid

__all__ = ["auth", "banks", "dashboard", "plaid"]
