"""Tests for DashboardService."""

from datetime import date, timedelta

import pytest

from integrations.appwrite_client import SessionContext
from services.account_service import AccountService
from services.bank_service import BankService
from services.dashboard_service import ROWS_PER_PAGE, DashboardService
from services.user_service import UserService
from tests.fixtures import seed_bank
from tests.fixtures.mocks import MockPlaidClient


def _dashboard(gateway, plaid, dwolla) -> DashboardService:
    return DashboardService(UserService(gateway, dwolla), AccountService(plaid, BankService(gateway)))


@pytest.fixture
def service(gateway, plaid, dwolla):
    return _dashboard(gateway, plaid, dwolla)


def _many_transactions(count: int) -> list[dict]:
    start = date(2026, 1, 1)
    return [
        {
            "transaction_id": f"txn_{i:03d}",
            "account_id": "acc_checking",
            "name": f"Purchase {i}",
            "amount": i,
            "date": (start + timedelta(days=i)).isoformat(),
        }
        for i in range(count)
    ]


class TestCompose:
    def test_no_session(self, service):
        assert service.compose(SessionContext()) is None

    def test_zero_accounts(self, service, signed_in_user):
        _, secret = signed_in_user

        assert service.compose(SessionContext(secret)) is None

    def test_defaults_to_first_account(self, service, appwrite_backend, signed_in_user):
        document, secret = signed_in_user
        first = seed_bank(appwrite_backend, document["$id"], account_id="acc_checking")
        seed_bank(appwrite_backend, document["$id"], account_id="acc_savings", bank_id="item_002")

        dashboard = service.compose(SessionContext(secret))

        assert dashboard.greeting_name == "Ada Lovelace"
        assert dashboard.total_banks == 2
        assert dashboard.appwrite_item_id == first["$id"]
        assert dashboard.selected_account.id == "acc_checking"
        assert [t.id for t in dashboard.transactions] == ["txn_002", "txn_001"]
        assert len(dashboard.sidebar_banks) == 2

    def test_account_selector(self, service, appwrite_backend, signed_in_user):
        document, secret = signed_in_user
        seed_bank(appwrite_backend, document["$id"], account_id="acc_checking")
        savings = seed_bank(appwrite_backend, document["$id"], account_id="acc_savings", bank_id="item_002")

        dashboard = service.compose(SessionContext(secret), account_selector=savings["$id"])

        assert dashboard.appwrite_item_id == savings["$id"]
        assert dashboard.selected_account.id == "acc_savings"
        assert [t.id for t in dashboard.transactions] == ["txn_003"]

    def test_unknown_selector_falls_back_to_first_account(self, service, appwrite_backend, signed_in_user):
        document, secret = signed_in_user
        first = seed_bank(appwrite_backend, document["$id"])

        dashboard = service.compose(SessionContext(secret), account_selector="missing")

        assert dashboard.appwrite_item_id == first["$id"]
        assert dashboard.selected_account.id == "acc_checking"

    def test_other_users_bank_is_never_read(self, service, appwrite_backend, signed_in_user):
        document, secret = signed_in_user
        own = seed_bank(appwrite_backend, document["$id"])
        other = seed_bank(appwrite_backend, "someone_else", account_id="acc_savings", bank_id="item_002")

        dashboard = service.compose(SessionContext(secret), account_selector=other["$id"])

        assert dashboard.appwrite_item_id == own["$id"]
        assert dashboard.selected_account.id == "acc_checking"
        assert "txn_003" not in [t.id for t in dashboard.transactions]

    def test_sidebar_is_limited(self, service, appwrite_backend, signed_in_user):
        document, secret = signed_in_user
        for i in range(3):
            seed_bank(appwrite_backend, document["$id"], bank_id=f"item_{i}")

        dashboard = service.compose(SessionContext(secret))

        assert dashboard.total_banks == 3
        assert len(dashboard.sidebar_banks) == 2


class TestPagination:
    @pytest.fixture
    def paged(self, gateway, dwolla, appwrite_backend, signed_in_user):
        document, secret = signed_in_user
        seed_bank(appwrite_backend, document["$id"])
        plaid = MockPlaidClient(transactions=_many_transactions(23))
        return _dashboard(gateway, plaid, dwolla), SessionContext(secret)

    def test_first_page(self, paged):
        service, session = paged

        page = service.compose(session).recent_transactions

        assert page.page == 1
        assert page.total_pages == 3
        assert len(page.items) == ROWS_PER_PAGE
        assert page.items[0].id == "txn_022"

    def test_last_page(self, paged):
        service, session = paged

        page = service.compose(session, page=3).recent_transactions

        assert [t.id for t in page.items] == ["txn_002", "txn_001", "txn_000"]

    def test_page_past_the_end_is_empty(self, paged):
        service, session = paged

        page = service.compose(session, page=9).recent_transactions

        assert page.items == []
        assert page.total_pages == 3
