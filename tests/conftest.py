"""Shared fixtures for the Shop Ledger tests."""

from datetime import date
from decimal import Decimal

import pytest

from shopledger.config import OverpayPolicy
from shopledger.engine import ReconciliationEngine
from shopledger.models.ledger import Account
from shopledger.services.storage import InMemoryShopStorage


TODAY = date(2024, 3, 15)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_account():
    """Factory for accounts with given balances."""
    def _make(name="Rahim", contact="01711000000", due="0", debt="0"):
        return Account(
            display_name=name,
            contact_handle=contact,
            due_balance=Decimal(due),
            debt_balance=Decimal(debt),
        )
    return _make


@pytest.fixture
def engine() -> ReconciliationEngine:
    return ReconciliationEngine(OverpayPolicy.DISCARD, clock=lambda: TODAY)


@pytest.fixture
def credit_engine() -> ReconciliationEngine:
    return ReconciliationEngine(OverpayPolicy.CREDIT, clock=lambda: TODAY)


@pytest.fixture
def storage() -> InMemoryShopStorage:
    return InMemoryShopStorage()


@pytest.fixture
def data_path(tmp_path):
    return tmp_path / "shop" / "shop_data.json"
