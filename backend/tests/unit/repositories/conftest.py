"""Fixtures for repository unit tests."""

from datetime import date
from decimal import Decimal

import pytest

from wealth.models import Account, Security, Transaction


@pytest.fixture
def test_account(db):
    """Create a test account."""
    account = Account(name="Broker", currency="USD", is_active=True)
    db.add(account)
    db.commit()
    db.refresh(account)
    return account


@pytest.fixture
def test_security(db):
    """Create a test security."""
    security = Security(isin="US0378331005", symbol="AAPL", name="Apple Inc.")
    db.add(security)
    db.commit()
    db.refresh(security)
    return security


@pytest.fixture
def test_transaction(db, test_account, test_security):
    """Create a BUY referencing the test account and security."""
    txn = Transaction(
        trade_date=date(2024, 1, 10),
        type="BUY",
        account_id=test_account.id,
        security_id=test_security.id,
        quantity=Decimal("10"),
        price=Decimal("100"),
        fees=Decimal("0"),
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    return txn
