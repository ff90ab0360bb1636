"""
Shared fixtures for the Mint Lite test suite.

Providers are built with zero latency and a fixed seed unless a test needs
something else, so every test is deterministic and fast.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from mintlite.audit import AuditLogger
from mintlite.models import Account, AccountType, Transaction
from mintlite.providers import Latency


NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


class ScriptedLatency(Latency):
    """Latency that plays back a fixed list of delays, then zero."""

    def __init__(self, delays):
        super().__init__(0.0)
        self.delays = list(delays)

    def sample(self, rng):
        return self.delays.pop(0) if self.delays else 0.0


def make_transaction(transaction_id, description, account_id="ACC1", days_ago=0, amount="-10.00",
                     merchant_name=None, category="Shopping"):
    return Transaction(
        id=transaction_id,
        account_id=account_id,
        amount=Decimal(amount),
        date=NOW - timedelta(days=days_ago),
        description=description,
        category=category,
        merchant_name=merchant_name,
    )


@pytest.fixture
def audit_logger():
    return AuditLogger(trail_size=100)


@pytest.fixture
def sample_transactions():
    return [
        make_transaction("t1", "Starbucks Coffee", merchant_name="Starbucks", days_ago=1),
        make_transaction("t2", "Amazon Order", merchant_name="Amazon", days_ago=2),
        make_transaction("t3", "Apple Store", merchant_name="Apple", days_ago=3),
        make_transaction("t4", "Payroll", account_id="ACC2", amount="2500.00", days_ago=4,
                         category="Income"),
    ]


@pytest.fixture
def sample_accounts():
    return [
        Account(id="ACC1", institution_id="chase", account_type=AccountType.CHECKING,
                balance=Decimal("1000.00")),
        Account(id="ACC2", institution_id="amex", account_type=AccountType.CREDIT,
                balance=Decimal("-250.00")),
    ]
