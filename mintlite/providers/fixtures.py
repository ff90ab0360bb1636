"""
Mock Data Generator

Seed data for the simulated providers. Everything random comes from one
seeded `random.Random`, and "now" can be pinned, so the same seed always
produces the same accounts, transactions, budgets, goals, holdings and
notifications (ids included).
"""

import random
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from mintlite.models.finance import (
    Account,
    AccountType,
    AssetClass,
    Budget,
    BudgetPeriod,
    Goal,
    GoalCategory,
    Investment,
    Transaction,
)
from mintlite.models.notification import (
    Notification,
    NotificationData,
    NotificationPriority,
    NotificationType,
)
from mintlite.utils.dates import as_utc, end_of_month, start_of_month, utc_now

MERCHANTS = [
    "Whole Foods Market",
    "Amazon",
    "Target",
    "Starbucks",
    "Apple Store",
    "Chevron",
    "Netflix",
    "Uber",
    "Home Depot",
    "Walmart",
]

CATEGORIES = [
    "Groceries",
    "Shopping",
    "Entertainment",
    "Transportation",
    "Utilities",
    "Dining",
    "Healthcare",
    "Travel",
    "Education",
    "Housing",
]

INSTITUTIONS = [
    "Chase Bank",
    "Bank of America",
    "Wells Fargo",
    "Citibank",
    "Capital One",
    "American Express",
    "Fidelity",
    "Charles Schwab",
    "Vanguard",
    "TD Bank",
]

# (account type, balance range); credit balances are owed amounts
_ACCOUNT_PROFILES = [
    (AccountType.CHECKING, (1000, 15000)),
    (AccountType.SAVINGS, (5000, 50000)),
    (AccountType.INVESTMENT, (10000, 250000)),
    (AccountType.CREDIT, (-5000, 0)),
]

_BUDGET_RANGES = {
    "Housing": (1500, 3000),
    "Groceries": (400, 800),
    "Transportation": (200, 500),
    "Entertainment": (100, 300),
}

_GOAL_TEMPLATES = [
    ("Emergency Fund", "Six months of expenses", GoalCategory.EMERGENCY, (5000, 20000)),
    ("Vacation", "Summer trip", GoalCategory.TRAVEL, (1500, 6000)),
    ("Down Payment", "House down payment", GoalCategory.HOME, (20000, 80000)),
    ("Pay Off Card", "Clear the credit card balance", GoalCategory.DEBT, (1000, 8000)),
    ("Retirement Boost", "Extra retirement contributions", GoalCategory.RETIREMENT, (5000, 30000)),
    ("Tuition", "Next semester's tuition", GoalCategory.EDUCATION, (3000, 15000)),
]

# symbol, name, quantity, cost basis, current price, asset class
_HOLDINGS = [
    ("AAPL", "Apple Inc.", "10", "150", "175", AssetClass.STOCKS),
    ("GOOGL", "Alphabet Inc.", "5", "2800", "2950", AssetClass.STOCKS),
    ("MSFT", "Microsoft Corporation", "15", "285", "310", AssetClass.STOCKS),
    ("VOO", "Vanguard S&P 500 ETF", "20", "350", "380", AssetClass.ETFS),
    ("VTI", "Vanguard Total Stock Market ETF", "25", "200", "220", AssetClass.ETFS),
    ("VFIAX", "Vanguard 500 Index Fund", "50", "375", "395", AssetClass.MUTUAL_FUNDS),
]

DEFAULT_INVESTMENT_ACCOUNT = "ACCT001"


def money(value: float) -> Decimal:
    """Round a float to cents as a Decimal."""
    return Decimal(str(round(value, 2)))


class MockDataGenerator:
    """
    Deterministic fixture factory.

    Usage:
        generator = MockDataGenerator(seed=42)
        accounts = generator.accounts(5)
        transactions = generator.transactions(20, accounts[0].id)
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        now: Optional[datetime] = None,
        rng: Optional[random.Random] = None,
    ):
        self._rng = rng or random.Random(seed)
        self._now = as_utc(now) if now else utc_now()

    @property
    def now(self) -> datetime:
        return self._now

    def new_id(self) -> str:
        return str(uuid.UUID(int=self._rng.getrandbits(128), version=4))

    def accounts(self, count: int = 5) -> list[Account]:
        accounts = []
        for index in range(count):
            account_type, (low, high) = _ACCOUNT_PROFILES[index % len(_ACCOUNT_PROFILES)]
            accounts.append(Account(
                id=self.new_id(),
                institution_id=INSTITUTIONS[index % len(INSTITUTIONS)],
                account_type=account_type,
                balance=money(self._rng.uniform(low, high)),
                currency="USD",
                last_synced_at=self._now - timedelta(days=self._rng.randint(0, 7)),
                is_active=True,
            ))
        return accounts

    def transaction(self, account_id: str) -> Transaction:
        # 80% debits
        if self._rng.random() < 0.8:
            amount = -money(self._rng.uniform(5, 500))
        else:
            amount = money(self._rng.uniform(100, 5000))
        merchant = self._rng.choice(MERCHANTS)
        return Transaction(
            id=self.new_id(),
            account_id=account_id,
            amount=amount,
            date=self._now - timedelta(days=self._rng.randint(0, 90)),
            description=f"{merchant} Transaction",
            category=self._rng.choice(CATEGORIES),
            pending=self._rng.random() < 0.1,
            merchant_name=merchant,
        )

    def transactions(self, count: int, account_id: str) -> list[Transaction]:
        """Newest first."""
        generated = [self.transaction(account_id) for _ in range(count)]
        return sorted(generated, key=lambda t: t.date, reverse=True)

    def budget(self) -> Budget:
        category = self._rng.choice(CATEGORIES)
        low, high = _BUDGET_RANGES.get(category, (200, 1000))
        amount = money(self._rng.uniform(low, high))
        # 0-120% of the limit, so some seeds start over budget
        spent = money(float(amount) * self._rng.uniform(0, 1.2))
        return Budget(
            id=self.new_id(),
            name=f"{category} Budget",
            amount=amount,
            category=category,
            period=BudgetPeriod.MONTHLY,
            start_date=start_of_month(self._now),
            end_date=end_of_month(self._now),
            spent=spent,
            is_active=True,
        )

    def goals(self, count: int = 5) -> list[Goal]:
        goals = []
        for index in range(count):
            name, description, category, (low, high) = _GOAL_TEMPLATES[index % len(_GOAL_TEMPLATES)]
            target = money(self._rng.uniform(low, high))
            current = money(float(target) * self._rng.uniform(0, 0.9))
            created_at = self._now - timedelta(days=self._rng.randint(30, 365))
            goals.append(Goal(
                id=self.new_id(),
                name=name,
                description=description,
                target_amount=target,
                current_amount=current,
                target_date=self._now + timedelta(days=self._rng.randint(60, 1000)),
                created_at=created_at,
                category=category,
            ))
        return goals

    def investments(self, account_id: str = DEFAULT_INVESTMENT_ACCOUNT) -> list[Investment]:
        """The fixed demo portfolio; ids are "<SYMBOL>_001"."""
        return [
            Investment(
                id=f"{symbol}_001",
                account_id=account_id,
                symbol=symbol,
                name=name,
                quantity=Decimal(quantity),
                cost_basis=Decimal(cost),
                current_price=Decimal(price),
                last_updated_at=self._now,
                asset_class=asset_class,
            )
            for symbol, name, quantity, cost, price, asset_class in _HOLDINGS
        ]

    def notifications(self) -> list[Notification]:
        """Three recent alerts, newest first."""
        return [
            Notification(
                id=self.new_id(),
                type=NotificationType.BUDGET_ALERT,
                title="Budget Alert",
                message="You've reached 85% of your Dining budget",
                timestamp=self._now - timedelta(hours=1),
                priority=NotificationPriority.HIGH,
                data=NotificationData(budget_id="budget123", percentage=85.0),
            ),
            Notification(
                id=self.new_id(),
                type=NotificationType.TRANSACTION_ALERT,
                title="Large Transaction",
                message="Transaction of $150.00 detected",
                timestamp=self._now - timedelta(hours=2),
                priority=NotificationPriority.MEDIUM,
                data=NotificationData(transaction_id="trans456", amount=Decimal("150.00")),
            ),
            Notification(
                id=self.new_id(),
                type=NotificationType.INVESTMENT_UPDATE,
                title="Investment Update",
                message="Your portfolio has increased by 2.5%",
                timestamp=self._now - timedelta(hours=4),
                priority=NotificationPriority.LOW,
                data=NotificationData(account_id="inv789", percentage=2.5),
            ),
        ]
