"""Data providers package."""

from mintlite.providers.accounts import AccountProvider
from mintlite.providers.auth import AuthProvider
from mintlite.providers.base import Latency, SimulatedProvider
from mintlite.providers.budgets import BudgetProvider
from mintlite.providers.channel import (
    Mutation,
    MutationChannel,
    MutationKind,
    Subscription,
)
from mintlite.providers.fixtures import MockDataGenerator
from mintlite.providers.goals import GoalProvider
from mintlite.providers.interface import DataProvider
from mintlite.providers.investments import InvestmentProvider
from mintlite.providers.notifications import NotificationProvider
from mintlite.providers.transactions import TransactionProvider

__all__ = [
    # Plumbing
    "DataProvider",
    "Latency",
    "MockDataGenerator",
    "Mutation",
    "MutationChannel",
    "MutationKind",
    "SimulatedProvider",
    "Subscription",
    # Domain providers
    "AccountProvider",
    "AuthProvider",
    "BudgetProvider",
    "GoalProvider",
    "InvestmentProvider",
    "NotificationProvider",
    "TransactionProvider",
]
