"""Presentation controllers package."""

from mintlite.controllers.accounts import AccountController
from mintlite.controllers.auth import AuthController, SessionController
from mintlite.controllers.base import BaseController, ControllerSnapshot, ControllerState
from mintlite.controllers.budgets import BudgetController
from mintlite.controllers.dashboard import DashboardController
from mintlite.controllers.goals import GoalController
from mintlite.controllers.investments import InvestmentController
from mintlite.controllers.notifications import NotificationController
from mintlite.controllers.search import DebouncedSearch
from mintlite.controllers.settings import SettingsController
from mintlite.controllers.transactions import TransactionController

__all__ = [
    # Base
    "BaseController",
    "ControllerSnapshot",
    "ControllerState",
    "DebouncedSearch",
    "SessionController",
    # Feature controllers
    "AccountController",
    "AuthController",
    "BudgetController",
    "DashboardController",
    "GoalController",
    "InvestmentController",
    "NotificationController",
    "SettingsController",
    "TransactionController",
]
