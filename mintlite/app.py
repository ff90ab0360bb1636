"""
Composition Root for Mint Lite

This module wires providers, controllers, settings and the audit logger.
Nothing else in the package constructs a provider on its own.

DESIGN DECISION: There are no provider singletons. Each call to
`create_app_components` builds an isolated set of providers, so a test (or
a second window) gets its own in-memory state and its own seed.

Controllers are cheap and screen-scoped, so they are built on demand from
the components rather than up front.
"""

from typing import Optional

import structlog

from mintlite.audit import AuditLogger, configure_logging
from mintlite.config import Settings, get_settings
from mintlite.controllers import (
    AccountController,
    AuthController,
    BudgetController,
    DashboardController,
    GoalController,
    InvestmentController,
    NotificationController,
    SettingsController,
    TransactionController,
)
from mintlite.providers import (
    AccountProvider,
    AuthProvider,
    BudgetProvider,
    GoalProvider,
    InvestmentProvider,
    NotificationProvider,
    SimulatedProvider,
    TransactionProvider,
)

logger = structlog.get_logger(__name__)


class AppComponents:
    """Every provider of one app instance plus the shared audit logger."""

    def __init__(
        self,
        settings: Settings,
        audit_logger: AuditLogger,
        accounts: AccountProvider,
        transactions: TransactionProvider,
        budgets: BudgetProvider,
        goals: GoalProvider,
        investments: InvestmentProvider,
        notifications: NotificationProvider,
        auth: AuthProvider,
        debounce_seconds: float,
    ):
        self.settings = settings
        self.audit_logger = audit_logger
        self.accounts = accounts
        self.transactions = transactions
        self.budgets = budgets
        self.goals = goals
        self.investments = investments
        self.notifications = notifications
        self.auth = auth
        self.debounce_seconds = debounce_seconds

    @property
    def providers(self) -> list[SimulatedProvider]:
        return [
            self.accounts,
            self.transactions,
            self.budgets,
            self.goals,
            self.investments,
            self.notifications,
            self.auth,
        ]

    # =========================================================================
    # Controller factories
    # =========================================================================

    def account_controller(self) -> AccountController:
        return AccountController(self.accounts, audit_logger=self.audit_logger)

    def transaction_controller(self, account_id: Optional[str] = None) -> TransactionController:
        return TransactionController(
            self.transactions,
            account_id=account_id,
            debounce_seconds=self.debounce_seconds,
            audit_logger=self.audit_logger,
        )

    def budget_controller(self) -> BudgetController:
        return BudgetController(self.budgets, audit_logger=self.audit_logger)

    def goal_controller(self) -> GoalController:
        return GoalController(self.goals, audit_logger=self.audit_logger)

    def investment_controller(self) -> InvestmentController:
        return InvestmentController(self.investments, audit_logger=self.audit_logger)

    def notification_controller(self) -> NotificationController:
        return NotificationController(self.notifications, audit_logger=self.audit_logger)

    def dashboard_controller(self) -> DashboardController:
        return DashboardController(
            self.accounts,
            self.transactions,
            audit_logger=self.audit_logger,
        )

    def auth_controller(self) -> AuthController:
        return AuthController(self.auth, audit_logger=self.audit_logger)

    def settings_controller(self) -> SettingsController:
        return SettingsController(self.auth, audit_logger=self.audit_logger)

    def close(self) -> None:
        """Close every provider; their pending calls fail fast."""
        for provider in self.providers:
            provider.close()


def create_app_components(
    settings: Optional[Settings] = None,
    configure_logs: bool = True,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use. Defaults to the cached environment settings.
        configure_logs: Whether to configure structlog from the app settings.
                        Set to False in tests that configure logging themselves.

    Returns:
        AppComponents with one instance of every provider.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    provider_settings = settings.providers

    if configure_logs:
        configure_logging(json_logs=app_settings.json_logs, log_level=app_settings.log_level)

    audit_logger = AuditLogger(trail_size=app_settings.audit_trail_size)

    # Each provider gets its own stream, derived from the shared seed
    def seeded(offset: int):
        if provider_settings.seed is None:
            return provider_settings
        return provider_settings.model_copy(update={"seed": provider_settings.seed + offset})

    currency = app_settings.default_currency
    components = AppComponents(
        settings=settings,
        audit_logger=audit_logger,
        accounts=AccountProvider.from_settings(
            seeded(0), audit_logger, default_currency=currency
        ),
        transactions=TransactionProvider.from_settings(seeded(1), audit_logger),
        budgets=BudgetProvider.from_settings(seeded(2), audit_logger),
        goals=GoalProvider.from_settings(seeded(3), audit_logger),
        investments=InvestmentProvider.from_settings(seeded(4), audit_logger),
        notifications=NotificationProvider.from_settings(seeded(5), audit_logger),
        auth=AuthProvider.from_settings(seeded(6), audit_logger, default_currency=currency),
        debounce_seconds=settings.search.debounce_seconds,
    )

    logger.info(
        "app_components_created",
        environment=app_settings.app_environment,
        seed=provider_settings.seed,
        failure_probability=provider_settings.failure_probability,
    )
    return components
