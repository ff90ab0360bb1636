"""
Tests for the simulated data providers

Test strategy:
1. Each domain operation updates the collection and publishes exactly once
2. Failures (validation, not found, injected) publish nothing
3. Latency, shutdown and seeding behave like a real, if flaky, backend
"""

import asyncio
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from mintlite.audit import AuditLogger
from mintlite.errors import (
    BiometricUnavailableError,
    NotAuthenticatedError,
    NotFoundError,
    ServiceUnavailableError,
    TransientError,
    ValidationCode,
    ValidationError,
)
from mintlite.models import (
    AccountType,
    AssetClass,
    AuditEventType,
    BudgetPeriod,
    GoalCategory,
    NotificationType,
)
from mintlite.providers import (
    AccountProvider,
    AuthProvider,
    BudgetProvider,
    GoalProvider,
    InvestmentProvider,
    Latency,
    MockDataGenerator,
    MutationKind,
    NotificationProvider,
    TransactionProvider,
)

from tests.conftest import NOW


def record(provider):
    """Subscribe a list to a provider's channel and return it."""
    received = []
    provider.mutations.subscribe(received.append)
    return received


class TestSimulatedNetwork:
    """Tests for latency, failure injection and shutdown."""

    @pytest.mark.asyncio
    async def test_latency_is_applied(self):
        provider = GoalProvider(latency=Latency.fixed(0.05), seed=1)
        loop = asyncio.get_running_loop()
        started = loop.time()
        await provider.fetch_all()
        assert loop.time() - started >= 0.04

    def test_latency_bounds(self):
        with pytest.raises(ValueError):
            Latency(1.0, 0.5)
        with pytest.raises(ValueError):
            Latency(-0.1)
        assert Latency(0.5).sample(None) == 0.5

    def test_invalid_failure_probability(self):
        with pytest.raises(ValueError):
            GoalProvider(failure_probability=1.5)

    @pytest.mark.asyncio
    async def test_injected_failure_raises_transient_error(self):
        provider = BudgetProvider(failure_probability=1.0, seed=3)
        received = record(provider)
        before = provider.snapshot()

        with pytest.raises(TransientError):
            await provider.create_budget("Groceries", Decimal("750"), "Groceries", "monthly")

        assert received == []
        assert provider.snapshot() == before

    @pytest.mark.asyncio
    async def test_close_fails_pending_call_fast(self):
        provider = GoalProvider(latency=Latency.fixed(10.0), seed=1)
        pending = asyncio.create_task(provider.fetch_all())
        await asyncio.sleep(0)
        assert provider.pending_operations == 1

        provider.close()

        with pytest.raises(ServiceUnavailableError):
            await asyncio.wait_for(pending, timeout=1.0)
        assert provider.pending_operations == 0

    @pytest.mark.asyncio
    async def test_calls_after_close_fail(self):
        provider = GoalProvider(seed=1)
        provider.close()
        provider.close()
        assert provider.is_closed
        with pytest.raises(ServiceUnavailableError):
            await provider.fetch_all()

    @pytest.mark.asyncio
    async def test_close_is_audited(self, audit_logger):
        provider = GoalProvider(seed=1, audit_logger=audit_logger)
        provider.close()
        events = audit_logger.events_of_type(AuditEventType.PROVIDER_CLOSED)
        assert len(events) == 1
        assert events[0].entity_id == "GoalProvider"

    def test_same_seed_same_fixtures(self):
        first = AccountProvider(seed=42).snapshot()
        second = AccountProvider(seed=42).snapshot()
        assert [a.id for a in first] == [a.id for a in second]
        assert [a.balance for a in first] == [a.balance for a in second]

    def test_generator_transactions_are_newest_first(self):
        transactions = MockDataGenerator(seed=5, now=NOW).transactions(20, "ACC1")
        dates = [t.date for t in transactions]
        assert dates == sorted(dates, reverse=True)


class TestGenericOperations:
    """Tests for the operations every provider shares."""

    @pytest.mark.asyncio
    async def test_get_unknown_raises_not_found(self):
        provider = GoalProvider(seed=1)
        with pytest.raises(NotFoundError) as exc_info:
            await provider.get("missing")
        assert exc_info.value.entity_id == "missing"
        assert "Goal not found: missing" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_delete_publishes_deleted(self):
        provider = GoalProvider(seed=1)
        goal = provider.snapshot()[0]
        received = record(provider)

        await provider.delete(goal.id)

        assert [m.kind for m in received] == [MutationKind.DELETED]
        assert received[0].entity_id == goal.id
        assert goal.id not in [g.id for g in await provider.fetch_all()]

    @pytest.mark.asyncio
    async def test_delete_unknown_publishes_nothing(self):
        provider = GoalProvider(seed=1)
        received = record(provider)
        with pytest.raises(NotFoundError):
            await provider.delete("missing")
        assert received == []

    @pytest.mark.asyncio
    async def test_update_unknown_raises_not_found(self):
        provider = GoalProvider(seed=1)
        goal = provider.snapshot()[0]
        await provider.delete(goal.id)
        with pytest.raises(NotFoundError):
            await provider.update(goal)

    @pytest.mark.asyncio
    async def test_every_subscriber_sees_each_mutation_once(self):
        provider = GoalProvider(seed=1)
        inboxes = [record(provider) for _ in range(3)]
        goal = provider.snapshot()[0]

        await provider.update_progress(goal.id, Decimal("1"))

        for inbox in inboxes:
            assert len(inbox) == 1
            assert inbox[0].entity.current_amount == Decimal("1")

    @pytest.mark.asyncio
    async def test_collection_is_written_before_publish(self):
        provider = BudgetProvider(initial_budgets=[])
        seen_during_delivery = []
        provider.mutations.subscribe(
            lambda mutation: seen_during_delivery.append(
                [b.id for b in provider.snapshot()]
            )
        )

        budget = await provider.create_budget(
            "Groceries", Decimal("750"), "Groceries", "monthly", start_date=NOW
        )

        assert seen_during_delivery == [[budget.id]]

    @pytest.mark.asyncio
    async def test_mutations_are_audited(self, audit_logger):
        provider = GoalProvider(seed=1, audit_logger=audit_logger)
        goal = provider.snapshot()[0]
        await provider.update_progress(goal.id, Decimal("5"))
        events = audit_logger.events_for_entity(goal.id)
        assert [e.event_type for e in events] == [AuditEventType.ENTITY_UPDATED]

    @pytest.mark.asyncio
    async def test_failures_are_audited(self, audit_logger):
        provider = GoalProvider(seed=1, audit_logger=audit_logger)
        with pytest.raises(NotFoundError):
            await provider.get("missing")
        events = audit_logger.events_of_type(AuditEventType.OPERATION_FAILED)
        assert events[0].details["operation"] == "get"


class TestBudgetProvider:
    """Tests for budget creation and expiry."""

    @pytest.mark.asyncio
    async def test_create_monthly_budget(self):
        provider = BudgetProvider(initial_budgets=[])
        received = record(provider)

        budget = await provider.create_budget(
            "Groceries", Decimal("750"), "Groceries", BudgetPeriod.MONTHLY, start_date=NOW
        )

        assert budget.spent == Decimal("0")
        assert budget.is_active
        assert budget.start_date == datetime(2024, 3, 1, tzinfo=timezone.utc)
        assert budget.end_date == datetime(2024, 3, 31, 23, 59, 59, tzinfo=timezone.utc)
        assert [m.kind for m in received] == [MutationKind.CREATED]
        assert await provider.fetch_all() == [budget]

    @pytest.mark.asyncio
    async def test_create_weekly_budget(self):
        provider = BudgetProvider(initial_budgets=[])
        budget = await provider.create_budget(
            "Coffee", Decimal("25"), "Food & Dining", "weekly", start_date=NOW
        )
        assert budget.start_date == datetime(2024, 3, 11, tzinfo=timezone.utc)
        assert budget.end_date == datetime(2024, 3, 17, 23, 59, 59, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_custom_budget_needs_end_date(self):
        provider = BudgetProvider(initial_budgets=[])
        received = record(provider)
        with pytest.raises(ValidationError) as exc_info:
            await provider.create_budget(
                "Trip", Decimal("2000"), "Travel", "custom", start_date=NOW
            )
        assert exc_info.value.code == ValidationCode.DATE_INVALID
        assert received == []

    @pytest.mark.asyncio
    async def test_unknown_period(self):
        provider = BudgetProvider(initial_budgets=[])
        with pytest.raises(ValidationError) as exc_info:
            await provider.create_budget("Trip", Decimal("2000"), "Travel", "yearly")
        assert exc_info.value.code == ValidationCode.FIELD_INVALID

    @pytest.mark.asyncio
    async def test_invalid_amount_publishes_nothing(self):
        provider = BudgetProvider(initial_budgets=[])
        received = record(provider)
        with pytest.raises(ValidationError) as exc_info:
            await provider.create_budget("Groceries", Decimal("0"), "Groceries", "monthly")
        assert exc_info.value.code == ValidationCode.AMOUNT_INVALID
        assert received == []
        assert provider.snapshot() == []

    @pytest.mark.asyncio
    async def test_generic_create(self):
        provider = BudgetProvider(initial_budgets=[])
        budget = await provider.create({
            "name": "Fuel",
            "amount": Decimal("120"),
            "category": "Transportation",
            "period": "monthly",
            "start_date": NOW,
        })
        assert budget.period == BudgetPeriod.MONTHLY

    @pytest.mark.asyncio
    async def test_record_spending(self):
        provider = BudgetProvider(initial_budgets=[])
        budget = await provider.create_budget(
            "Groceries", Decimal("750"), "Groceries", "monthly", start_date=NOW
        )
        updated = await provider.record_spending(budget.id, Decimal("800"))
        assert updated.is_over_budget()

    @pytest.mark.asyncio
    async def test_purge_expired(self):
        provider = BudgetProvider(initial_budgets=[])
        march = await provider.create_budget(
            "March", Decimal("100"), "Shopping", "monthly", start_date=NOW
        )
        may = await provider.create_budget(
            "May", Decimal("100"), "Shopping", "monthly", start_date=NOW + timedelta(days=60)
        )
        received = record(provider)

        purged = await provider.purge_expired(as_of=datetime(2024, 4, 10, tzinfo=timezone.utc))

        assert purged == [march]
        assert [(m.kind, m.entity_id) for m in received] == [(MutationKind.DELETED, march.id)]
        assert provider.snapshot() == [may]


class TestAccountProvider:
    """Tests for account linking, balances and unlinking."""

    @pytest.mark.asyncio
    async def test_seeded_accounts(self):
        provider = AccountProvider(seed=7, seed_count=4)
        accounts = await provider.fetch_all()
        assert len(accounts) == 4
        assert all(a.is_active for a in accounts)

    @pytest.mark.asyncio
    async def test_link_account(self, sample_accounts):
        provider = AccountProvider(initial_accounts=sample_accounts, seed=1)
        received = record(provider)
        account = await provider.link_account("wells_fargo", AccountType.SAVINGS, Decimal("500"))
        assert account.balance == Decimal("500")
        assert received[0].kind == MutationKind.CREATED
        assert len(provider.snapshot()) == 3

    @pytest.mark.asyncio
    async def test_link_credit_account_simulates_debt(self):
        provider = AccountProvider(initial_accounts=[], seed=1)
        account = await provider.link_account("amex", AccountType.CREDIT)
        assert account.balance <= 0

    @pytest.mark.asyncio
    async def test_negative_balance_rejected_for_checking(self, sample_accounts):
        provider = AccountProvider(initial_accounts=sample_accounts)
        received = record(provider)
        with pytest.raises(ValidationError) as exc_info:
            await provider.update_balance("ACC1", Decimal("-1"))
        assert exc_info.value.code == ValidationCode.BALANCE_INVALID
        assert received == []
        assert (await provider.get_account("ACC1")).balance == Decimal("1000.00")

    @pytest.mark.asyncio
    async def test_negative_balance_allowed_for_credit(self, sample_accounts):
        provider = AccountProvider(initial_accounts=sample_accounts)
        account = await provider.update_balance("ACC2", Decimal("-999.99"))
        assert account.balance == Decimal("-999.99")

    @pytest.mark.asyncio
    async def test_refresh_drifts_within_bounds(self, sample_accounts):
        provider = AccountProvider(initial_accounts=sample_accounts, seed=11)
        account = await provider.refresh_account("ACC1")
        assert Decimal("950") <= account.balance <= Decimal("1050")

    @pytest.mark.asyncio
    async def test_unlink_deactivates_and_publishes_update(self, sample_accounts):
        provider = AccountProvider(initial_accounts=sample_accounts)
        received = record(provider)

        await provider.delete("ACC1")

        assert [m.kind for m in received] == [MutationKind.UPDATED]
        assert not received[0].entity.is_active
        assert len(await provider.fetch_all()) == 2
        assert [a.id for a in await provider.fetch_active()] == ["ACC2"]


class TestTransactionProvider:
    """Tests for transaction listing, search and edits."""

    @pytest.mark.asyncio
    async def test_seeded_once(self):
        provider = TransactionProvider(seed=9, seed_count=10)
        first = await provider.fetch_all()
        second = await provider.fetch_all()
        assert len(first) == 10
        assert [t.id for t in first] == [t.id for t in second]

    @pytest.mark.asyncio
    async def test_fetch_by_account(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        transactions = await provider.fetch_all(account_id="ACC2")
        assert [t.id for t in transactions] == ["t4"]

    @pytest.mark.asyncio
    async def test_search_matches_description_or_merchant(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        assert [t.id for t in await provider.search("AMAZON")] == ["t2"]
        assert {t.id for t in await provider.search("ap")} == {"t3"}
        assert len(await provider.search("   ")) == 4
        assert await provider.search("starbucks", account_id="ACC2") == []

    @pytest.mark.asyncio
    async def test_categorize(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        received = record(provider)
        updated = await provider.categorize("t1", "Food & Dining")
        assert updated.category == "Food & Dining"
        assert received[0].kind == MutationKind.UPDATED
        assert received[0].entity == updated

    @pytest.mark.asyncio
    async def test_add_note_and_clear_it(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        assert (await provider.add_note("t1", "split with Sam")).notes == "split with Sam"
        assert (await provider.add_note("t1", None)).notes is None

    @pytest.mark.asyncio
    async def test_update_cannot_change_amount(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        received = record(provider)
        tampered = sample_transactions[0].replace(amount=Decimal("-1.00"))
        with pytest.raises(ValidationError) as exc_info:
            await provider.update(tampered)
        assert exc_info.value.field == "amount"
        assert received == []

    @pytest.mark.asyncio
    async def test_update_category(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions)
        updated = await provider.update(sample_transactions[0].with_category("Coffee"))
        assert updated.category == "Coffee"

    @pytest.mark.asyncio
    async def test_import_publishes_each(self, sample_transactions):
        provider = TransactionProvider(initial_transactions=sample_transactions, seed=2)
        received = record(provider)
        imported = await provider.import_transactions("ACC1", count=3)
        assert len(imported) == 3
        assert [m.kind for m in received] == [MutationKind.CREATED] * 3
        assert len(provider.snapshot()) == 7


class TestGoalProvider:
    """Tests for goal progress."""

    @pytest.mark.asyncio
    async def test_create_goal(self):
        provider = GoalProvider(initial_goals=[], seed=1)
        goal = await provider.create_goal(
            "Emergency Fund", "Six months", Decimal("10000"),
            datetime.now(timezone.utc) + timedelta(days=365), category="emergency",
        )
        assert goal.current_amount == Decimal("0")
        assert goal.category == GoalCategory.EMERGENCY

    @pytest.mark.asyncio
    async def test_reaching_target_completes(self):
        provider = GoalProvider(seed=1)
        goal = provider.snapshot()[0]
        updated = await provider.update_progress(goal.id, goal.target_amount)
        assert updated.is_completed

    @pytest.mark.asyncio
    async def test_update_cannot_store_contradictory_completion(self):
        provider = GoalProvider(seed=1)
        goal = provider.snapshot()[0]
        stored = await provider.update(
            goal.replace(current_amount=goal.target_amount, is_completed=False)
        )
        assert stored.is_completed
        assert (await provider.get(goal.id)).is_completed

    @pytest.mark.asyncio
    async def test_negative_progress_leaves_goal_unchanged(self):
        provider = GoalProvider(seed=1)
        goal = provider.snapshot()[0]
        received = record(provider)
        with pytest.raises(ValidationError):
            await provider.update_progress(goal.id, Decimal("-5"))
        assert received == []
        assert (await provider.get(goal.id)) == goal


class TestInvestmentProvider:
    """Tests for holdings and price refresh."""

    @pytest.mark.asyncio
    async def test_seeded_portfolio(self):
        provider = InvestmentProvider(seed=1)
        apple = await provider.get("AAPL_001")
        assert apple.get_current_value() == Decimal("1750")
        assert len(provider.snapshot()) == 6

    @pytest.mark.asyncio
    async def test_refresh_prices_publishes_each_holding(self):
        provider = InvestmentProvider(seed=1)
        received = record(provider)
        refreshed = await provider.refresh_prices()
        assert len(refreshed) == 6
        assert [m.kind for m in received] == [MutationKind.UPDATED] * 6
        for investment in refreshed:
            assert investment.current_price >= 0

    @pytest.mark.asyncio
    async def test_refresh_stays_within_drift(self):
        provider = InvestmentProvider(seed=4)
        apple = await provider.refresh_investment("AAPL_001")
        assert Decimal("169.75") <= apple.current_price <= Decimal("180.25")

    @pytest.mark.asyncio
    async def test_add_holding_defaults_price_to_cost(self):
        provider = InvestmentProvider(initial_investments=[], seed=1)
        holding = await provider.add_holding(
            "ACCT001", "BND", "Vanguard Total Bond", Decimal("4"), Decimal("72"),
            asset_class="bonds",
        )
        assert holding.current_price == Decimal("72")
        assert holding.asset_class == AssetClass.BONDS
        assert holding.get_return_amount() == Decimal("0")


class TestNotificationProvider:
    """Tests for notifications and read state."""

    @pytest.mark.asyncio
    async def test_seeded_newest_first(self):
        provider = NotificationProvider(seed=1)
        notifications = await provider.fetch_all()
        timestamps = [n.timestamp for n in notifications]
        assert timestamps == sorted(timestamps, reverse=True)
        assert await provider.unread_count() == len(notifications)

    @pytest.mark.asyncio
    async def test_mark_as_read_publishes_once(self):
        provider = NotificationProvider(seed=1)
        notification = provider.snapshot()[0]
        received = record(provider)

        await provider.mark_as_read(notification.id)
        await provider.mark_as_read(notification.id)

        assert len(received) == 1
        assert received[0].entity.is_read

    @pytest.mark.asyncio
    async def test_mark_all_as_read(self):
        provider = NotificationProvider(seed=1)
        updated = await provider.mark_all_as_read()
        assert len(updated) == 3
        assert await provider.unread_count() == 0
        assert await provider.mark_all_as_read() == []

    @pytest.mark.asyncio
    async def test_simulate_notification_is_newest(self):
        provider = NotificationProvider(seed=1)
        created = await provider.simulate_notification("security_alert")
        assert created.type == NotificationType.SECURITY_ALERT
        assert (await provider.fetch_all())[0].id == created.id

    @pytest.mark.asyncio
    async def test_simulate_unknown_type(self):
        provider = NotificationProvider(seed=1)
        with pytest.raises(ValidationError) as exc_info:
            await provider.simulate_notification("carrier_pigeon")
        assert exc_info.value.code == ValidationCode.FIELD_INVALID


class TestAuthProvider:
    """Tests for sign-in, biometrics and preferences."""

    @pytest.mark.asyncio
    async def test_login_creates_mock_user(self):
        provider = AuthProvider(seed=1)
        received = record(provider)
        user = await provider.login("jane@example.com", "secret")
        assert user.full_name == "Mock User"
        assert provider.current_user == user
        assert [m.kind for m in received] == [MutationKind.CREATED]

    @pytest.mark.asyncio
    async def test_login_rejects_bad_email(self):
        provider = AuthProvider(seed=1)
        with pytest.raises(ValidationError) as exc_info:
            await provider.login("jane", "secret")
        assert exc_info.value.code == ValidationCode.EMAIL_INVALID
        assert not provider.is_authenticated

    @pytest.mark.asyncio
    async def test_login_rejects_empty_password(self):
        provider = AuthProvider(seed=1)
        with pytest.raises(ValidationError) as exc_info:
            await provider.login("jane@example.com", "")
        assert exc_info.value.code == ValidationCode.PASSWORD_INVALID

    @pytest.mark.asyncio
    async def test_register_requires_long_password(self):
        provider = AuthProvider(seed=1)
        with pytest.raises(ValidationError) as exc_info:
            await provider.register("jane@example.com", "short", "Jane", "Doe")
        assert exc_info.value.code == ValidationCode.PASSWORD_INVALID

    @pytest.mark.asyncio
    async def test_second_login_replaces_session(self):
        provider = AuthProvider(seed=1)
        first = await provider.login("jane@example.com", "secret")
        received = record(provider)
        second = await provider.register("sam@example.com", "longenough", "Sam", "Lee")
        assert [(m.kind, m.entity_id) for m in received] == [
            (MutationKind.DELETED, first.id),
            (MutationKind.CREATED, second.id),
        ]
        assert await provider.fetch_all() == [second]

    @pytest.mark.asyncio
    async def test_logout(self, audit_logger):
        provider = AuthProvider(seed=1, audit_logger=audit_logger)
        await provider.login("jane@example.com", "secret")
        received = record(provider)

        await provider.logout()
        await provider.logout()

        assert [m.kind for m in received] == [MutationKind.DELETED]
        assert provider.current_user is None
        assert len(audit_logger.events_of_type(AuditEventType.USER_LOGGED_OUT)) == 1

    @pytest.mark.asyncio
    async def test_biometrics_need_a_user(self):
        provider = AuthProvider(seed=1)
        with pytest.raises(NotAuthenticatedError):
            await provider.authenticate_with_biometrics()

    @pytest.mark.asyncio
    async def test_biometrics_need_opt_in(self):
        provider = AuthProvider(seed=1)
        await provider.login("jane@example.com", "secret")
        with pytest.raises(BiometricUnavailableError):
            await provider.authenticate_with_biometrics()

        await provider.set_biometric_enabled(True)
        assert await provider.authenticate_with_biometrics() is True

    @pytest.mark.asyncio
    async def test_biometric_preference_survives_relogin(self):
        provider = AuthProvider(seed=1)
        await provider.login("jane@example.com", "secret")
        await provider.set_biometric_enabled(True)
        await provider.logout()
        user = await provider.login("jane@example.com", "secret")
        assert user.biometric_enabled

    @pytest.mark.asyncio
    async def test_biometrics_unavailable_on_device(self):
        provider = AuthProvider(seed=1, biometric_capability=lambda: False)
        await provider.login("jane@example.com", "secret")
        with pytest.raises(BiometricUnavailableError):
            await provider.set_biometric_enabled(True)
        assert not provider.current_user.biometric_enabled

    @pytest.mark.asyncio
    async def test_preferences(self):
        provider = AuthProvider(seed=1)
        await provider.login("jane@example.com", "secret")
        received = record(provider)

        await provider.set_notifications_enabled(False)
        user = await provider.update_currency("gbp")

        assert user.preferred_currency == "GBP"
        assert not user.notifications_enabled
        assert [m.kind for m in received] == [MutationKind.UPDATED] * 2

    @pytest.mark.asyncio
    async def test_invalid_currency(self):
        provider = AuthProvider(seed=1)
        await provider.login("jane@example.com", "secret")
        with pytest.raises(ValidationError) as exc_info:
            await provider.update_currency("pounds")
        assert exc_info.value.code == ValidationCode.CURRENCY_INVALID

    @pytest.mark.asyncio
    async def test_preferences_need_a_user(self):
        provider = AuthProvider(seed=1)
        with pytest.raises(NotAuthenticatedError):
            await provider.update_profile(first_name="Jane")

    @pytest.mark.asyncio
    async def test_closed_provider_rejects_before_validating(self):
        provider = AuthProvider(seed=1)
        provider.close()
        with pytest.raises(ServiceUnavailableError):
            await provider.login("not-an-email", "")
        with pytest.raises(ServiceUnavailableError):
            await provider.register("jane@example.com", "short", "Jane", "Doe")

    @pytest.mark.asyncio
    async def test_invalid_credentials_still_wait_for_network(self):
        provider = AuthProvider(seed=1, latency=Latency.fixed(0.05))
        pending = asyncio.ensure_future(provider.login("not-an-email", "secret"))
        await asyncio.sleep(0)
        assert not pending.done()
        with pytest.raises(ValidationError) as exc_info:
            await pending
        assert exc_info.value.code == ValidationCode.EMAIL_INVALID

    @pytest.mark.asyncio
    async def test_update_profile_changes_email(self):
        provider = AuthProvider(seed=1)
        await provider.login("jane@example.com", "secret")
        received = record(provider)

        user = await provider.update_profile(first_name="Janet", email="janet@example.com")

        assert user.email == "janet@example.com"
        assert user.first_name == "Janet"
        assert not user.email_verified
        assert provider.current_user == user
        assert [m.kind for m in received] == [MutationKind.UPDATED]

    @pytest.mark.asyncio
    async def test_update_profile_rejects_malformed_email(self):
        provider = AuthProvider(seed=1)
        await provider.login("jane@example.com", "secret")
        received = record(provider)

        with pytest.raises(ValidationError) as exc_info:
            await provider.update_profile(email="janet@")

        assert exc_info.value.code == ValidationCode.EMAIL_INVALID
        assert provider.current_user.email == "jane@example.com"
        assert received == []

    @pytest.mark.asyncio
    async def test_login_is_audited(self):
        audit_logger = AuditLogger()
        provider = AuthProvider(seed=1, audit_logger=audit_logger)
        user = await provider.login("jane@example.com", "secret")
        events = audit_logger.events_of_type(AuditEventType.USER_LOGGED_IN)
        assert events[0].entity_id == user.id
