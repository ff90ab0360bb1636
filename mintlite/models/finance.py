"""
Core Financial Models for Mint Lite

These models define the records every provider owns and every controller
displays. They are designed to:
1. Reject invalid data at construction (no partially-built entities)
2. Expose derived values as pure methods (formatting, progress, returns)
3. Be immutable, so a controller can never corrupt provider-owned state

DESIGN DECISION: Money is Decimal, derived ratios are float. Amounts are
compared and summed exactly; percentages only ever feed display and
threshold checks.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator, model_validator

from mintlite.errors import ValidationCode
from mintlite.models.base import Entity, UtcDatetime, invalid, require_text
from mintlite.utils.dates import as_utc, format_for_display, utc_now
from mintlite.utils.formatting import (
    format_currency,
    format_investment_return,
    format_percentage,
)

CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.-]+$")


def _clamp_percentage(value: float) -> float:
    return min(max(value, 0.0), 100.0)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class AccountType(str, Enum):
    """Kinds of linked financial accounts."""
    CHECKING = "checking"
    SAVINGS = "savings"
    INVESTMENT = "investment"
    CREDIT = "credit"


class BudgetPeriod(str, Enum):
    """
    Budget window types.

    MONTHLY and WEEKLY windows are derived from a reference date;
    CUSTOM uses explicit start and end dates.
    """
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    CUSTOM = "custom"


class GoalCategory(str, Enum):
    SAVINGS = "savings"
    DEBT = "debt"
    INVESTMENT = "investment"
    EMERGENCY = "emergency"
    RETIREMENT = "retirement"
    EDUCATION = "education"
    HOME = "home"
    TRAVEL = "travel"
    OTHER = "other"


class AssetClass(str, Enum):
    STOCKS = "stocks"
    BONDS = "bonds"
    MUTUAL_FUNDS = "mutual_funds"
    ETFS = "etfs"
    CRYPTO = "crypto"
    CASH = "cash"


# =============================================================================
# ACCOUNTS & TRANSACTIONS
# =============================================================================

class Account(Entity):
    """
    A linked financial account.

    Balance may only go negative for credit accounts. Accounts are never
    hard-deleted; unlinking deactivates them.
    """

    id: str
    institution_id: str
    account_type: AccountType
    balance: Decimal
    currency: str = "USD"
    last_synced_at: UtcDatetime = Field(default_factory=utc_now)
    is_active: bool = True

    @field_validator("id", "institution_id")
    @classmethod
    def validate_ids(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "Account identifier")

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        code = v.upper()
        if not CURRENCY_PATTERN.match(code):
            raise invalid(
                ValidationCode.CURRENCY_INVALID,
                f"Currency must be a 3-letter code, got {v!r}",
            )
        return code

    @model_validator(mode="after")
    def validate_balance(self) -> "Account":
        if self.account_type != AccountType.CREDIT and self.balance < 0:
            raise invalid(
                ValidationCode.BALANCE_INVALID,
                "Balance cannot be negative for non-credit accounts",
            )
        return self

    def update_balance(
        self,
        new_balance: Decimal,
        synced_at: Optional[datetime] = None,
    ) -> "Account":
        """New balance and a refreshed sync timestamp."""
        return self.replace(
            balance=new_balance,
            last_synced_at=synced_at or utc_now(),
        )

    def deactivate(self) -> "Account":
        return self.replace(is_active=False)

    def formatted_balance(self) -> str:
        return format_currency(self.balance, self.currency)

    def formatted_last_synced(self) -> str:
        return format_for_display(self.last_synced_at)


class Transaction(Entity):
    """
    A posted or pending account transaction.

    Amount is signed: positive for credits, negative for debits.
    Amount and date are fixed; only category and notes change.
    """

    id: str
    account_id: str
    amount: Decimal
    date: UtcDatetime
    description: str
    category: str
    pending: bool = False
    merchant_name: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("id", "account_id")
    @classmethod
    def validate_ids(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "Transaction identifier")

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        return require_text(v, ValidationCode.DESCRIPTION_INVALID, "Transaction description")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return require_text(v, ValidationCode.CATEGORY_INVALID, "Transaction category")

    @property
    def is_debit(self) -> bool:
        return self.amount < 0

    def with_category(self, category: str) -> "Transaction":
        return self.replace(category=category)

    def with_notes(self, notes: Optional[str]) -> "Transaction":
        return self.replace(notes=notes)

    def matches(self, query: str) -> bool:
        """Case-insensitive match on description or merchant name."""
        needle = query.lower()
        if needle in self.description.lower():
            return True
        return bool(self.merchant_name and needle in self.merchant_name.lower())

    def formatted_amount(self, currency: str = "USD") -> str:
        return format_currency(self.amount, currency)

    def formatted_date(self) -> str:
        return format_for_display(self.date)


# =============================================================================
# BUDGETS & GOALS
# =============================================================================

class Budget(Entity):
    """
    A spending limit for one category over a time window.

    `spent` may exceed `amount`; only the displayed percentage is clamped.
    """

    id: str
    name: str
    amount: Decimal
    category: str
    period: BudgetPeriod
    start_date: UtcDatetime
    end_date: UtcDatetime
    spent: Decimal = Decimal("0")
    is_active: bool = True

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "Budget ID")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, ValidationCode.NAME_INVALID, "Budget name")

    @field_validator("category")
    @classmethod
    def validate_category(cls, v: str) -> str:
        return require_text(v, ValidationCode.CATEGORY_INVALID, "Budget category")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise invalid(
                ValidationCode.AMOUNT_INVALID,
                "Budget amount must be greater than zero",
            )
        return v

    @field_validator("spent")
    @classmethod
    def validate_spent(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise invalid(ValidationCode.AMOUNT_INVALID, "Spent amount cannot be negative")
        return v

    @model_validator(mode="after")
    def validate_dates(self) -> "Budget":
        if self.end_date <= self.start_date:
            raise invalid(ValidationCode.DATE_INVALID, "End date must be after start date")
        return self

    def spent_ratio(self) -> float:
        """Unclamped spent / amount."""
        return float(self.spent / self.amount)

    def spent_percentage(self) -> float:
        """Percentage spent for display, clamped to [0, 100]."""
        return _clamp_percentage(self.spent_ratio() * 100)

    def is_over_budget(self) -> bool:
        return self.spent > self.amount

    def remaining_amount(self) -> Decimal:
        """Negative once overspent."""
        return self.amount - self.spent

    def is_expired(self, as_of: datetime) -> bool:
        return self.end_date < as_utc(as_of)

    def with_spending(self, spent: Decimal) -> "Budget":
        return self.replace(spent=spent)

    def formatted_amount(self) -> str:
        return format_currency(self.amount)

    def formatted_spent(self) -> str:
        return format_currency(self.spent)

    def formatted_progress(self) -> str:
        return format_percentage(self.spent_percentage())


class Goal(Entity):
    """
    A savings target with progress tracking.

    Completion compares raw amounts, never the clamped display percentage.
    """

    id: str
    name: str
    description: str = ""
    target_amount: Decimal
    current_amount: Decimal = Decimal("0")
    target_date: UtcDatetime
    created_at: UtcDatetime = Field(default_factory=utc_now)
    is_completed: bool = False
    category: GoalCategory = GoalCategory.OTHER

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "Goal ID")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, ValidationCode.NAME_INVALID, "Goal name")

    @field_validator("target_amount")
    @classmethod
    def validate_target_amount(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise invalid(
                ValidationCode.AMOUNT_INVALID,
                "Target amount must be greater than zero",
            )
        return v

    @field_validator("current_amount")
    @classmethod
    def validate_current_amount(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise invalid(
                ValidationCode.AMOUNT_INVALID,
                "Current amount cannot be negative",
            )
        return v

    @field_validator("category", mode="before")
    @classmethod
    def validate_category(cls, v: Any) -> Any:
        if isinstance(v, GoalCategory):
            return v
        try:
            return GoalCategory(str(v).strip().lower())
        except ValueError:
            raise invalid(ValidationCode.CATEGORY_INVALID, f"Unknown goal category: {v!r}")

    @model_validator(mode="before")
    @classmethod
    def derive_completion(cls, data: Any) -> Any:
        """`is_completed` always follows the amounts; a passed flag is overridden."""
        if not isinstance(data, dict):
            return data
        try:
            target = Decimal(str(data["target_amount"]))
            current = Decimal(str(data.get("current_amount", "0")))
        except (KeyError, InvalidOperation):
            # Field validation reports the bad amount
            return data
        return {**data, "is_completed": current >= target}

    @model_validator(mode="after")
    def validate_target_date(self) -> "Goal":
        if self.target_date <= self.created_at:
            raise invalid(
                ValidationCode.DATE_INVALID,
                "Target date must be after the goal's creation time",
            )
        return self

    def calculate_progress(self) -> float:
        """Progress toward target for display, clamped to [0, 100]."""
        return _clamp_percentage(float(self.current_amount / self.target_amount) * 100)

    def update_progress(self, new_amount: Decimal) -> "Goal":
        """
        Set the saved amount and recompute completion.

        Raises:
            ValidationError: if `new_amount` is negative
        """
        amount = Decimal(str(new_amount)) if isinstance(new_amount, float) else Decimal(new_amount)
        return self.replace(current_amount=amount)

    def remaining_amount(self) -> Decimal:
        return max(self.target_amount - self.current_amount, Decimal("0"))

    def formatted_target_amount(self) -> str:
        return format_currency(self.target_amount)

    def formatted_current_amount(self) -> str:
        return format_currency(self.current_amount)

    def formatted_progress(self) -> str:
        return format_percentage(self.calculate_progress())

    def formatted_target_date(self) -> str:
        return format_for_display(self.target_date)


# =============================================================================
# INVESTMENTS
# =============================================================================

class Investment(Entity):
    """
    A single holding in a portfolio.

    `cost_basis` and `current_price` are per unit.
    """

    id: str
    account_id: str
    symbol: str
    name: str
    quantity: Decimal
    cost_basis: Decimal
    current_price: Decimal
    last_updated_at: UtcDatetime = Field(default_factory=utc_now)
    asset_class: AssetClass

    @field_validator("id", "account_id")
    @classmethod
    def validate_ids(cls, v: str) -> str:
        return require_text(v, ValidationCode.ID_INVALID, "Investment identifier")

    @field_validator("symbol")
    @classmethod
    def validate_symbol(cls, v: str) -> str:
        if not SYMBOL_PATTERN.match(v):
            raise invalid(ValidationCode.SYMBOL_INVALID, f"Invalid ticker symbol: {v!r}")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return require_text(v, ValidationCode.NAME_INVALID, "Investment name")

    @field_validator("quantity", "cost_basis", "current_price")
    @classmethod
    def validate_non_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise invalid(ValidationCode.AMOUNT_INVALID, "Value cannot be negative")
        return v

    @field_validator("asset_class", mode="before")
    @classmethod
    def validate_asset_class(cls, v: Any) -> Any:
        if isinstance(v, AssetClass):
            return v
        try:
            return AssetClass(str(v).strip().lower())
        except ValueError:
            raise invalid(ValidationCode.ASSET_CLASS_INVALID, f"Unknown asset class: {v!r}")

    def get_current_value(self) -> Decimal:
        return self.quantity * self.current_price

    def get_total_cost(self) -> Decimal:
        return self.quantity * self.cost_basis

    def get_return_amount(self) -> Decimal:
        return self.get_current_value() - self.get_total_cost()

    def get_return_percentage(self) -> float:
        """Return as a ratio of total cost (0.25 == 25%); 0.0 with no cost."""
        total_cost = self.get_total_cost()
        if total_cost <= 0:
            return 0.0
        return float(self.get_return_amount() / total_cost)

    def get_formatted_current_value(self) -> str:
        return format_currency(self.get_current_value())

    def get_formatted_return(self) -> str:
        return format_investment_return(self.get_return_percentage())

    def with_price(
        self,
        price: Decimal,
        updated_at: Optional[datetime] = None,
    ) -> "Investment":
        return self.replace(
            current_price=price,
            last_updated_at=updated_at or utc_now(),
        )
