"""
Error Taxonomy for Mint Lite

Every failure in the core belongs to one of these classes. None of them is
fatal: each is local to one operation and leaves providers and controllers
in a valid, continuable state.

DESIGN DECISION: Entities are pydantic models, but callers never see
pydantic.ValidationError. The entity boundary converts it into our own
ValidationError carrying a stable code, so controllers and tests can match
on `code` rather than on pydantic's message text.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError


class ValidationCode(str, Enum):
    """Stable identifiers for invariant violations."""
    ID_INVALID = "id-invalid"
    AMOUNT_INVALID = "amount-invalid"
    BALANCE_INVALID = "balance-invalid"
    DATE_INVALID = "date-invalid"
    CATEGORY_INVALID = "category-invalid"
    NAME_INVALID = "name-invalid"
    DESCRIPTION_INVALID = "description-invalid"
    SYMBOL_INVALID = "symbol-invalid"
    ASSET_CLASS_INVALID = "asset-class-invalid"
    CURRENCY_INVALID = "currency-invalid"
    EMAIL_INVALID = "email-invalid"
    PASSWORD_INVALID = "password-invalid"
    FIELD_INVALID = "field-invalid"


class MintLiteError(Exception):
    """Base exception for every error raised by the core."""
    pass


class ValidationError(MintLiteError, ValueError):
    """
    An entity construction or update violated an invariant.

    Always surfaced, never retried.
    """

    def __init__(
        self,
        code: ValidationCode,
        message: str,
        field: Optional[str] = None,
        issues: Optional[list[dict[str, Any]]] = None,
    ):
        self.code = code
        self.field = field
        self.issues = issues or [
            {"code": code.value, "field": field, "message": message}
        ]
        super().__init__(message)

    @classmethod
    def from_pydantic(
        cls,
        exc: PydanticValidationError,
        model_name: str,
    ) -> "ValidationError":
        """Build from a pydantic error, keeping the first issue as primary."""
        issues = []
        for error in exc.errors():
            try:
                code = ValidationCode(error["type"])
            except ValueError:
                code = ValidationCode.FIELD_INVALID
            field = ".".join(str(part) for part in error.get("loc", ())) or None
            issues.append({
                "code": code.value,
                "field": field,
                "message": error.get("msg", ""),
            })

        primary = issues[0]
        message = f"Invalid {model_name}: {primary['message']}"
        if primary["field"]:
            message = f"Invalid {model_name}.{primary['field']}: {primary['message']}"

        return cls(
            code=ValidationCode(primary["code"]),
            message=message,
            field=primary["field"],
            issues=issues,
        )


class ProviderError(MintLiteError):
    """Base exception for data provider operations."""
    pass


class NotFoundError(ProviderError):
    """An operation referenced an id absent from the provider's collection."""

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class TransientError(ProviderError):
    """Simulated network failure. Not retried by the core."""
    pass


class ServiceUnavailableError(ProviderError):
    """The provider instance has been closed."""
    pass


class NotAuthenticatedError(ProviderError):
    """A user-scoped operation was issued with nobody logged in."""
    pass


class BiometricUnavailableError(ProviderError):
    """The platform reported biometrics unavailable or not enabled."""
    pass
