"""
Entity Base

DESIGN DECISION: Entities are frozen pydantic models. Validation happens
once, at construction, and a constructed entity is always valid. "Mutating"
an entity means building a new one through `replace()`, which re-runs every
validator, so an update can never produce an invalid record and a rejected
update leaves the original untouched.
"""

from datetime import datetime
from typing import Annotated, Any, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from mintlite.errors import ValidationCode, ValidationError
from mintlite.utils.dates import as_utc

EntityT = TypeVar("EntityT", bound="Entity")

# Naive datetimes are read as UTC so comparisons never mix naive and aware.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


def invalid(code: ValidationCode, message: str) -> PydanticCustomError:
    """Error to raise inside a validator; `code` survives to ValidationError."""
    return PydanticCustomError(code.value, message)


def require_text(value: str, code: ValidationCode, label: str) -> str:
    if not value or not value.strip():
        raise invalid(code, f"{label} cannot be empty")
    return value.strip()


class Entity(BaseModel):
    """Base class for all domain records."""

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, type(self).__name__) from exc

    def replace(self: EntityT, **changes: Any) -> EntityT:
        """Return a validated copy with `changes` applied."""
        data = self.model_dump()
        data.update(changes)
        return type(self)(**data)

    @property
    def entity_type(self) -> str:
        return type(self).__name__.lower()

    def to_log_dict(self) -> dict:
        """JSON-safe representation for structured logs."""
        return self.model_dump(mode="json")
