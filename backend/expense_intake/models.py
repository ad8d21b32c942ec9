"""
Pydantic models for the shapes exchanged with collaborators.

The form collaborator supplies a DraftExpense, the history collaborator a list
of ExistingExpenseRecord and the recognition collaborator a RecognitionOutput.
Models are frozen so engines cannot edit a caller's draft in place.
"""
import datetime as dt
from decimal import Decimal
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .processors.core.money import Money
from .processors.core.structures import AllocationMethod, AssetAllocation


def _coerce_money(value: Any) -> Any:
    """Accept Money, Decimal, int or amount text; blank text means "not entered"."""
    if value is None or isinstance(value, (Money, dict)):
        return value
    if isinstance(value, str) and not value.strip():
        return None
    if isinstance(value, float):
        # Form widgets sometimes hand over floats; go through repr to keep 2dp intact
        value = repr(value)
    return Money.coerce(value)


def _coerce_day(value: Any) -> Any:
    """Reduce datetimes and ISO timestamps to a calendar day."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return dt.date.fromisoformat(value.strip()[:10])
    return value


class PartialAllocation(BaseModel):
    """A per-target value typed by the user, applied on top of the default split."""
    model_config = ConfigDict(frozen=True)

    target_id: str
    amount: Optional[Money] = None
    percentage: Optional[Decimal] = None

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v: Any) -> Any:
        return _coerce_money(v)


class DraftExpense(BaseModel):
    """Expense being entered on the form. Never persisted by this library."""
    model_config = ConfigDict(frozen=True)

    id: Optional[str] = Field(
        default=None,
        description="Set when re-validating an expense that already exists in history"
    )
    amount: Optional[Money] = None
    category: str = ""
    description: str = ""
    project_id: Optional[str] = None
    date: Optional[dt.date] = None
    time: Optional[str] = None
    targets: Tuple[str, ...] = ()
    allocation_method: AllocationMethod = AllocationMethod.EQUAL
    allocations: Tuple[AssetAllocation, ...] = ()

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v: Any) -> Any:
        return _coerce_money(v)

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return _coerce_day(v)

    @field_validator('id', 'project_id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if v is not None else None

    @field_validator('category', 'description', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else ""


class ExistingExpenseRecord(BaseModel):
    """Previously recorded expense, as fetched by the history collaborator."""
    model_config = ConfigDict(frozen=True)

    id: str
    amount: Money
    date: Optional[dt.date] = None
    description: str = ""
    category: Optional[str] = None
    project_id: Optional[str] = None

    @field_validator('amount', mode='before')
    @classmethod
    def parse_amount(cls, v: Any) -> Any:
        return _coerce_money(v)

    @field_validator('date', mode='before')
    @classmethod
    def parse_date(cls, v: Any) -> Any:
        return _coerce_day(v)

    @field_validator('id', 'project_id', mode='before')
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v

    @field_validator('description', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return v if v is not None else ""


class RecognitionOutput(BaseModel):
    """Raw text and confidence returned by the external recognition engine."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    raw_text: str = Field(default="", alias="text")
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)

    @field_validator('raw_text', mode='before')
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return (v or "").strip() if isinstance(v, str) or v is None else v
