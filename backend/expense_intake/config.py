"""
Configuration settings loaded from environment variables.
"""
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Determine .env file path (backend/.env)
_env_path = Path(__file__).parent.parent / ".env"

# Values already present in the environment take precedence over the file
load_dotenv(dotenv_path=_env_path, override=False)


class IntakeSettings(BaseSettings):
    """Tolerances and limits used by the expense-intake engines."""

    # Currency
    currency_code: str = Field(
        default="INR",
        alias="INTAKE_CURRENCY",
        description="ISO currency code attached to every Money value"
    )
    currency_symbol: str = Field(
        default="₹",
        alias="INTAKE_CURRENCY_SYMBOL",
        description="Symbol used when formatting amounts for messages"
    )

    # Allocation
    allocation_tolerance_minor_units: int = Field(
        default=1,
        alias="INTAKE_ALLOCATION_TOLERANCE",
        description=(
            "Largest allowed gap (in minor units) between the allocated sum and the total. "
            "For the percentage method it is applied once per target."
        )
    )
    percentage_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        alias="INTAKE_PERCENTAGE_TOLERANCE",
        description="Largest allowed gap between the percentage sum and 100"
    )

    # Duplicate detection
    duplicate_amount_tolerance_minor_units: int = Field(
        default=100,
        alias="INTAKE_DUPLICATE_AMOUNT_TOLERANCE",
        description="Amounts closer than this (exclusive, in minor units) count as the same amount"
    )
    related_expense_limit: int = Field(
        default=5,
        alias="INTAKE_RELATED_EXPENSE_LIMIT",
        description="Maximum number of same-category expenses returned for context"
    )

    # Receipt extraction
    low_confidence_threshold: float = Field(
        default=70.0,
        alias="INTAKE_LOW_CONFIDENCE_THRESHOLD",
        description="Recognition confidence (0-100) below which extracted fields need manual review"
    )
    amount_sanity_ceiling: Decimal = Field(
        default=Decimal("10000000"),
        alias="INTAKE_AMOUNT_SANITY_CEILING",
        description="Extracted amounts must be strictly below this value (major units)"
    )
    max_item_lines: int = Field(
        default=10,
        alias="INTAKE_MAX_ITEM_LINES",
        description="Maximum number of receipt body lines kept as item candidates"
    )

    # Application settings
    log_level: str = Field(
        default="info",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    @field_validator('percentage_tolerance', 'amount_sanity_ceiling', mode='before')
    @classmethod
    def parse_decimal_from_string(cls, v: Any) -> Decimal:
        """Parse decimals from environment strings without going through float."""
        if isinstance(v, Decimal):
            return v
        try:
            return Decimal(str(v).strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a decimal value: {v!r}") from e

    @field_validator(
        'allocation_tolerance_minor_units',
        'duplicate_amount_tolerance_minor_units',
        'percentage_tolerance',
    )
    @classmethod
    def check_non_negative(cls, v):
        if v < 0:
            raise ValueError("Tolerances cannot be negative")
        return v

    model_config = {
        "env_file": str(_env_path),
        "case_sensitive": False,
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
        "frozen": True,
    }


def load_settings(**overrides: Any) -> IntakeSettings:
    """
    Build a fresh settings object.

    Args:
        **overrides: Field values (by field name) that take precedence over the environment

    Returns:
        IntakeSettings instance
    """
    return IntakeSettings(**overrides)


def resolve_settings(settings: Optional[IntakeSettings]) -> IntakeSettings:
    """
    Return the given settings, or load them from the environment.

    Loading builds a new IntakeSettings and re-reads backend/.env each time.
    Callers on the per-keystroke path (allocation edits and validation) should
    load settings once and pass them explicitly.
    """
    return settings if settings is not None else load_settings()


def configure_logging(settings: Optional[IntakeSettings] = None) -> None:
    """Configure root logging from ``log_level``. Intended for applications embedding the library."""
    settings = resolve_settings(settings)
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)
