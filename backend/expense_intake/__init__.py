"""
Expense intake validation: allocation, duplicate detection and receipt field
extraction for expense drafts.
"""
from .config import IntakeSettings, configure_logging, load_settings
from .models import DraftExpense, ExistingExpenseRecord, PartialAllocation, RecognitionOutput
from .processors.core import (
    AllocationMethod, AllocationSet, AssetAllocation, DuplicateMatch, ErrorCode,
    FieldError, Money, OCRExtractionResult,
)
from .processors.allocation import (
    allocate, reconcile, seed_allocations, update_amount, update_percentage, validate_allocations,
)
from .processors.duplicates import find_duplicates, find_project_expenses, find_related_expenses
from .processors.extraction import extract, extract_fields, extract_recognition
from .processors.text import build_form_prefill, normalize_receipt_date
from .processors.validation import ValidationReport, build_validation_report

__version__ = "0.1.0"

__all__ = [
    "IntakeSettings", "configure_logging", "load_settings",
    "DraftExpense", "ExistingExpenseRecord", "PartialAllocation", "RecognitionOutput",
    "AllocationMethod", "AllocationSet", "AssetAllocation", "DuplicateMatch", "ErrorCode",
    "FieldError", "Money", "OCRExtractionResult",
    "allocate", "reconcile", "seed_allocations", "update_amount", "update_percentage",
    "validate_allocations",
    "find_duplicates", "find_project_expenses", "find_related_expenses",
    "extract", "extract_fields", "extract_recognition",
    "build_form_prefill", "normalize_receipt_date",
    "ValidationReport", "build_validation_report",
]
