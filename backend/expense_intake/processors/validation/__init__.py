"""
Validation: submit-gate report combining allocation errors and duplicate matches.
"""
from .pipeline import (
    ValidationReport, build_validation_report, extraction_advisories, validate_draft_fields,
)

__all__ = [
    "ValidationReport", "build_validation_report", "extraction_advisories", "validate_draft_fields",
]
