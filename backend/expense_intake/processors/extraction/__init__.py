"""
Extraction: structured candidate fields from recognized receipt text.
"""
from .receipt_fields import (
    PatternTemplate, AMOUNT_TEMPLATES, DATE_TEMPLATES, MERCHANT_TEMPLATES,
    extract, extract_fields, extract_recognition,
    extract_amount, extract_date, extract_merchant, extract_items,
)

__all__ = [
    "PatternTemplate", "AMOUNT_TEMPLATES", "DATE_TEMPLATES", "MERCHANT_TEMPLATES",
    "extract", "extract_fields", "extract_recognition",
    "extract_amount", "extract_date", "extract_merchant", "extract_items",
]
