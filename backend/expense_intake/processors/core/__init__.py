"""
Processors Core: Shared value types used by every intake engine.
"""
from .money import Money, CurrencyMismatchError, round_half_up, sum_money
from .structures import (
    AllocationMethod, ErrorCode, FieldError, UnknownTargetError,
    AssetAllocation, AllocationSet, DuplicateMatch, OCRExtractionResult,
)

__all__ = [
    "Money", "CurrencyMismatchError", "round_half_up", "sum_money",
    "AllocationMethod", "ErrorCode", "FieldError", "UnknownTargetError",
    "AssetAllocation", "AllocationSet", "DuplicateMatch", "OCRExtractionResult",
]
