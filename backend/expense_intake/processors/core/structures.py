"""
Expense Intake Data Structures.

This module defines the value types exchanged by the allocation, duplicate
and receipt-extraction engines. All of them are immutable: engines return new
instances instead of editing the ones they were given.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .money import Money, sum_money


class AllocationMethod(str, Enum):
    """How an expense total is distributed across targets."""
    EQUAL = "equal"
    SPECIFIC = "specific"
    PERCENTAGE = "percentage"


class ErrorCode(Enum):
    """Field error and advisory classification."""
    ALLOCATION_MISMATCH = "ALLOCATION_MISMATCH"
    NEGATIVE_ALLOCATION = "NEGATIVE_ALLOCATION"
    PERCENTAGE_SUM = "PERCENTAGE_SUM"
    DUPLICATE_SUSPECTED = "DUPLICATE_SUSPECTED"
    EXTRACTION_LOW_CONFIDENCE = "EXTRACTION_LOW_CONFIDENCE"
    EXTRACTION_EMPTY = "EXTRACTION_EMPTY"
    REQUIRED_FIELD = "REQUIRED_FIELD"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    UNKNOWN_TARGET = "UNKNOWN_TARGET"


class UnknownTargetError(KeyError):
    """Raised when an edit names a target that is not part of the allocation set."""


@dataclass(frozen=True)
class FieldError:
    """A problem attached to one form control (``total``, ``percentage``, a target id, ...)."""
    field: str
    code: ErrorCode
    message: str
    target_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "field": self.field,
            "code": self.code.value,
            "message": self.message,
            "target_id": self.target_id,
        }


@dataclass(frozen=True)
class AssetAllocation:
    """Share of an expense borne by one target."""
    target_id: str
    amount: Money
    percentage: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_id": self.target_id,
            "amount": str(self.amount.to_decimal()),
            "percentage": str(self.percentage) if self.percentage is not None else None,
        }


@dataclass(frozen=True)
class AllocationSet:
    """Ordered allocations, one per target, in the order the targets were given."""
    total: Money
    method: AllocationMethod
    allocations: Tuple[AssetAllocation, ...] = ()

    def __iter__(self) -> Iterator[AssetAllocation]:
        return iter(self.allocations)

    def __len__(self) -> int:
        return len(self.allocations)

    @property
    def target_ids(self) -> Tuple[str, ...]:
        return tuple(a.target_id for a in self.allocations)

    @property
    def amounts(self) -> List[Money]:
        return [a.amount for a in self.allocations]

    def allocated_total(self) -> Money:
        """Sum of per-target amounts."""
        return sum_money((a.amount for a in self.allocations), self.total.currency)

    def percentage_total(self) -> Decimal:
        """Sum of per-target percentages; missing percentages count as 0."""
        return sum((a.percentage or Decimal(0) for a in self.allocations), Decimal(0))

    def get(self, target_id: str) -> AssetAllocation:
        for allocation in self.allocations:
            if allocation.target_id == target_id:
                return allocation
        raise UnknownTargetError(target_id)

    def with_allocation(self, updated: AssetAllocation) -> "AllocationSet":
        """Copy of this set with the allocation for ``updated.target_id`` swapped in."""
        if updated.target_id not in self.target_ids:
            raise UnknownTargetError(updated.target_id)
        allocations = tuple(
            updated if a.target_id == updated.target_id else a
            for a in self.allocations
        )
        return replace(self, allocations=allocations)

    def to_payload(self) -> List[Dict[str, Any]]:
        """Plain dicts for the submission collaborator to map onto its wire format."""
        return [a.to_dict() for a in self.allocations]


@dataclass(frozen=True)
class DuplicateMatch:
    """Comparison of the draft against one recorded expense."""
    candidate_id: str
    amount_match: bool
    date_match: bool
    description_match: bool
    description_similarity: float = 0.0  # informational, 0-100

    @property
    def is_duplicate(self) -> bool:
        return self.amount_match and (self.date_match or self.description_match)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "candidate_id": self.candidate_id,
            "amount_match": self.amount_match,
            "date_match": self.date_match,
            "description_match": self.description_match,
            "description_similarity": self.description_similarity,
        }


@dataclass(frozen=True)
class OCRExtractionResult:
    """Structured candidate fields parsed from recognized receipt text."""
    raw_text: str
    confidence: Optional[float]  # None when the recognition engine gave no score
    amount: Optional[Money] = None
    date: Optional[str] = None
    merchant: Optional[str] = None
    items: Tuple[str, ...] = ()
    low_confidence: bool = False
    matched_templates: Dict[str, str] = field(default_factory=dict)  # field -> template name

    @property
    def is_empty(self) -> bool:
        return self.amount is None and self.date is None and self.merchant is None and not self.items

    def fields(self) -> Dict[str, Any]:
        """Only the fields that were found."""
        found: Dict[str, Any] = {}
        if self.amount is not None:
            found["amount"] = self.amount
        if self.date is not None:
            found["date"] = self.date
        if self.merchant is not None:
            found["merchant"] = self.merchant
        if self.items:
            found["items"] = list(self.items)
        return found
