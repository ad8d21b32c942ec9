"""
Validation Pipeline: combine the engines' outputs into one submit-gate report.

Steps:
1. Required draft fields (amount, description)
2. Allocation invariants for the draft's targets
3. Duplicate scan against the user's expense history
4. Receipt extraction advisories (low confidence, nothing found)

Only step 1 and 2 make ``ok`` false. Duplicates ask the user to confirm and
can be bypassed with ``proceed_anyway``; advisories never block.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import logging

from ...config import IntakeSettings, resolve_settings
from ...models import DraftExpense, ExistingExpenseRecord
from ..allocation.engine import seed_allocations, validate_allocations
from ..core.structures import (
    AllocationSet, DuplicateMatch, ErrorCode, FieldError, OCRExtractionResult,
)
from ..duplicates.detector import find_duplicates

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Outcome of one validation pass over a draft."""
    ok: bool
    field_errors: Dict[str, str] = field(default_factory=dict)  # field -> first message
    duplicates: List[DuplicateMatch] = field(default_factory=list)
    errors: List[FieldError] = field(default_factory=list)
    advisories: List[FieldError] = field(default_factory=list)
    allocations: Optional[AllocationSet] = None
    proceed_anyway: bool = False

    @property
    def requires_confirmation(self) -> bool:
        """Duplicates were found and the user has not chosen to proceed anyway."""
        return bool(self.duplicates) and not self.proceed_anyway

    @property
    def can_submit(self) -> bool:
        return self.ok and not self.requires_confirmation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "can_submit": self.can_submit,
            "requires_confirmation": self.requires_confirmation,
            "field_errors": dict(self.field_errors),
            "errors": [e.to_dict() for e in self.errors],
            "advisories": [a.to_dict() for a in self.advisories],
            "duplicates": [d.to_dict() for d in self.duplicates],
            "allocations": self.allocations.to_payload() if self.allocations is not None else [],
        }


def validate_draft_fields(draft: DraftExpense) -> List[FieldError]:
    """Amount and description are required; the amount must be positive."""
    errors: List[FieldError] = []
    if draft.amount is None or draft.amount.is_zero():
        errors.append(FieldError(
            field="amount", code=ErrorCode.REQUIRED_FIELD, message="Amount is required",
        ))
    elif draft.amount.is_negative():
        errors.append(FieldError(
            field="amount", code=ErrorCode.INVALID_AMOUNT, message="Amount must be greater than zero",
        ))
    if not draft.description.strip():
        errors.append(FieldError(
            field="description", code=ErrorCode.REQUIRED_FIELD, message="Description is required",
        ))
    return errors


def _draft_allocation_set(draft: DraftExpense) -> Optional[AllocationSet]:
    """The draft's allocations as a set, seeded with the default split if the form sent none."""
    if draft.amount is None or not draft.targets:
        return None
    if not draft.allocations:
        return seed_allocations(draft.amount, draft.targets, draft.allocation_method)
    return AllocationSet(
        total=draft.amount,
        method=draft.allocation_method,
        allocations=tuple(draft.allocations),
    )


def _target_coverage_errors(draft: DraftExpense, allocation_set: AllocationSet) -> List[FieldError]:
    """Allocations must cover exactly the selected targets."""
    errors: List[FieldError] = []
    selected = set(draft.targets)
    allocated = set(allocation_set.target_ids)
    for target_id in allocation_set.target_ids:
        if target_id not in selected:
            errors.append(FieldError(
                field=target_id,
                code=ErrorCode.UNKNOWN_TARGET,
                message="Allocation target is not selected",
                target_id=target_id,
            ))
    for target_id in draft.targets:
        if target_id not in allocated:
            errors.append(FieldError(
                field=target_id,
                code=ErrorCode.ALLOCATION_MISMATCH,
                message="Selected target has no allocation",
                target_id=target_id,
            ))
    return errors


def extraction_advisories(extraction: OCRExtractionResult) -> List[FieldError]:
    """Non-blocking notes about a receipt extraction."""
    advisories: List[FieldError] = []
    if extraction.is_empty:
        advisories.append(FieldError(
            field="receipt",
            code=ErrorCode.EXTRACTION_EMPTY,
            message="No details could be read from the receipt; enter them manually",
        ))
    elif extraction.low_confidence:
        advisories.append(FieldError(
            field="receipt",
            code=ErrorCode.EXTRACTION_LOW_CONFIDENCE,
            message=(
                f"Low recognition confidence ({extraction.confidence:.0f}%); "
                f"please verify the extracted details"
            ),
        ))
    return advisories


def build_validation_report(
    draft: DraftExpense,
    corpus: Sequence[ExistingExpenseRecord] = (),
    extraction: Optional[OCRExtractionResult] = None,
    proceed_anyway: bool = False,
    settings: Optional[IntakeSettings] = None,
) -> ValidationReport:
    """
    Validate a draft before submission.

    Args:
        draft: Expense draft from the form
        corpus: The user's previously recorded expenses
        extraction: Receipt extraction applied to this draft, if any
        proceed_anyway: User confirmed submission despite suspected duplicates
        settings: Tolerances; loaded from the environment when omitted

    Returns:
        ValidationReport; ``ok`` is true iff there are no field errors
    """
    settings = resolve_settings(settings)
    errors = validate_draft_fields(draft)

    allocation_set = _draft_allocation_set(draft)
    if allocation_set is not None:
        errors.extend(_target_coverage_errors(draft, allocation_set))
        errors.extend(validate_allocations(allocation_set, settings))

    field_errors: Dict[str, str] = {}
    for error in errors:
        field_errors.setdefault(error.field, error.message)

    duplicates = find_duplicates(draft, corpus, settings)

    advisories: List[FieldError] = []
    if duplicates and not proceed_anyway:
        count = len(duplicates)
        advisories.append(FieldError(
            field="amount",
            code=ErrorCode.DUPLICATE_SUSPECTED,
            message=(
                f"Found {count} similar expense{'s' if count > 1 else ''} with the same amount "
                f"({draft.amount.format(settings.currency_symbol)}); confirm to submit anyway"
            ),
        ))
    elif duplicates:
        logger.info(f"Proceeding despite {len(duplicates)} suspected duplicate(s)")

    if extraction is not None:
        advisories.extend(extraction_advisories(extraction))

    report = ValidationReport(
        ok=not errors,
        field_errors=field_errors,
        duplicates=duplicates,
        errors=errors,
        advisories=advisories,
        allocations=allocation_set,
        proceed_anyway=proceed_anyway,
    )
    if not report.ok:
        logger.warning(f"Draft validation failed: {field_errors}")
    return report
