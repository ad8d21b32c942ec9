"""
Duplicate Detector: flag recorded expenses that look like a re-submission of the draft.

Match rule:
- amount:      |draft - record| < one currency unit (tolerance band, not equality)
- date:        same calendar day, time of day ignored
- description: case-insensitive, trimmed equality or containment either way;
               empty descriptions never match

A record is a duplicate iff amount matches AND (date OR description matches).
Amount alone is too common (round numbers) to flag on its own.
"""
from typing import List, Optional, Sequence
import logging

from rapidfuzz import fuzz

from ...config import IntakeSettings, resolve_settings
from ...models import DraftExpense, ExistingExpenseRecord
from ..core.structures import DuplicateMatch

logger = logging.getLogger(__name__)


def _normalize_description(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def descriptions_match(a: Optional[str], b: Optional[str]) -> bool:
    """Equality or substring containment in either direction, ignoring case and outer whitespace."""
    left = _normalize_description(a)
    right = _normalize_description(b)
    if not left or not right:
        return False
    return left == right or left in right or right in left


def description_similarity(a: Optional[str], b: Optional[str]) -> float:
    """Token-set similarity (0-100) used only to order matches for review."""
    left = _normalize_description(a)
    right = _normalize_description(b)
    if not left or not right:
        return 0.0
    return round(fuzz.token_set_ratio(left, right), 2)


def compare_record(
    candidate: DraftExpense,
    record: ExistingExpenseRecord,
    settings: Optional[IntakeSettings] = None,
) -> DuplicateMatch:
    """
    Compare the draft against one recorded expense.

    Args:
        candidate: Draft being submitted
        record: Recorded expense from history
        settings: Amount tolerance; loaded from the environment when omitted

    Returns:
        DuplicateMatch with the three signals (``is_duplicate`` applies the rule)
    """
    settings = resolve_settings(settings)

    amount_match = False
    if candidate.amount is not None and candidate.amount.currency == record.amount.currency:
        difference = abs(candidate.amount.minor_units - record.amount.minor_units)
        amount_match = difference < settings.duplicate_amount_tolerance_minor_units

    date_match = (
        candidate.date is not None
        and record.date is not None
        and candidate.date == record.date
    )

    return DuplicateMatch(
        candidate_id=record.id,
        amount_match=amount_match,
        date_match=date_match,
        description_match=descriptions_match(candidate.description, record.description),
        description_similarity=description_similarity(candidate.description, record.description),
    )


def find_duplicates(
    candidate: DraftExpense,
    corpus: Sequence[ExistingExpenseRecord],
    settings: Optional[IntakeSettings] = None,
) -> List[DuplicateMatch]:
    """
    Scan the user's expense history for likely re-submissions of the draft.

    The record with the draft's own id (when re-validating a saved expense)
    is skipped. Matches come back in corpus order; the caller decides how many
    to surface and may always proceed after confirming.

    Args:
        candidate: Draft being submitted
        corpus: Previously recorded expenses
        settings: Amount tolerance; loaded from the environment when omitted

    Returns:
        List of DuplicateMatch for records that satisfy the duplicate rule
    """
    settings = resolve_settings(settings)
    if candidate.amount is None:
        logger.debug("Draft has no amount yet, skipping duplicate scan")
        return []

    matches: List[DuplicateMatch] = []
    for record in corpus:
        if candidate.id is not None and record.id == candidate.id:
            continue
        match = compare_record(candidate, record, settings)
        if match.is_duplicate:
            matches.append(match)

    if matches:
        logger.info(
            f"Found {len(matches)} possible duplicate(s) of {candidate.amount} "
            f"among {len(corpus)} recorded expenses: {[m.candidate_id for m in matches]}"
        )
    return matches


def _same_group(
    candidate: DraftExpense,
    corpus: Sequence[ExistingExpenseRecord],
    key: Optional[str],
    attribute: str,
    limit: int,
) -> List[ExistingExpenseRecord]:
    """Records whose ``attribute`` equals ``key``, excluding the draft, first ``limit`` in corpus order."""
    if not key:
        return []
    group = [
        record for record in corpus
        if getattr(record, attribute) == key
        and not (candidate.id is not None and record.id == candidate.id)
    ]
    return group[:limit]


def find_related_expenses(
    candidate: DraftExpense,
    corpus: Sequence[ExistingExpenseRecord],
    settings: Optional[IntakeSettings] = None,
) -> List[ExistingExpenseRecord]:
    """
    Same-category expenses shown as context beside the draft.

    Returns at most ``related_expense_limit`` records, in corpus order,
    excluding the draft itself. A draft without a category has no related expenses.
    """
    settings = resolve_settings(settings)
    return _same_group(candidate, corpus, candidate.category, "category", settings.related_expense_limit)


def find_project_expenses(
    candidate: DraftExpense,
    corpus: Sequence[ExistingExpenseRecord],
    settings: Optional[IntakeSettings] = None,
) -> List[ExistingExpenseRecord]:
    """Expenses booked to the draft's project, same limit and ordering as ``find_related_expenses``."""
    settings = resolve_settings(settings)
    return _same_group(candidate, corpus, candidate.project_id, "project_id", settings.related_expense_limit)
