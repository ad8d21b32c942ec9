"""
Allocation Engine: Split one expense total across several targets (assets/vehicles).

Methods:
1. equal      - integer split in minor units, leftover units go to the first targets
2. percentage - default 100/n per target (same leftover rule); an edit to one
                target's percentage recomputes only that target's amount
3. specific   - seeded with the equal split, then every amount is freely editable

Nothing is rebalanced automatically. Validation reports what is off
(sum vs total, negative shares, percentages not adding up to 100) and the
user fixes it.
"""
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import logging

from ...config import IntakeSettings, resolve_settings
from ...models import PartialAllocation
from ...utils.percentages import HUNDRED, distribute_percentages, quantize_percentage, within_tolerance
from ..core.money import AmountLike, CurrencyMismatchError, Money
from ..core.structures import (
    AllocationMethod, AllocationSet, AssetAllocation, ErrorCode, FieldError,
)

logger = logging.getLogger(__name__)

MethodLike = Union[AllocationMethod, str]


def _unique_targets(targets: Iterable[str]) -> Tuple[str, ...]:
    """Target ids in input order with repeats dropped."""
    seen = set()
    ordered = []
    for target_id in targets:
        target_id = str(target_id)
        if target_id in seen:
            logger.warning(f"Duplicate target '{target_id}' ignored in allocation")
            continue
        seen.add(target_id)
        ordered.append(target_id)
    return tuple(ordered)


def seed_allocations(total: Money, targets: Sequence[str], method: MethodLike) -> AllocationSet:
    """
    Default split for a method: equal amounts for every method, plus equal
    percentages (summing to exactly 100.00) for the percentage method.

    Args:
        total: Expense total
        targets: Target ids, in display order
        method: Allocation method

    Returns:
        Fresh AllocationSet
    """
    method = AllocationMethod(method)
    target_ids = _unique_targets(targets)
    amounts = total.split_evenly(len(target_ids))

    if method is AllocationMethod.PERCENTAGE:
        percentages: List[Optional[Decimal]] = list(distribute_percentages(len(target_ids)))
    else:
        percentages = [None] * len(target_ids)

    allocations = tuple(
        AssetAllocation(target_id=target_id, amount=amount, percentage=percentage)
        for target_id, amount, percentage in zip(target_ids, amounts, percentages)
    )
    logger.debug(
        f"Seeded {method.value} allocation of {total} across {len(allocations)} targets: "
        f"{[str(a.amount.to_decimal()) for a in allocations]}"
    )
    return AllocationSet(total=total, method=method, allocations=allocations)


def _entered_amount(value: AmountLike, currency: str) -> Money:
    """Amount as typed; blank or half-typed text ("", "-", ".") counts as 0."""
    if isinstance(value, str):
        try:
            return Money.parse(value, currency)
        except ValueError:
            logger.debug(f"Amount entry {value!r} is not a number yet, using 0")
            return Money.zero(currency)
    return Money.coerce(value, currency)


def _entered_percentage(value: Union[Decimal, int, str]) -> Decimal:
    """Percentage as typed; blank or half-typed text counts as 0."""
    if isinstance(value, float):
        raise TypeError("Use Decimal or str for percentages, not float")
    if not isinstance(value, str):
        return Decimal(value)
    try:
        entered = Decimal(value.strip().rstrip("%").strip())
    except InvalidOperation:
        entered = None
    if entered is None or not entered.is_finite():
        logger.debug(f"Percentage entry {value!r} is not a number yet, using 0")
        return Decimal(0)
    return entered


def update_amount(allocation_set: AllocationSet, target_id: str, amount: AmountLike) -> AllocationSet:
    """
    Set one target's amount. Other targets are left as they are.

    Called on every keystroke, so text that is not a number yet ("", "-", ".")
    is taken as 0 and left for validation to report.

    Raises:
        UnknownTargetError: target_id is not in the set
    """
    current = allocation_set.get(target_id)
    new_amount = _entered_amount(amount, allocation_set.total.currency)
    return allocation_set.with_allocation(replace(current, amount=new_amount))


def update_percentage(
    allocation_set: AllocationSet,
    target_id: str,
    percentage: Union[Decimal, int, str],
) -> AllocationSet:
    """
    Set one target's percentage and recompute only that target's amount as
    ``round(total * percentage / 100)``. The other percentages are not rebalanced.
    The stored percentage is rounded to 2 decimal places; text that is not a
    number yet counts as 0.

    Raises:
        UnknownTargetError: target_id is not in the set
    """
    current = allocation_set.get(target_id)
    entered = _entered_percentage(percentage)
    # Amount uses the percentage as entered; the stored value is kept to 2dp
    new_amount = allocation_set.total.percent_of(entered)
    pct = quantize_percentage(entered)
    logger.debug(f"Target {target_id}: {pct}% of {allocation_set.total} -> {new_amount}")
    return allocation_set.with_allocation(replace(current, amount=new_amount, percentage=pct))


def _apply_overrides(
    allocation_set: AllocationSet,
    overrides: Iterable[PartialAllocation],
) -> AllocationSet:
    if allocation_set.method is AllocationMethod.EQUAL:
        logger.debug("Equal split ignores per-target overrides")
        return allocation_set

    known = set(allocation_set.target_ids)
    for override in overrides:
        if override.target_id not in known:
            logger.warning(f"Override for target '{override.target_id}' is not in the target list, dropped")
            continue
        if allocation_set.method is AllocationMethod.PERCENTAGE:
            if override.percentage is not None:
                allocation_set = update_percentage(allocation_set, override.target_id, override.percentage)
        elif override.amount is not None:
            allocation_set = update_amount(allocation_set, override.target_id, override.amount)
    return allocation_set


def allocate(
    total: Money,
    targets: Sequence[str],
    method: MethodLike,
    overrides: Optional[Iterable[PartialAllocation]] = None,
) -> AllocationSet:
    """
    Compute the allocation set for a total, target list and method.

    Args:
        total: Expense total
        targets: Target ids; output order follows this order
        method: "equal", "specific" or "percentage"
        overrides: Per-target values typed by the user (amounts for specific,
            percentages for percentage; ignored for equal)

    Returns:
        New AllocationSet; inputs are never modified
    """
    allocation_set = seed_allocations(total, targets, method)
    if overrides:
        allocation_set = _apply_overrides(allocation_set, overrides)
    return allocation_set


def reconcile(
    previous: Optional[AllocationSet],
    total: Money,
    targets: Sequence[str],
    method: MethodLike,
) -> AllocationSet:
    """
    Keep the user's edits while nothing structural changed, otherwise reseed.

    A different target list, method or total discards the previous values
    entirely; stale allocations are never merged into the new split.
    """
    method = AllocationMethod(method)
    target_ids = _unique_targets(targets)
    if (
        previous is not None
        and previous.method is method
        and previous.total == total
        and previous.target_ids == target_ids
    ):
        return previous

    if previous is not None:
        logger.info(
            f"Reseeding allocations: method {previous.method.value}->{method.value}, "
            f"targets {len(previous)}->{len(target_ids)}, total {previous.total}->{total}"
        )
    return seed_allocations(total, target_ids, method)


def validate_allocations(
    allocation_set: AllocationSet,
    settings: Optional[IntakeSettings] = None,
) -> List[FieldError]:
    """
    Check the allocation invariants after a recompute.

    Rules:
    1. |sum(amount) - total| must not exceed the tolerance (one minor unit;
       one per target for the percentage method, whose per-target rounding
       is unavoidable)
    2. No target may carry a negative amount or percentage
    3. Percentage method: |sum(percentage) - 100| <= percentage tolerance

    Args:
        allocation_set: Set to check
        settings: Tolerances; loaded from the environment when omitted. Pass
            them explicitly when validating on every keystroke, since loading
            re-reads backend/.env

    Returns:
        List of FieldError (empty when valid). An empty set has nothing to check.
    """
    settings = resolve_settings(settings)
    errors: List[FieldError] = []
    if not allocation_set.allocations:
        return errors

    total = allocation_set.total
    symbol = settings.currency_symbol
    is_percentage = allocation_set.method is AllocationMethod.PERCENTAGE

    try:
        allocated = allocation_set.allocated_total()
    except CurrencyMismatchError as e:
        logger.warning(f"Allocation currency check failed: {e}")
        errors.append(FieldError(
            field="total",
            code=ErrorCode.ALLOCATION_MISMATCH,
            message=f"Allocations must be in {total.currency}",
        ))
        allocated = None

    if allocated is not None:
        tolerance = settings.allocation_tolerance_minor_units
        if is_percentage:
            tolerance *= len(allocation_set)
        difference = abs(allocated.minor_units - total.minor_units)
        if difference > tolerance:
            logger.warning(
                f"Allocation sum check failed: allocated {allocated}, expected {total}, "
                f"difference {difference} minor units (tolerance {tolerance})"
            )
            errors.append(FieldError(
                field="total",
                code=ErrorCode.ALLOCATION_MISMATCH,
                message=(
                    f"Total allocated ({allocated.format(symbol)}) must equal "
                    f"expense amount ({total.format(symbol)})"
                ),
            ))

    for allocation in allocation_set:
        if allocation.amount.is_negative():
            message = "Amount cannot be negative"
        elif allocation.percentage is not None and allocation.percentage < 0:
            message = "Percentage cannot be negative"
        else:
            continue
        errors.append(FieldError(
            field=allocation.target_id,
            code=ErrorCode.NEGATIVE_ALLOCATION,
            message=message,
            target_id=allocation.target_id,
        ))

    if is_percentage:
        percentage_total = allocation_set.percentage_total()
        if not within_tolerance(percentage_total, HUNDRED, settings.percentage_tolerance):
            errors.append(FieldError(
                field="percentage",
                code=ErrorCode.PERCENTAGE_SUM,
                message=f"Percentages must sum to 100% (currently {percentage_total:.2f}%)",
            ))

    return errors
