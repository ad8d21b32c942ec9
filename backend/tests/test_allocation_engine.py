"""Tests for splitting an expense total across targets."""
from decimal import Decimal

import pytest

from expense_intake.config import load_settings
from expense_intake.models import PartialAllocation
from expense_intake.processors.allocation.engine import (
    allocate, reconcile, seed_allocations, update_amount, update_percentage, validate_allocations,
)
from expense_intake.processors.core.money import Money
from expense_intake.processors.core.structures import AllocationMethod, ErrorCode, UnknownTargetError

TARGETS = ["truck-1", "truck-2", "truck-3"]


def rupees(value: str) -> Money:
    return Money.from_decimal(value)


def codes(errors):
    return [e.code for e in errors]


def test_equal_split_concrete_scenario(settings):
    """₹1000.00 across 3 targets: the first target absorbs the 1 paisa remainder."""
    result = allocate(rupees("1000.00"), TARGETS, "equal")
    assert [a.amount.to_decimal() for a in result] == [
        Decimal("333.34"), Decimal("333.33"), Decimal("333.33")
    ]
    assert result.allocated_total() == rupees("1000.00")
    assert result.target_ids == tuple(TARGETS)
    assert validate_allocations(result, settings) == []


@pytest.mark.parametrize("minor_units", [1, 7, 99, 100, 12345, 100000, 999999999])
@pytest.mark.parametrize("count", [1, 2, 3, 4, 6, 7, 9])
def test_equal_split_conserves_total_exactly(minor_units, count):
    total = Money(minor_units)
    targets = [f"t{i}" for i in range(count)]
    result = allocate(total, targets, AllocationMethod.EQUAL)
    assert result.allocated_total() == total
    assert len(result) == count


def test_remainder_assignment_is_deterministic():
    first = allocate(rupees("100.00"), ["a", "b", "c", "d", "e", "f", "g"], "equal")
    second = allocate(rupees("100.00"), ["a", "b", "c", "d", "e", "f", "g"], "equal")
    assert first == second


def test_remainder_follows_input_order():
    """Reordering the targets moves the extra paisa with the first position, not the id."""
    result = allocate(rupees("1000.00"), list(reversed(TARGETS)), "equal")
    assert result.get("truck-3").amount == rupees("333.34")
    assert result.get("truck-1").amount == rupees("333.33")


def test_percentage_seed_sums_to_exactly_100(settings):
    result = allocate(rupees("1000.00"), [f"t{i}" for i in range(7)], "percentage")
    assert result.percentage_total() == Decimal("100.00")
    assert [a.percentage for a in result][:4] == [Decimal("14.29")] * 4
    assert [a.percentage for a in result][4:] == [Decimal("14.28")] * 3
    assert validate_allocations(result, settings) == []


def test_percentage_seed_amounts_match_equal_split():
    equal = allocate(rupees("1000.00"), TARGETS, "equal")
    percentage = allocate(rupees("1000.00"), TARGETS, "percentage")
    assert percentage.amounts == equal.amounts


@pytest.mark.parametrize("count", [2, 3, 6, 7])
def test_percentage_round_trip_matches_equal_split(count):
    """Setting every percentage to 100/n lands within one minor unit of the equal split."""
    total = rupees("1000000.00")
    targets = [f"t{i}" for i in range(count)]
    share = Decimal(100) / count
    overrides = [PartialAllocation(target_id=t, percentage=share) for t in targets]
    result = allocate(total, targets, "percentage", overrides)
    equal = allocate(total, targets, "equal")
    for got, expected in zip(result.amounts, equal.amounts):
        assert abs(got.minor_units - expected.minor_units) <= 1


def test_percentage_edit_does_not_rebalance_other_targets(settings):
    seeded = allocate(rupees("1000.00"), TARGETS, "percentage")
    edited = update_percentage(seeded, "truck-1", "50")

    assert edited.get("truck-1").amount == rupees("500.00")
    assert edited.get("truck-1").percentage == Decimal("50.00")
    assert edited.get("truck-2") == seeded.get("truck-2")
    assert edited.get("truck-3") == seeded.get("truck-3")
    # The original set is untouched
    assert seeded.get("truck-1").percentage == Decimal("33.34")

    errors = validate_allocations(edited, settings)
    assert ErrorCode.PERCENTAGE_SUM in codes(errors)
    assert ErrorCode.ALLOCATION_MISMATCH in codes(errors)
    percentage_error = next(e for e in errors if e.code is ErrorCode.PERCENTAGE_SUM)
    assert percentage_error.field == "percentage"
    assert "116.66" in percentage_error.message


def test_percentage_fixed_by_hand_validates(settings):
    result = allocate(rupees("1000.00"), TARGETS, "percentage")
    result = update_percentage(result, "truck-1", "50")
    result = update_percentage(result, "truck-2", "25")
    result = update_percentage(result, "truck-3", "25")
    assert result.amounts == [rupees("500.00"), rupees("250.00"), rupees("250.00")]
    assert validate_allocations(result, settings) == []


def test_specific_starts_at_equal_split_and_accepts_overrides(settings):
    result = allocate(
        rupees("1000.00"), TARGETS, "specific",
        [PartialAllocation(target_id="truck-1", amount="500")],
    )
    assert result.amounts == [rupees("500.00"), rupees("333.33"), rupees("333.33")]
    errors = validate_allocations(result, settings)
    assert codes(errors) == [ErrorCode.ALLOCATION_MISMATCH]
    assert errors[0].field == "total"
    assert "₹1,166.66" in errors[0].message
    assert "₹1,000.00" in errors[0].message


def test_specific_edits_reaching_total_validate(settings):
    result = allocate(rupees("1000.00"), ["a", "b"], "specific")
    result = update_amount(result, "a", "700")
    result = update_amount(result, "b", "300")
    assert validate_allocations(result, settings) == []


def test_mismatch_tolerance_is_one_minor_unit(settings):
    result = allocate(rupees("100.00"), ["a", "b"], "specific")
    off_by_one = update_amount(result, "a", "50.01")
    off_by_two = update_amount(result, "a", "50.02")
    assert validate_allocations(off_by_one, settings) == []
    assert codes(validate_allocations(off_by_two, settings)) == [ErrorCode.ALLOCATION_MISMATCH]


def test_percentage_mismatch_tolerance_scales_with_target_count():
    strict = load_settings(allocation_tolerance_minor_units=0)
    result = allocate(Money(10001), TARGETS, "percentage")
    result = update_percentage(result, "truck-1", "33.33")
    result = update_percentage(result, "truck-2", "33.33")
    result = update_percentage(result, "truck-3", "33.34")
    # 3333 + 3333 + 3334 = 10000, one paisa short; zero tolerance per target flags it
    assert codes(validate_allocations(result, strict)) == [ErrorCode.ALLOCATION_MISMATCH]
    assert validate_allocations(result, load_settings()) == []


def test_negative_amount_is_reported_per_target(settings):
    result = allocate(rupees("100.00"), ["a", "b"], "specific")
    result = update_amount(result, "b", "-10")
    errors = validate_allocations(result, settings)
    negative = [e for e in errors if e.code is ErrorCode.NEGATIVE_ALLOCATION]
    assert len(negative) == 1
    assert negative[0].field == "b"
    assert negative[0].target_id == "b"


def test_negative_percentage_is_reported(settings):
    result = allocate(rupees("100.00"), ["a", "b"], "percentage")
    result = update_percentage(result, "a", "-10")
    errors = validate_allocations(result, settings)
    assert any(e.code is ErrorCode.NEGATIVE_ALLOCATION and e.target_id == "a" for e in errors)


def test_equal_method_ignores_overrides():
    result = allocate(
        rupees("90.00"), ["a", "b", "c"], "equal",
        [PartialAllocation(target_id="a", amount="80")],
    )
    assert result.amounts == [rupees("30.00")] * 3


def test_override_for_unknown_target_is_dropped():
    result = allocate(
        rupees("90.00"), ["a", "b"], "specific",
        [PartialAllocation(target_id="gone", amount="80")],
    )
    assert result.target_ids == ("a", "b")
    assert result.amounts == [rupees("45.00")] * 2


def test_update_unknown_target_raises():
    result = allocate(rupees("90.00"), ["a"], "specific")
    with pytest.raises(UnknownTargetError):
        update_amount(result, "zzz", "10")
    with pytest.raises(UnknownTargetError):
        update_percentage(result, "zzz", "10")


def test_empty_target_list_has_nothing_to_validate(settings):
    result = allocate(rupees("500.00"), [], "percentage")
    assert len(result) == 0
    assert validate_allocations(result, settings) == []


def test_repeated_target_ids_are_collapsed():
    result = allocate(rupees("100.00"), ["a", "b", "a"], "equal")
    assert result.target_ids == ("a", "b")
    assert result.amounts == [rupees("50.00")] * 2


def test_reconcile_keeps_edits_when_nothing_structural_changed():
    seeded = allocate(rupees("1000.00"), TARGETS, "specific")
    edited = update_amount(seeded, "truck-1", "400")
    assert reconcile(edited, rupees("1000.00"), TARGETS, "specific") is edited


def test_reconcile_reseeds_on_method_change():
    edited = update_amount(allocate(rupees("1000.00"), TARGETS, "specific"), "truck-1", "400")
    reseeded = reconcile(edited, rupees("1000.00"), TARGETS, "percentage")
    assert reseeded == seed_allocations(rupees("1000.00"), TARGETS, "percentage")


def test_reconcile_reseeds_on_target_change():
    edited = update_amount(allocate(rupees("1000.00"), TARGETS, "specific"), "truck-1", "400")
    reseeded = reconcile(edited, rupees("1000.00"), TARGETS[:2], "specific")
    assert reseeded.amounts == [rupees("500.00"), rupees("500.00")]


def test_reconcile_reseeds_on_total_change():
    edited = update_amount(allocate(rupees("1000.00"), TARGETS, "specific"), "truck-1", "400")
    reseeded = reconcile(edited, rupees("300.00"), TARGETS, "specific")
    assert reseeded.amounts == [rupees("100.00")] * 3


def test_reconcile_without_previous_seeds():
    assert reconcile(None, rupees("10.00"), ["a"], "equal").amounts == [rupees("10.00")]


def test_payload_uses_decimal_strings():
    payload = allocate(rupees("1000.00"), TARGETS, "percentage").to_payload()
    assert payload[0] == {"target_id": "truck-1", "amount": "333.34", "percentage": "33.34"}


def test_unknown_method_is_rejected():
    with pytest.raises(ValueError):
        allocate(rupees("10.00"), ["a"], "weighted")


@pytest.mark.parametrize("typed", ["", "-", ".", "  "])
def test_half_typed_percentage_counts_as_zero(settings, typed):
    seeded = allocate(rupees("1000.00"), TARGETS, "percentage")
    edited = update_percentage(seeded, "truck-1", typed)
    assert edited.get("truck-1").percentage == Decimal("0.00")
    assert edited.get("truck-1").amount == Money.zero()
    assert edited.get("truck-2") == seeded.get("truck-2")
    assert ErrorCode.PERCENTAGE_SUM in codes(validate_allocations(edited, settings))


@pytest.mark.parametrize("typed", ["", "-", ".", "  "])
def test_half_typed_amount_counts_as_zero(settings, typed):
    seeded = allocate(rupees("1000.00"), TARGETS, "specific")
    edited = update_amount(seeded, "truck-1", typed)
    assert edited.get("truck-1").amount == Money.zero()
    assert codes(validate_allocations(edited, settings)) == [ErrorCode.ALLOCATION_MISMATCH]


def test_percentage_entry_may_carry_percent_sign():
    edited = update_percentage(allocate(rupees("1000.00"), TARGETS, "percentage"), "truck-1", " 50% ")
    assert edited.get("truck-1").percentage == Decimal("50.00")
    assert edited.get("truck-1").amount == rupees("500.00")


def test_explicit_settings_skip_environment_loading(monkeypatch, settings):
    """Validation on the keystroke path does not rebuild settings when they are passed in."""
    import expense_intake.config as config

    def fail_load(**overrides):
        raise AssertionError("settings were reloaded")

    monkeypatch.setattr(config, "load_settings", fail_load)
    result = update_amount(allocate(rupees("100.00"), ["a", "b"], "specific"), "a", "60")
    assert codes(validate_allocations(result, settings)) == [ErrorCode.ALLOCATION_MISMATCH]
