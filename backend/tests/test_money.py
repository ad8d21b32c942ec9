"""Tests for the fixed-point Money primitive."""
from decimal import Decimal

import pytest

from expense_intake.processors.core.money import CurrencyMismatchError, Money, sum_money


def test_parse_strips_currency_markers_and_separators():
    """Typed and recognized amount text becomes minor units."""
    assert Money.parse("₹1,00,000.50").minor_units == 10000050
    assert Money.parse("1,250 Rs").minor_units == 125000
    assert Money.parse("Rs. 99.99").minor_units == 9999
    assert Money.parse(" 500 ").minor_units == 50000


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        Money.parse("abc")
    with pytest.raises(ValueError):
        Money.parse("")


def test_from_decimal_rounds_half_up():
    assert Money.from_decimal("333.335").minor_units == 33334
    assert Money.from_decimal(Decimal("0.004")).minor_units == 0
    assert Money.from_decimal(12).minor_units == 1200


def test_floats_are_refused():
    with pytest.raises(TypeError):
        Money.from_decimal(1.5)
    with pytest.raises(TypeError):
        Money(1.5)


def test_split_evenly_gives_remainder_to_first_shares():
    """₹1000.00 over 3 -> [333.34, 333.33, 333.33]."""
    shares = Money.from_decimal("1000.00").split_evenly(3)
    assert [s.to_decimal() for s in shares] == [Decimal("333.34"), Decimal("333.33"), Decimal("333.33")]
    assert sum_money(shares) == Money.from_decimal("1000.00")


def test_split_evenly_conserves_negative_totals():
    shares = Money(-100).split_evenly(3)
    assert sum(s.minor_units for s in shares) == -100


def test_split_evenly_with_no_parts():
    assert Money(500).split_evenly(0) == []


def test_percent_of_rounds_to_minor_unit():
    assert Money(100000).percent_of(Decimal("33.33")) == Money(33330)
    assert Money(101).percent_of(Decimal("50")) == Money(51)


def test_format_for_messages():
    assert Money(100000).format() == "₹1,000.00"
    assert Money(-5050).format() == "-₹50.50"
    assert Money(1999, "USD").format("$") == "$19.99"


def test_arithmetic_refuses_mixed_currencies():
    with pytest.raises(CurrencyMismatchError):
        Money(100, "INR") + Money(100, "USD")
    with pytest.raises(CurrencyMismatchError):
        Money(100, "INR") < Money(100, "USD")


def test_arithmetic_and_comparison():
    a = Money(500)
    b = Money(200)
    assert a + b == Money(700)
    assert a - b == Money(300)
    assert -a == Money(-500)
    assert abs(Money(-5)) == Money(5)
    assert b < a and a >= b
    assert Money(-1).is_negative() and Money(0).is_zero()
