"""Tests for settings loaded from the environment."""
from decimal import Decimal
import logging

import pytest
from pydantic import ValidationError

from expense_intake.config import configure_logging, load_settings, resolve_settings


def test_defaults(settings):
    assert settings.currency_code == "INR"
    assert settings.currency_symbol == "₹"
    assert settings.allocation_tolerance_minor_units == 1
    assert settings.percentage_tolerance == Decimal("0.01")
    assert settings.duplicate_amount_tolerance_minor_units == 100
    assert settings.related_expense_limit == 5
    assert settings.low_confidence_threshold == 70.0
    assert settings.amount_sanity_ceiling == Decimal("10000000")
    assert settings.max_item_lines == 10


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("INTAKE_DUPLICATE_AMOUNT_TOLERANCE", "250")
    monkeypatch.setenv("INTAKE_PERCENTAGE_TOLERANCE", "0.05")
    monkeypatch.setenv("INTAKE_LOW_CONFIDENCE_THRESHOLD", "55")
    settings = load_settings()
    assert settings.duplicate_amount_tolerance_minor_units == 250
    assert settings.percentage_tolerance == Decimal("0.05")
    assert settings.low_confidence_threshold == 55.0


def test_keyword_overrides_win():
    assert load_settings(max_item_lines=3).max_item_lines == 3


def test_negative_tolerance_is_rejected():
    with pytest.raises(ValidationError):
        load_settings(allocation_tolerance_minor_units=-1)
    with pytest.raises(ValidationError):
        load_settings(percentage_tolerance="-0.01")


def test_bad_decimal_is_rejected(monkeypatch):
    monkeypatch.setenv("INTAKE_AMOUNT_SANITY_CEILING", "lots")
    with pytest.raises(ValidationError):
        load_settings()


def test_settings_are_frozen(settings):
    with pytest.raises(ValidationError):
        settings.currency_code = "USD"


def test_resolve_settings_prefers_given(settings):
    assert resolve_settings(settings) is settings
    assert resolve_settings(None).currency_code == "INR"


def test_configure_logging_accepts_level_names(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    configure_logging(load_settings(log_level="debug"))
    configure_logging(load_settings(log_level="nonsense"))
    assert calls == [{"level": logging.DEBUG}, {"level": logging.INFO}]
