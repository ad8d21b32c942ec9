"""Shared fixtures: settings built from defaults, independent of the caller's environment."""
import pytest

from expense_intake.config import IntakeSettings, load_settings


@pytest.fixture(autouse=True)
def clean_intake_env(monkeypatch):
    """Drop any INTAKE_* / LOG_LEVEL variables so defaults apply."""
    for name, info in IntakeSettings.model_fields.items():
        monkeypatch.delenv(info.alias or name.upper(), raising=False)


@pytest.fixture()
def settings():
    return load_settings()
