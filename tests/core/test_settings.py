from __future__ import annotations

from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from attendance_reconciliation.config import get_settings_module
from attendance_reconciliation.core.enums import Source
from attendance_reconciliation.core.exceptions import ValidationError
from attendance_reconciliation.core.settings import ReconciliationSettings


def test_defaults():
    settings = ReconciliationSettings()

    assert settings.timezone == ZoneInfo("Asia/Kolkata")
    assert (settings.tolerance_minutes, settings.min_punch_separation_minutes) == (20, 30)
    assert (settings.standard_shift_hours, settings.min_required_hours) == (8.0, 4.0)
    assert (settings.mismatch_in_source, settings.mismatch_out_source) == (Source.BIOMETRIC, Source.WORKFLOW)


def test_from_module_reads_known_names_and_keeps_defaults():
    module = SimpleNamespace(
        ORG_TIMEZONE="UTC",
        TOLERANCE_MINUTES="15",
        MISMATCH_IN_SOURCE="WORKFLOW",
        RECONCILE_WORKERS=2,
    )

    settings = ReconciliationSettings.from_module(module)

    assert settings.timezone == ZoneInfo("UTC")
    assert settings.tolerance_minutes == 15
    assert settings.mismatch_in_source == Source.WORKFLOW
    assert settings.workers == 2
    assert settings.fuzzy_threshold == 0.8


@pytest.mark.parametrize(
    "overrides",
    [
        {"tolerance_minutes": -1},
        {"min_punch_separation_minutes": -5},
        {"min_required_hours": 9.0},
        {"min_required_hours": 0},
        {"fuzzy_threshold": 1.5},
        {"workers": 0},
    ],
)
def test_invalid_thresholds_are_rejected(overrides):
    with pytest.raises(ValidationError):
        ReconciliationSettings(**overrides)


@pytest.mark.parametrize(
    "env, module",
    [
        ("production", "attendance_reconciliation.config.production"),
        ("TEST", "attendance_reconciliation.config.testing"),
        ("anything", "attendance_reconciliation.config.development"),
    ],
)
def test_app_env_selects_settings_module(monkeypatch, env, module):
    monkeypatch.setenv("APP_ENV", env)

    assert get_settings_module() == module
