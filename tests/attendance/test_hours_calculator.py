from __future__ import annotations

from datetime import date, timedelta

import pytest

from attendance_reconciliation.attendance.calculator.standard_calculator import StandardHoursCalculator
from attendance_reconciliation.core.enums import AttendanceStatus, Completeness
from attendance_reconciliation.core.exceptions import SequenceError

DAY = date(2024, 3, 4)


@pytest.fixture
def calc():
    return StandardHoursCalculator(standard_shift_hours=8, min_required_hours=4)


def test_full_day_splits_regular_and_overtime(calc, at):
    hours = calc.calculate(at(DAY, 9, 0), at(DAY, 18, 0))

    assert hours.worked_hours == 9.0
    assert hours.regular_hours == 8.0
    assert hours.overtime_hours == 1.0
    assert hours.status == AttendanceStatus.PRESENT
    assert hours.is_present
    assert hours.completeness == Completeness.COMPLETE


@pytest.mark.parametrize(
    "minutes, status, present",
    [
        (8 * 60, AttendanceStatus.PRESENT, True),
        (4 * 60, AttendanceStatus.HALF_DAY, True),
        (3 * 60 + 59, AttendanceStatus.LATE, False),
        (1, AttendanceStatus.LATE, False),
        (0, AttendanceStatus.ABSENT, False),
    ],
)
def test_status_thresholds(calc, at, minutes, status, present):
    start = at(DAY, 9, 0)

    hours = calc.calculate(start, start + timedelta(minutes=minutes))

    assert hours.status == status
    assert hours.is_present is present


@pytest.mark.parametrize("final_in, final_out", [(None, None), ("in", None), (None, "out")])
def test_missing_side_is_absent_and_incomplete(calc, at, final_in, final_out):
    hours = calc.calculate(
        at(DAY, 9) if final_in else None,
        at(DAY, 18) if final_out else None,
    )

    assert hours.worked_hours == 0
    assert hours.status == AttendanceStatus.ABSENT
    assert hours.completeness == Completeness.INCOMPLETE


def test_hours_are_rounded_to_two_decimals(calc, at):
    hours = calc.calculate(at(DAY, 9, 0), at(DAY, 16, 20))

    assert hours.worked_hours == 7.33
    assert hours.status == AttendanceStatus.HALF_DAY


def test_later_out_never_yields_fewer_hours(calc, at):
    start = at(DAY, 9, 0)
    totals = [calc.calculate(start, start + timedelta(minutes=m)).worked_hours for m in range(0, 14 * 60, 7)]

    assert totals == sorted(totals)


@pytest.mark.parametrize("minutes", [0, 1, 239, 240, 479, 480, 481, 487, 600, 725, 16 * 60])
def test_regular_and_overtime_add_up_to_worked_hours(calc, at, minutes):
    start = at(DAY, 9, 0)

    hours = calc.calculate(start, start + timedelta(minutes=minutes))

    assert hours.regular_hours + hours.overtime_hours == pytest.approx(hours.worked_hours)
    assert hours.regular_hours <= 8
    assert hours.overtime_hours >= 0
    assert (hours.overtime_hours > 0) is (minutes > 8 * 60)


def test_out_before_in_is_a_sequence_error(calc, at):
    with pytest.raises(SequenceError) as excinfo:
        calc.calculate(at(DAY, 18, 0), at(DAY, 9, 0))

    assert excinfo.value.code == "OUT_BEFORE_IN"
