from __future__ import annotations

from datetime import date, datetime

import pytest

from attendance_reconciliation.attendance.merge.engine import MergeEngine
from attendance_reconciliation.attendance.merge.factory import MergeStrategyFactory
from attendance_reconciliation.core.enums import AnomalyType, MergeCase, Severity, Source

DAY = date(2024, 3, 4)


@pytest.fixture
def engine(tz):
    return MergeEngine(factory=MergeStrategyFactory(tolerance_minutes=20), tz=tz)


def test_matched_sources_take_the_generous_bounds(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 5), at(DAY, 17, 58))

    assert result.case == MergeCase.BOTH_MATCHED
    assert (result.final_in, result.final_out) == (at(DAY, 9, 0), at(DAY, 18, 0))
    assert (result.in_source, result.out_source) == (Source.WORKFLOW, Source.WORKFLOW)
    assert (result.in_diff_minutes, result.out_diff_minutes) == (5, 2)


def test_mismatch_trusts_biometric_in_and_workflow_out(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 45), at(DAY, 17, 55))

    assert result.case == MergeCase.BOTH_MISMATCH
    assert result.final_in == at(DAY, 9, 45)
    assert result.final_out == at(DAY, 18, 0)
    assert (result.in_source, result.out_source) == (Source.BIOMETRIC, Source.WORKFLOW)
    assert "IN diff=45min" in result.remarks
    assert "OUT diff=5min" in result.remarks


@pytest.mark.parametrize(
    "bio_in_minute, expected",
    [(20, MergeCase.BOTH_MATCHED), (21, MergeCase.BOTH_MISMATCH)],
)
def test_tolerance_boundary_is_inclusive(engine, at, bio_in_minute, expected):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, bio_in_minute), at(DAY, 18, 0))

    assert result.case == expected


def test_minute_differences_are_truncated(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 20, 59), at(DAY, 18, 0))

    assert result.in_diff_minutes == 20
    assert result.case == MergeCase.BOTH_MATCHED


def test_mismatch_keeps_trusted_sources_even_when_they_are_narrower(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 30), at(DAY, 17, 0), at(DAY, 8, 30), at(DAY, 19, 0))

    assert result.case == MergeCase.BOTH_MISMATCH
    assert result.final_in == at(DAY, 8, 30)
    assert result.final_out == at(DAY, 17, 0)


def test_trust_rule_is_configurable(tz, at):
    engine = MergeEngine(
        factory=MergeStrategyFactory(
            tolerance_minutes=20, mismatch_in_source=Source.WORKFLOW, mismatch_out_source=Source.BIOMETRIC
        ),
        tz=tz,
    )

    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 45), at(DAY, 17, 0))

    assert (result.final_in, result.final_out) == (at(DAY, 9, 0), at(DAY, 17, 0))


def test_complete_workflow_with_partial_biometric(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 3), None)

    assert result.case == MergeCase.WF_ONLY
    assert (result.final_in, result.final_out) == (at(DAY, 9, 0), at(DAY, 18, 0))
    assert result.remarks == "BIO_INCOMPLETE"


def test_biometric_only(engine, at):
    result = engine.merge(1, DAY, None, None, at(DAY, 9, 3), at(DAY, 17, 30))

    assert result.case == MergeCase.BIO_ONLY
    assert (result.in_source, result.out_source) == (Source.BIOMETRIC, Source.BIOMETRIC)
    assert result.remarks == "WF_MISSING"


def test_no_out_prefers_workflow_in(engine, at):
    both = engine.merge(1, DAY, at(DAY, 9, 0), None, at(DAY, 9, 10), None)
    bio_only = engine.merge(1, DAY, None, None, at(DAY, 9, 10), None)

    assert both.case == bio_only.case == MergeCase.NO_OUT
    assert both.final_in == at(DAY, 9, 0)
    assert bio_only.final_in == at(DAY, 9, 10)
    assert both.final_out is None


def test_out_without_any_in_is_incomplete(engine, at):
    result = engine.merge(1, DAY, None, at(DAY, 18, 0), None, None)

    assert result.case == MergeCase.INCOMPLETE
    assert (result.final_in, result.final_out) == (None, None)


def test_naive_times_are_organizational_local_time(engine, at):
    result = engine.merge(1, DAY, datetime(2024, 3, 4, 9, 0), datetime(2024, 3, 4, 18, 0), None, None)

    assert result.final_in == at(DAY, 9, 0)
    assert result.final_in.tzinfo is not None


def test_merge_metadata_records_inputs(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 5), at(DAY, 17, 58))

    meta = result.metadata(punch_count=2)

    assert meta.case == MergeCase.BOTH_MATCHED
    assert meta.bio_in == at(DAY, 9, 5)
    assert meta.punch_count == 2
    assert meta.sequence_error is None


def test_detect_anomalies(engine, at):
    result = engine.merge(
        1, DAY, at(DAY, 9, 5), at(date(2024, 3, 5), 1, 0), at(DAY, 8, 0), at(date(2024, 3, 5), 1, 0)
    )

    anomalies = {a.type: a for a in engine.detect_anomalies(result)}

    assert set(anomalies) == {
        AnomalyType.UNUSUALLY_LONG_SHIFT,
        AnomalyType.LARGE_IN_TIME_MISMATCH,
        AnomalyType.MIDNIGHT_CROSSOVER,
    }
    assert anomalies[AnomalyType.MIDNIGHT_CROSSOVER].severity == Severity.INFO


def test_regular_day_has_no_anomalies(engine, at):
    result = engine.merge(1, DAY, at(DAY, 9, 0), at(DAY, 18, 0), at(DAY, 9, 5), at(DAY, 17, 58))

    assert engine.detect_anomalies(result) == []
