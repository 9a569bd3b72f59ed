from __future__ import annotations

from datetime import date

import pytest

from attendance_reconciliation.core.enums import MatchType, ResolutionErrorCode
from attendance_reconciliation.employees.model import EmployeeIdentity
from attendance_reconciliation.identity.resolver import IdentityResolver
from attendance_reconciliation.punches.model import RawPunch


@pytest.fixture
def resolver():
    return IdentityResolver(fuzzy_threshold=0.8, clear_winner_margin=0.15)


def test_empty_directory_is_reported(resolver):
    result = resolver.resolve("B001", "Rishabh Kumar", [])

    assert not result.success
    assert result.error_code == ResolutionErrorCode.EMPTY_DIRECTORY


def test_direct_id_match_ignores_case_and_whitespace(resolver, directory):
    result = resolver.resolve("  b001 ", "Someone Else", directory)

    assert result.success
    assert result.employee_id == 1
    assert result.match_type == MatchType.DIRECT_ID_MATCH
    assert result.confidence == 1.0


def test_unique_first_name_matches_exactly(resolver, directory):
    result = resolver.resolve("", "priya N", directory)

    assert result.employee_id == 4
    assert result.match_type == MatchType.FIRST_NAME_EXACT
    assert result.confidence == 0.9


def test_surname_initial_breaks_first_name_tie(resolver, directory):
    result = resolver.resolve("", "Rahul V", directory)

    assert result.employee_id == 5
    assert result.match_type == MatchType.FIRST_NAME_SURNAME_INITIAL
    assert result.confidence == 0.85


def test_last_name_prefix_breaks_surname_initial_tie(resolver, directory):
    result = resolver.resolve("", "Neha Sha", directory)

    assert result.employee_id == 7
    assert result.match_type == MatchType.FIRST_NAME_LAST_NAME_PREFIX
    assert result.confidence == 0.8


def test_abbreviated_name_resolves_by_fuzzy_match(resolver, directory):
    result = resolver.resolve("X-77", "Rishab K", directory)

    assert result.success
    assert result.employee_id == 1
    assert result.match_type in (MatchType.FUZZY_MATCH, MatchType.FUZZY_MATCH_BEST)
    assert result.confidence >= 0.8
    assert "Rishabh Kumar" in result.remarks


def test_shared_first_name_and_initial_is_ambiguous(resolver, directory):
    result = resolver.resolve("", "Amit S", directory)

    assert not result.success
    assert result.error_code == ResolutionErrorCode.AMBIGUOUS_MATCH
    assert [c.employee_id for c in result.candidates] == [2, 3]


def test_fuzzy_narrows_structured_ambiguity_to_one(resolver, directory):
    result = resolver.resolve("", "Amit Sha", directory)

    assert result.employee_id == 3
    assert result.match_type == MatchType.FUZZY_MATCH


def test_surname_contradiction_falls_back_to_whole_directory(resolver):
    directory = [
        EmployeeIdentity(2, "Amit", "Sharma"),
        EmployeeIdentity(3, "Amit", "Shah"),
        EmployeeIdentity(9, "Amitt", "Verma"),
    ]

    result = resolver.resolve("", "Amit Verma", directory)

    assert result.employee_id == 9
    assert result.match_type == MatchType.FUZZY_MATCH
    assert result.confidence == pytest.approx(1 - 1 / 11)


def test_surname_contradiction_without_fuzzy_hit_is_no_match(resolver):
    directory = [EmployeeIdentity(2, "Amit", "Sharma"), EmployeeIdentity(3, "Amit", "Shah")]

    result = resolver.resolve("", "Amit Verma", directory)

    assert result.error_code == ResolutionErrorCode.NO_MATCH_FOUND
    assert result.candidates == ()


def test_clear_fuzzy_winner_is_accepted():
    directory = [
        EmployeeIdentity(10, "Sanjay", "Mehta"),
        EmployeeIdentity(11, "Sanjana", "Mehta"),
    ]
    resolver = IdentityResolver(fuzzy_threshold=0.5, clear_winner_margin=0.1)

    result = resolver.resolve("", "Sanjy Mehta", directory)

    assert result.employee_id == 10
    assert result.match_type == MatchType.FUZZY_MATCH_BEST
    assert result.confidence == pytest.approx(1 - 1 / 12)


def test_unknown_name_is_no_match(resolver, directory):
    result = resolver.resolve("Z-999", "Zzzz Qqqq", directory)

    assert result.error_code == ResolutionErrorCode.NO_MATCH_FOUND
    assert result.candidates == ()


def test_resolution_is_deterministic(resolver, directory):
    first = [resolver.resolve("", name, directory) for name in ("Amit S", "Rishab K", "Neha Sha")]
    second = [resolver.resolve("", name, list(directory)) for name in ("Amit S", "Rishab K", "Neha Sha")]

    assert first == second


def test_resolve_batch_buckets_results(resolver, directory, tz, at):
    day = date(2024, 3, 4)
    punches = [
        RawPunch.capture(raw_identifier="B002", raw_name=None, timestamp=at(day, 9), tz=tz),
        RawPunch.capture(raw_identifier="", raw_name="Amit S", timestamp=at(day, 9), tz=tz),
        RawPunch.capture(raw_identifier="Q1", raw_name="Nobody Here", timestamp=at(day, 9), tz=tz),
    ]

    batch = resolver.resolve_batch(punches, directory)

    assert batch.summary() == {
        "total": 3,
        "matched": 1,
        "failed": 1,
        "ambiguous": 1,
        "by_type": {"DIRECT_ID_MATCH": 1},
    }
    assert batch.successful[0][0] is punches[0]
