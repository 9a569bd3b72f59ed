from __future__ import annotations

from datetime import date

import pytest

from attendance_reconciliation.core.exceptions import PersistenceError
from attendance_reconciliation.identity.resolver import IdentityResolver
from attendance_reconciliation.punches.ingestion import PunchIngestor
from attendance_reconciliation.punches.service import PunchImportService

DAY = date(2024, 3, 4)


@pytest.fixture
def service(punches_repo, employees_repo, tz):
    return PunchImportService(
        punches_repo,
        employees_repo,
        ingestor=PunchIngestor(tz=tz),
        resolver=IdentityResolver(),
    )


def test_resolved_and_unresolved_punches_are_both_stored(service, punches_repo):
    rows = [
        {"Biometric_ID": "B001", "Name": "Rishabh Kumar", "Punch_Time": "2024-03-04 09:02:00"},
        {"Biometric_ID": "", "Name": "Priya N", "Punch_Time": "2024-03-04 09:15:00", "Direction": "in"},
        {"Biometric_ID": "Z-900", "Name": "Unknown Person", "Punch_Time": "2024-03-04 10:00:00"},
    ]

    result = service.import_rows(rows, source_batch_id="batch-7")

    assert (result.stored, result.resolved, result.unresolved) == (3, 2, 1)
    stored = {p.raw_identifier or p.raw_name: p for p in punches_repo.all()}
    assert stored["B001"].employee_id == 1
    assert stored["B001"].match_type == "DIRECT_ID_MATCH"
    assert stored["Priya N"].employee_id == 4
    assert stored["Z-900"].employee_id is None
    assert all(p.source_batch_id == "batch-7" for p in punches_repo.all())
    assert result.resolution["by_type"] == {"DIRECT_ID_MATCH": 1, "FIRST_NAME_EXACT": 1}


def test_ambiguous_name_is_kept_unresolved(service, punches_repo):
    result = service.import_rows([{"name": "Amit S", "time": "2024-03-04 09:00:00"}], source_batch_id="b")

    assert result.unresolved == 1
    assert result.resolution["ambiguous"] == 1
    assert punches_repo.all()[0].employee_id is None


def test_already_stored_punch_counts_as_duplicate(service, punches_repo, make_punch, at):
    punches_repo.add(make_punch(1, at(DAY, 9, 2)))

    result = service.import_rows(
        [
            {"biometric_id": "B001", "punch_time": "2024-03-04 09:02:00"},
            {"biometric_id": "B001", "punch_time": "2024-03-04 09:02:00"},
        ],
        source_batch_id="again",
    )

    assert result.stored == 0
    assert result.duplicates == 2
    assert len(punches_repo.all()) == 1


def test_bad_rows_are_reported_and_batch_continues(service, punches_repo):
    rows = [
        {"biometric_id": "B002", "punch_time": "31-31-2024 25:00"},
        {"biometric_id": "B002"},
        {"punch_time": "2024-03-04 09:00:00"},
        {"biometric_id": "B002", "punch_time": "04/03/2024 18:00"},
    ]

    result = service.import_rows(rows, source_batch_id="mixed")

    assert result.stored == 1
    assert [s["error"] for s in result.skipped] == [
        "Invalid date format: '31-31-2024 25:00'",
        "Missing punch time",
        "Missing both biometric ID and name",
    ]
    assert punches_repo.all()[0].calendar_date == DAY
    assert result.to_dict()["source_batch_id"] == "mixed"


def test_failed_write_is_reported_and_batch_continues(punches_repo, employees_repo, tz):
    class FlakyPunches(type(punches_repo)):
        def add(self, punch):
            if punch.raw_timestamp == "2024-03-04 10:00:00":
                raise PersistenceError("deadlock")
            return super().add(punch)

    repo = FlakyPunches()
    service = PunchImportService(repo, employees_repo, ingestor=PunchIngestor(tz=tz), resolver=IdentityResolver())
    rows = [
        {"biometric_id": "B001", "punch_time": "2024-03-04 09:00:00"},
        {"biometric_id": "B001", "punch_time": "2024-03-04 10:00:00"},
        {"biometric_id": "B001", "punch_time": "2024-03-04 18:00:00"},
    ]

    result = service.import_rows(rows, source_batch_id="flaky")

    assert result.stored == 2
    assert result.failed == [
        {"raw_identifier": "B001", "raw_name": None, "raw_value": "2024-03-04 10:00:00", "error": "deadlock"}
    ]
    assert not result.success
    assert [p.raw_timestamp for p in repo.all()] == ["2024-03-04 09:00:00", "2024-03-04 18:00:00"]
