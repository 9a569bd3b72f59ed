from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from ..core.exceptions import DomainError
from ..employees.repository import EmployeeDirectory
from ..identity.resolver import IdentityResolver
from .ingestion import PunchIngestor
from .model import RawPunch
from .repository import PunchRepository


@dataclass
class ImportResult:
    source_batch_id: str
    stored: int = 0
    resolved: int = 0
    unresolved: int = 0
    duplicates: int = 0
    skipped: list[dict] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)
    resolution: dict = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_batch_id": self.source_batch_id,
            "stored": self.stored,
            "resolved": self.resolved,
            "unresolved": self.unresolved,
            "duplicates": self.duplicates,
            "skipped": list(self.skipped),
            "failed": list(self.failed),
            "resolution": dict(self.resolution),
            "success": self.success,
        }


class PunchImportService:
    """Stores a batch of raw punch rows, resolving each to an employee when possible.

    Unresolved punches are stored anyway (without employee) so the auditor can
    surface them and a later migration can re-resolve them. A punch that cannot
    be written is reported in ``failed`` and the rest of the batch continues.
    """

    def __init__(
        self,
        punches: PunchRepository,
        employees: EmployeeDirectory,
        *,
        ingestor: PunchIngestor,
        resolver: IdentityResolver,
        logger: Optional[logging.Logger] = None,
    ):
        self._punches = punches
        self._employees = employees
        self._ingestor = ingestor
        self._resolver = resolver
        self._log = logger or logging.getLogger(__name__)

    def import_rows(self, rows: Iterable[Mapping[str, Any]], *, source_batch_id: str) -> ImportResult:
        ingested = self._ingestor.ingest_rows(rows, source_batch_id=source_batch_id)
        result = ImportResult(source_batch_id=source_batch_id, duplicates=ingested.duplicates)
        result.skipped = [{"error": s.error, "raw_value": s.raw_value} for s in ingested.skipped]

        batch = self._resolver.resolve_batch(ingested.punches, self._employees.list_identities())
        result.resolution = batch.summary()

        for punch, resolution in batch.successful:
            resolved = punch.resolved_to(resolution.employee_id, resolution.match_type.value)
            try:
                if self._punches.exists(
                    employee_id=resolved.employee_id,
                    calendar_date=resolved.calendar_date,
                    timestamp=resolved.timestamp,
                ):
                    result.duplicates += 1
                    continue
                self._punches.add(resolved)
            except DomainError as exc:
                self._record_failure(result, resolved, exc)
                continue
            result.stored += 1
            result.resolved += 1

        for punch, resolution in [*batch.ambiguous, *batch.failed]:
            self._log.warning(
                "Storing unresolved punch %r (%r): %s",
                punch.raw_identifier,
                punch.raw_name,
                resolution.error_code.value if resolution.error_code else resolution.message,
            )
            try:
                self._punches.add(punch)
            except DomainError as exc:
                self._record_failure(result, punch, exc)
                continue
            result.stored += 1
            result.unresolved += 1

        self._log.info(
            "Imported batch %s: %d stored (%d unresolved), %d duplicates, %d skipped, %d failed",
            source_batch_id,
            result.stored,
            result.unresolved,
            result.duplicates,
            len(result.skipped),
            len(result.failed),
        )
        return result

    def _record_failure(self, result: ImportResult, punch: RawPunch, exc: DomainError) -> None:
        self._log.exception("Could not store punch %r at %s", punch.raw_identifier, punch.raw_timestamp)
        result.failed.append(
            {
                "raw_identifier": punch.raw_identifier,
                "raw_name": punch.raw_name,
                "raw_value": punch.raw_timestamp,
                "error": str(exc),
            }
        )
