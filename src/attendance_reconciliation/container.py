from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import ReconciliationService
from .audit.service import AuditService
from .core.settings import ReconciliationSettings
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .identity.resolver import IdentityResolver
from .migration.backup import JsonBackupStore
from .migration.service import MigrationRunner
from .punches.ingestion import PunchIngestor
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.repository import PunchRepository
from .punches.service import PunchImportService
from .workflow.mysql_workflow_repository import MySQLWorkflowRepository
from .workflow.repository import WorkflowRepository


@dataclass(frozen=True)
class Container:
    settings: ReconciliationSettings

    attendance_repo: AttendanceRepository
    punches_repo: PunchRepository
    workflow_repo: WorkflowRepository
    employees_repo: EmployeeDirectory

    resolver: IdentityResolver
    import_service: PunchImportService
    reconciliation_service: ReconciliationService
    audit_service: AuditService
    migration_runner: MigrationRunner


def wire_services(
    *,
    settings: ReconciliationSettings,
    attendance_repo: AttendanceRepository,
    punches_repo: PunchRepository,
    workflow_repo: WorkflowRepository,
    employees_repo: EmployeeDirectory,
    backup_dir: str,
    report_dir: Optional[str] = None,
) -> Container:
    """Build every service on top of the given repositories."""

    resolver = IdentityResolver(
        fuzzy_threshold=settings.fuzzy_threshold,
        clear_winner_margin=settings.fuzzy_clear_winner_margin,
    )
    import_service = PunchImportService(
        punches_repo,
        employees_repo,
        ingestor=PunchIngestor(tz=settings.timezone),
        resolver=resolver,
    )
    reconciliation_service = ReconciliationService(
        attendance_repo, punches_repo, workflow_repo, employees_repo, settings=settings
    )
    audit_service = AuditService(
        attendance_repo, punches_repo, employees_repo, settings=settings, report_dir=report_dir
    )
    migration_runner = MigrationRunner(
        attendance_repo,
        punches_repo,
        employees_repo,
        reconciliation=reconciliation_service,
        audit=audit_service,
        resolver=resolver,
        backup=JsonBackupStore(backup_dir),
        settings=settings,
    )

    return Container(
        settings=settings,
        attendance_repo=attendance_repo,
        punches_repo=punches_repo,
        workflow_repo=workflow_repo,
        employees_repo=employees_repo,
        resolver=resolver,
        import_service=import_service,
        reconciliation_service=reconciliation_service,
        audit_service=audit_service,
        migration_runner=migration_runner,
    )


def build_container(
    *,
    db_config: dict,
    settings: ReconciliationSettings,
    backup_dir: str,
    report_dir: Optional[str] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    tz = settings.timezone

    return wire_services(
        settings=settings,
        attendance_repo=MySQLAttendanceRepository(conn, tz=tz),
        punches_repo=MySQLPunchRepository(conn, tz=tz),
        workflow_repo=MySQLWorkflowRepository(conn, tz=tz),
        employees_repo=MySQLEmployeeDirectory(conn),
        backup_dir=backup_dir,
        report_dir=report_dir,
    )
