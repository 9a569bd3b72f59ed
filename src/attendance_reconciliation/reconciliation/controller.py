from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..attendance.model import AttendanceKey
from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_date_range, require_non_empty
from ..container import Container
from ..core.exceptions import PersistenceError, ValidationError

log = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        log.exception("Persistence error while handling %s", request.path)
        return jsonify({"error": "Database error"}), 500

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @app.route("/api/reconciliation/run", methods=["POST"], endpoint="reconciliation_run")
    def reconciliation_run():
        data = _json_body()
        start, end = require_date_range(data.get("start"), data.get("end"))
        result = container.reconciliation_service.reconcile_range(start, end)
        return jsonify(result.to_dict()), 200

    @app.route(
        "/api/reconciliation/records/<int:employee_id>/<day>",
        methods=["GET"],
        endpoint="reconciliation_record",
    )
    def reconciliation_record(employee_id: int, day: str):
        record = container.attendance_repo.get(AttendanceKey(employee_id, parse_iso_date(day)))
        if record is None:
            return jsonify({"error": "Record not found"}), 404
        return jsonify(record.to_dict()), 200

    @app.route("/api/punches/import", methods=["POST"], endpoint="punches_import")
    def punches_import():
        data = _json_body()
        batch_id = require_non_empty(data.get("source_batch_id"), "source_batch_id")
        rows = data.get("rows")
        if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
            raise ValidationError("rows must be a list of objects")
        result = container.import_service.import_rows(rows, source_batch_id=batch_id)
        return jsonify(result.to_dict()), 200

    @app.route("/api/identity/resolve", methods=["POST"], endpoint="identity_resolve")
    def identity_resolve():
        data = _json_body()
        if not data.get("raw_identifier") and not data.get("raw_name"):
            raise ValidationError("raw_identifier or raw_name is required")
        result = container.resolver.resolve(
            data.get("raw_identifier"),
            data.get("raw_name"),
            container.employees_repo.list_identities(),
        )
        return jsonify(result.to_dict()), 200

    @app.route("/api/audit", methods=["GET"], endpoint="audit_report")
    def audit_report():
        start, end = require_date_range(request.args.get("start"), request.args.get("end"))
        report = container.audit_service.generate_report(start, end)
        return jsonify(report.to_dict()), 200

    @app.route("/api/audit/recommendations", methods=["GET"], endpoint="audit_recommendations")
    def audit_recommendations():
        start, end = require_date_range(request.args.get("start"), request.args.get("end"))
        report = container.audit_service.generate_report(start, end, write_file=False)
        recommendations = container.audit_service.generate_fix_recommendations(report)
        return jsonify(
            {
                "total_issues": report.total_issues,
                "recommendations": [r.to_dict() for r in recommendations],
            }
        ), 200

    @app.route("/api/migrations/run", methods=["POST"], endpoint="migrations_run")
    def migrations_run():
        data = _json_body()
        start, end = require_date_range(data.get("start"), data.get("end"))
        summary = container.migration_runner.run(start, end)
        return jsonify(summary.to_dict()), 200
