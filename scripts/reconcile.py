"""Reconcile daily attendance for a date range.

Usage:
    python scripts/reconcile.py --start 2024-01-01 --end 2024-01-31
"""

from __future__ import annotations

import argparse
import json

from _bootstrap import load_container

from attendance_reconciliation.common.validators import require_date_range
from attendance_reconciliation.core.exceptions import DomainError


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--start", required=True, help="first day (YYYY-MM-DD)")
    parser.add_argument("--end", required=True, help="last day (YYYY-MM-DD), inclusive")
    parser.add_argument("--audit", action="store_true", help="print an audit report after reconciling")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    try:
        start, end = require_date_range(args.start, args.end)
        container = load_container(verbose=args.verbose)
        result = container.reconciliation_service.reconcile_range(start, end)
    except DomainError as exc:
        raise SystemExit(f"ERROR: {exc}")

    print(json.dumps(result.to_dict(), indent=2))
    if args.audit:
        report = container.audit_service.generate_report(start, end)
        print(json.dumps(report.to_dict(), indent=2))
        for rec in container.audit_service.generate_fix_recommendations(report):
            print(f"\n{rec.category} (Priority: {rec.priority.value})")
            for fix in rec.fixes:
                print(f"  - {fix}")

    if not result.success:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
