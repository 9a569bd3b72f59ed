"""Run the attendance data migration (backup, clean, fix, dedup, reconcile, verify).

Usage:
    python scripts/run_migration.py --start 2024-01-01 --end 2024-12-31
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
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args()

    try:
        start, end = require_date_range(args.start, args.end)
        summary = load_container(verbose=args.verbose).migration_runner.run(start, end)
    except DomainError as exc:
        raise SystemExit(f"ERROR: {exc}")

    print(json.dumps(summary.to_dict(), indent=2))
    print(
        f"\nOK: backed up {summary.backed_up}, cleaned {summary.cleaned}, fixed {summary.fixed}, "
        f"deduplicated {summary.deduplicated}, reconciled {summary.reconciled}"
    )
    if summary.backup_path:
        print(f"Backup: {summary.backup_path}")
    if not summary.success:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
