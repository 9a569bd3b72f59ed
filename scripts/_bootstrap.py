"""Shared setup for the command line scripts: settings, logging and the service container."""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[1] / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from dotenv import load_dotenv

from attendance_reconciliation.config import get_settings_module
from attendance_reconciliation.container import Container, build_container
from attendance_reconciliation.core.settings import ReconciliationSettings


def load_container(*, verbose: bool = False) -> Container:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level="DEBUG" if verbose else getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return build_container(
        db_config=dict(settings.DB_CONFIG),
        settings=ReconciliationSettings.from_module(settings),
        backup_dir=getattr(settings, "BACKUP_DIR", "./data-backups"),
        report_dir=getattr(settings, "AUDIT_REPORT_DIR", "") or None,
    )
