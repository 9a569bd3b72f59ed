"""Schema bootstrap: create the target database and apply ``schema.sql``.

``schema.sql`` holds plain DDL only (no procedures, no ``;`` inside literals),
so statements are split at lines ending with ``;``.
"""

from __future__ import annotations

import logging
from contextlib import closing
from pathlib import Path
from typing import Iterator

from .connection import DBConfig, DatabaseConnection

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

log = logging.getLogger(__name__)


def iter_statements(sql: str) -> Iterator[str]:
    pending: list[str] = []
    for line in sql.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        pending.append(stripped)
        if stripped.endswith(";"):
            yield " ".join(pending).rstrip(";").strip()
            pending = []
    if pending:
        yield " ".join(pending)


def ensure_database_exists(db_config: dict) -> None:
    conn_factory = DatabaseConnection(DBConfig.from_dict(db_config))
    name = conn_factory.config.database
    with closing(conn_factory.connect(with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    statements = list(iter_statements(Path(schema_path).read_text(encoding="utf-8")))

    with closing(DatabaseConnection(DBConfig.from_dict(db_config)).connect()) as conn:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    log.info("Applied %d schema statement(s) from %s", len(statements), schema_path)


def list_tables(db_config: dict) -> list[str]:
    with closing(DatabaseConnection(DBConfig.from_dict(db_config)).connect()) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
