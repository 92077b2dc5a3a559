"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from the `migrations/` directory and
records each applied filename in a `schema_migrations` table in the target
database, so a fresh database (including in-memory SQLite) always receives
the full schema and an existing one is never migrated twice. Production
deployments may use their platform's migration mechanism instead.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

_JOURNAL_DDL = (
    "CREATE TABLE IF NOT EXISTS schema_migrations ("
    " filename VARCHAR(255) PRIMARY KEY,"
    " applied_at VARCHAR(32) NOT NULL)"
)


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _exec_sql_compat(conn: Connection, sql: str) -> None:
    """Execute a possibly multi-statement SQL script.

    pysqlite refuses several statements in one execute() call, so SQLite
    scripts are split on ';' with comment-only and empty segments dropped.
    Other dialects receive the script as-is.
    """
    if conn.dialect.name == "sqlite":
        for stmt in sql.split(";"):
            lines = [ln for ln in stmt.splitlines() if not ln.strip().startswith("--")]
            s = "\n".join(lines).strip()
            if not s or s.upper() in {"BEGIN", "COMMIT", "END"}:
                continue
            conn.exec_driver_sql(s)
        return
    conn.exec_driver_sql(sql)


def applied_migrations(conn: Connection) -> set[str]:
    conn.exec_driver_sql(_JOURNAL_DDL)
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] = "migrations") -> list[str]:
    """Apply pending migrations and return the filenames applied in this run."""
    root = Path(migrations_dir)
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", str(root))
        return []

    newly_applied: list[str] = []
    with engine.begin() as conn:
        done = applied_migrations(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in done:
                continue
            sql = sql_path.read_text(encoding="utf-8")
            if not sql.strip():
                continue
            _exec_sql_compat(conn, sql)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    # ISO-8601 UTC without fractional seconds
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            newly_applied.append(fname)
            logger.info("migration_applied file=%s", fname)
    return newly_applied


__all__ = ["apply_migrations", "applied_migrations"]
