"""SQLAlchemy engine lifecycle.

The service targets PostgreSQL in production and SQLite for local development
and tests. No declarative models are defined; repositories issue SQL through
`sqlalchemy.text` against connections obtained here.
"""

from __future__ import annotations

import logging
import os
from typing import Dict

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from applicant_service.config import DEFAULT_DATABASE_URL

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return (
        os.getenv("TEST_DATABASE_URL")
        or os.getenv("DATABASE_URL")
        or DEFAULT_DATABASE_URL
    )


# One Engine per URL; engines handed out are never disposed here since apps and
# aggregates keep references to them
_ENGINES: Dict[str, Engine] = {}


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:  # type: ignore[no-untyped-def]
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _build_engine(url: str) -> Engine:
    kwargs: dict = {"future": True, "pool_pre_ping": True}
    if url.startswith("sqlite") and ":memory:" in url:
        kwargs.update({
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        })
    elif url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    logger.info("db.engine.created dialect=%s", engine.dialect.name)
    return engine


def get_engine(url: str | None = None) -> Engine:
    """Return the cached SQLAlchemy Engine for the given URL.

    Without a URL the environment decides (`TEST_DATABASE_URL`, then
    `DATABASE_URL`, then in-memory SQLite). In-memory SQLite URLs get a
    StaticPool so every session and thread sees the same database. SQLite
    connections switch on foreign key enforcement so `ON DELETE CASCADE`
    behaves as on PostgreSQL.
    """
    resolved_url = url or _db_url()
    engine = _ENGINES.get(resolved_url)
    if engine is None:
        engine = _build_engine(resolved_url)
        _ENGINES[resolved_url] = engine
    return engine


__all__ = ["get_engine"]
