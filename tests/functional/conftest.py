from __future__ import annotations

"""Functional test bootstrap.

Points the service at a file-backed SQLite database under tmp/, applies the
SQL migrations once per session, and empties the tables before each test so
every test starts from a known state.
"""

import os
import pathlib

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

# Must be set before the app resolves its engine
os.environ["TEST_DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["DATABASE_URL"] = os.environ["TEST_DATABASE_URL"]
# Migrations are applied once below, not on every create_app()
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
os.environ["MIGRATIONS_DIR"] = str(_ROOT / "migrations")


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap():
    from applicant_service.db.base import get_engine
    from applicant_service.db.migrations_runner import apply_migrations

    apply_migrations(get_engine(os.environ["TEST_DATABASE_URL"]), migrations_dir=os.environ["MIGRATIONS_DIR"])
    yield


@pytest.fixture(autouse=True)
def clean_tables(functional_sqlite_bootstrap):
    from sqlalchemy import text as sql_text

    from applicant_service.db.base import get_engine
    from applicant_service.logic.events import get_buffered_events

    with get_engine(os.environ["TEST_DATABASE_URL"]).begin() as conn:
        conn.execute(sql_text("DELETE FROM personal_references"))
        conn.execute(sql_text("DELETE FROM applicants"))
    get_buffered_events(clear=True)
    yield


@pytest.fixture
def engine():
    from applicant_service.db.base import get_engine

    return get_engine(os.environ["TEST_DATABASE_URL"])


@pytest.fixture
def aggregate(engine):
    from applicant_service.logic.aggregate import ApplicantAggregate

    return ApplicantAggregate(engine)


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from applicant_service.main import create_app

    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def count_rows(engine):
    from sqlalchemy import text as sql_text

    def _count(table: str) -> int:
        with engine.connect() as conn:
            return int(conn.execute(sql_text(f"SELECT COUNT(*) FROM {table}")).scalar_one())

    return _count
