"""Applicant data access helpers.

Encapsulates every SQL statement touching `applicants` and
`personal_references` to keep route handlers and the aggregate free of
inline SQL. Write helpers take the caller's connection so several of them
can share one transaction; read helpers open their own when none is given.
"""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection

from applicant_service.db.base import get_engine
from applicant_service.models.records import ApplicantRecord, PersonalReferenceRecord

logger = logging.getLogger(__name__)


def utc_timestamp(dt: datetime | None = None) -> str:
    """Format an RFC3339 UTC timestamp with trailing 'Z'."""
    base = (dt or datetime.now(timezone.utc)).isoformat(timespec="microseconds")
    return base.replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid.uuid4())


_SELECT_APPLICANTS = """
    SELECT applicant_id, name, created_at, updated_at
    FROM applicants
"""

_SELECT_REFERENCES = """
    SELECT personal_reference_id, applicant_id, name, email_address, position
    FROM personal_references
"""


def _reference_from_row(row) -> PersonalReferenceRecord:  # type: ignore[no-untyped-def]
    return PersonalReferenceRecord(
        personal_reference_id=str(row[0]),
        applicant_id=str(row[1]),
        name=str(row[2]),
        email_address=str(row[3] or ""),
        position=int(row[4]),
    )


def _load_applicants(conn: Connection, applicant_id: Optional[str] = None) -> List[ApplicantRecord]:
    if applicant_id is None:
        parents = conn.execute(sql_text(_SELECT_APPLICANTS + " ORDER BY created_at, applicant_id")).fetchall()
        children = conn.execute(sql_text(_SELECT_REFERENCES + " ORDER BY position")).fetchall()
    else:
        parents = conn.execute(
            sql_text(_SELECT_APPLICANTS + " WHERE applicant_id = :aid"),
            {"aid": applicant_id},
        ).fetchall()
        children = conn.execute(
            sql_text(_SELECT_REFERENCES + " WHERE applicant_id = :aid ORDER BY position"),
            {"aid": applicant_id},
        ).fetchall()

    by_parent: Dict[str, List[PersonalReferenceRecord]] = {}
    for row in children:
        ref = _reference_from_row(row)
        by_parent.setdefault(ref.applicant_id, []).append(ref)

    out: "OrderedDict[str, ApplicantRecord]" = OrderedDict()
    for row in parents:
        aid = str(row[0])
        out[aid] = ApplicantRecord(
            applicant_id=aid,
            name=str(row[1]),
            created_at=str(row[2]),
            updated_at=str(row[3]),
            personal_references=by_parent.get(aid, []),
        )
    return list(out.values())


def list_applicants(conn: Connection | None = None) -> List[ApplicantRecord]:
    """Return every applicant with its references, oldest first."""
    if conn is not None:
        return _load_applicants(conn)
    with get_engine().connect() as own:
        return _load_applicants(own)


def get_applicant(applicant_id: str, conn: Connection | None = None) -> Optional[ApplicantRecord]:
    """Return the applicant with its references, or None when it does not exist."""
    if conn is not None:
        found = _load_applicants(conn, str(applicant_id))
    else:
        with get_engine().connect() as own:
            found = _load_applicants(own, str(applicant_id))
    return found[0] if found else None


def applicant_exists(conn: Connection, applicant_id: str) -> bool:
    row = conn.execute(
        sql_text("SELECT 1 FROM applicants WHERE applicant_id = :aid"),
        {"aid": applicant_id},
    ).fetchone()
    return row is not None


def reference_ids_for(conn: Connection, applicant_id: str) -> List[str]:
    """Return the ids of an applicant's references in display order."""
    rows = conn.execute(
        sql_text(
            "SELECT personal_reference_id FROM personal_references"
            " WHERE applicant_id = :aid ORDER BY position"
        ),
        {"aid": applicant_id},
    ).fetchall()
    return [str(r[0]) for r in rows]


def insert_applicant(conn: Connection, applicant_id: str, name: str, now: str) -> None:
    conn.execute(
        sql_text(
            """
            INSERT INTO applicants (applicant_id, name, created_at, updated_at)
            VALUES (:aid, :name, :now, :now)
            """
        ),
        {"aid": applicant_id, "name": name, "now": now},
    )


def update_applicant(conn: Connection, applicant_id: str, name: str, now: str) -> None:
    conn.execute(
        sql_text("UPDATE applicants SET name = :name, updated_at = :now WHERE applicant_id = :aid"),
        {"aid": applicant_id, "name": name, "now": now},
    )


def insert_reference(
    conn: Connection,
    applicant_id: str,
    reference_id: str,
    name: str,
    email_address: str,
    position: int,
    now: str,
) -> None:
    conn.execute(
        sql_text(
            """
            INSERT INTO personal_references
                (personal_reference_id, applicant_id, name, email_address, position, created_at, updated_at)
            VALUES (:rid, :aid, :name, :email, :pos, :now, :now)
            """
        ),
        {
            "rid": reference_id,
            "aid": applicant_id,
            "name": name,
            "email": email_address,
            "pos": position,
            "now": now,
        },
    )


def update_reference(
    conn: Connection,
    applicant_id: str,
    reference_id: str,
    name: str,
    email_address: str,
    position: int,
    now: str,
) -> None:
    conn.execute(
        sql_text(
            """
            UPDATE personal_references
            SET name = :name, email_address = :email, position = :pos, updated_at = :now
            WHERE personal_reference_id = :rid AND applicant_id = :aid
            """
        ),
        {
            "rid": reference_id,
            "aid": applicant_id,
            "name": name,
            "email": email_address,
            "pos": position,
            "now": now,
        },
    )


def set_reference_position(conn: Connection, applicant_id: str, reference_id: str, position: int) -> None:
    conn.execute(
        sql_text(
            "UPDATE personal_references SET position = :pos"
            " WHERE personal_reference_id = :rid AND applicant_id = :aid"
        ),
        {"rid": reference_id, "aid": applicant_id, "pos": position},
    )


def delete_reference(conn: Connection, applicant_id: str, reference_id: str) -> None:
    conn.execute(
        sql_text("DELETE FROM personal_references WHERE personal_reference_id = :rid AND applicant_id = :aid"),
        {"rid": reference_id, "aid": applicant_id},
    )


def delete_applicant(conn: Connection, applicant_id: str) -> int:
    """Delete an applicant and its references; return the parent rows removed."""
    conn.execute(
        sql_text("DELETE FROM personal_references WHERE applicant_id = :aid"),
        {"aid": applicant_id},
    )
    result = conn.execute(
        sql_text("DELETE FROM applicants WHERE applicant_id = :aid"),
        {"aid": applicant_id},
    )
    return int(result.rowcount or 0)


__all__ = [
    "utc_timestamp",
    "new_id",
    "list_applicants",
    "get_applicant",
    "applicant_exists",
    "reference_ids_for",
    "insert_applicant",
    "update_applicant",
    "insert_reference",
    "update_reference",
    "set_reference_position",
    "delete_reference",
    "delete_applicant",
]
