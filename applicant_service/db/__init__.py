"""Database bootstrap utilities for the Applicant Service.

Exposes engine construction and the migrations runner that applies SQL files
from the local migrations/ directory. The DB layer does not leak ORM models
into route handlers.
"""

from applicant_service.db.base import get_engine
from applicant_service.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "apply_migrations",
]
