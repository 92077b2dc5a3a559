"""Liveness and database reachability probe."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health", summary="Service health")
def health(request: Request):
    # Checks the engine this app serves requests with, not the environment's
    engine = request.app.state.engine
    try:
        with engine.connect() as conn:
            conn.execute(sql_text("SELECT 1")).fetchone()
        return {"status": "ok", "db": True}
    except SQLAlchemyError as e:
        logger.error("Health DB check failed", exc_info=True)
        return {"status": "degraded", "db": False, "reason": str(e)}


__all__ = ["router", "health"]
