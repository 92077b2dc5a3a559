from __future__ import annotations

import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from applicant_service.config import AppConfig, load_config
from applicant_service.db.base import get_engine
from applicant_service.db.migrations_runner import apply_migrations
from applicant_service.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_service_error,
    handle_unexpected_error,
)
from applicant_service.http.request_id import RequestIdMiddleware
from applicant_service.logging_setup import configure_logging
from applicant_service.logic.aggregate import ApplicantAggregate
from applicant_service.logic.errors import ApplicantServiceError
from applicant_service.routes import api_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Build the FastAPI application.

    Configures logging, resolves the database engine from configuration,
    applies pending SQL migrations when enabled, and registers problem+json
    handlers and the request-id middleware.
    """
    configure_logging()
    cfg = config or load_config()

    engine = get_engine(cfg.database.url)
    if cfg.database.auto_apply_migrations:
        applied = apply_migrations(engine, migrations_dir=cfg.database.migrations_dir)
        if applied:
            logger.info("startup.migrations_applied count=%s", len(applied))

    app = FastAPI(title="Applicant Service")
    app.state.config = cfg
    app.state.engine = engine
    app.state.aggregate = ApplicantAggregate(engine, reject_all_blank=cfg.forms.reject_all_blank)

    app.add_exception_handler(ApplicantServiceError, handle_service_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router, prefix=API_PREFIX)
    return app


def run() -> None:
    """Serve the application with uvicorn (console entry point)."""
    import uvicorn

    host = os.getenv("APP_HOST", "127.0.0.1")
    port = int(os.getenv("APP_PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["create_app", "run", "API_PREFIX"]
