"""FastAPI application package for the Applicant Service.

Exposes the application factory. Cross-cutting wiring (logging, migrations,
problem+json handlers, request ids) lives in `applicant_service.main`; the
aggregate save and form state in `applicant_service/logic/`; route handlers
in `applicant_service/routes/`.
"""

from __future__ import annotations

from applicant_service.main import create_app

__all__ = ["create_app"]
