"""APIRouter registration for the Applicant Service."""

from __future__ import annotations

from fastapi import APIRouter

from applicant_service.routes.applicants import router as applicants_router
from applicant_service.routes.health import router as health_router

api_router = APIRouter()
api_router.include_router(applicants_router, tags=["Applicants"])
api_router.include_router(health_router, tags=["Health"])

__all__ = ["api_router"]
