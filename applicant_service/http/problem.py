"""Problem+JSON utilities and global exception handlers.

Every error other than a form validation failure is returned as an RFC 7807
`application/problem+json` body. Form validation failures are ordinary 422
responses carrying the failed save result and the re-rendered form.
"""

from __future__ import annotations

from typing import Any, Dict
import logging
from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from applicant_service.logic.errors import ApplicantServiceError, NotFoundError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)

_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    422: "Invalid Request",
    500: "Internal Server Error",
}


def problem(status: int, detail: str, code: str | None = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "title": _TITLES.get(status, "Error"),
        "status": status,
        "detail": detail,
    }
    if code:
        body["code"] = code
    body.update(extra)
    return body


def problem_response(body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(body, status_code=int(body.get("status", 500)), media_type=PROBLEM_MEDIA_TYPE)


async def handle_service_error(request: Request, exc: ApplicantServiceError) -> JSONResponse:
    if isinstance(exc, NotFoundError):
        logger.info("error_handler.handle code=%s path=%s", exc.code, request.url.path)
        return problem_response(
            problem(exc.status, str(exc), exc.code, resource=exc.resource, id=exc.identifier)
        )
    logger.error("error_handler.handle code=%s path=%s", exc.code, request.url.path, exc_info=exc)
    # Store failures do not leak driver messages to clients
    return problem_response(problem(exc.status, "The request could not be completed", exc.code))


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    status = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        body = dict(exc.detail)
        body.setdefault("status", status)
    else:
        body = problem(status, str(exc.detail or ""))
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()} or None
    return JSONResponse(body, status_code=status, media_type=PROBLEM_MEDIA_TYPE, headers=headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return problem_response(
        problem(
            422,
            "Request validation failed",
            "REQUEST_BODY_INVALID",
            errors=jsonable_encoder(exc.errors()),
        )
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response(problem(500, "Unexpected error"))


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem",
    "problem_response",
    "handle_service_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
