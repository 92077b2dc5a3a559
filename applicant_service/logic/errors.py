"""Error taxonomy for applicant operations.

Validation problems are collected into a failed `SaveResult` rather than
raised. `ValidationError` wraps such a result's field errors and supplies the
status and code of the 422 re-rendered form response. Missing records and
store failures are raised and mapped to problem+json responses by the
handlers in `applicant_service.http.problem`.
"""

from __future__ import annotations

from typing import List, Optional

from applicant_service.models.save_result import FieldError


class ApplicantServiceError(Exception):
    code = "APPLICANT_SERVICE_ERROR"
    status = 500


class ValidationError(ApplicantServiceError):
    code = "VALIDATION_FAILED"
    status = 422

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__("; ".join(e.message for e in self.errors) or "validation failed")


class NotFoundError(ApplicantServiceError):
    code = "NOT_FOUND"
    status = 404

    def __init__(self, resource: str, identifier: Optional[str]):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"Couldn't find {resource} with id={identifier}")


class PersistenceError(ApplicantServiceError):
    code = "PERSISTENCE_FAILED"
    status = 500


__all__ = ["ApplicantServiceError", "ValidationError", "NotFoundError", "PersistenceError"]
