"""Result of an aggregate save attempt.

Carries what a view needs to either redirect with a notice or re-render the
form with errors. Returned by value; nothing is stored between requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from applicant_service.models.records import ApplicantRecord


class SavePhase(str, Enum):
    # Terminal phase of an attempt; collecting and validating never outlive save()
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass
class SaveResult:
    status: str  # "success" | "failure"
    message: str
    phase: SavePhase
    errors: List[FieldError] = field(default_factory=list)
    applicant: Optional[ApplicantRecord] = None
    # Echo of the submission on failure: parent attrs plus every child group in order
    submitted: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @property
    def error_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "status": self.status,
            "message": self.message,
            "phase": self.phase.value,
            "errors": [e.to_dict() for e in self.errors],
        }
        if self.applicant is not None:
            body["applicant"] = self.applicant.to_dict()
        if self.submitted is not None:
            body["submitted"] = self.submitted
        return body


__all__ = ["SavePhase", "FieldError", "SaveResult"]
