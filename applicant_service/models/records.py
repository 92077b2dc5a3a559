"""Plain records returned by the applicant repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class PersonalReferenceRecord:
    personal_reference_id: str
    applicant_id: str
    name: str
    email_address: str
    position: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.personal_reference_id,
            "name": self.name,
            "email_address": self.email_address,
        }


@dataclass(frozen=True)
class ApplicantRecord:
    applicant_id: str
    name: str
    created_at: str
    updated_at: str
    personal_references: List[PersonalReferenceRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.applicant_id,
            "name": self.name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "personal_references": [r.to_dict() for r in self.personal_references],
        }


__all__ = ["ApplicantRecord", "PersonalReferenceRecord"]
