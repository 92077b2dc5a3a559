"""Pydantic models for applicant form submissions.

Declares the request payload accepted by the create and update routes
without coupling it to the route module. Child groups may arrive either as a
JSON list or as an object keyed by block index (the shape an HTML form with
`applicant[personal_references_attributes][<index>][name]` fields produces);
both normalise to an ordered list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PersonalReferenceAttributes(BaseModel):
    """One submitted child group."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    name: str = ""
    email_address: str = ""
    destroy: bool = Field(default=False, alias="_destroy")

    @field_validator("id", mode="before")
    @classmethod
    def blank_id_is_absent(cls, v: Any) -> Any:
        if v is None:
            return None
        text = str(v).strip()
        return text or None

    @field_validator("name", "email_address", mode="before")
    @classmethod
    def none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("destroy", mode="before")
    @classmethod
    def form_flag(cls, v: Any) -> Any:
        # HTML checkboxes and hidden inputs submit "1"/"0"; an empty value means unset
        if v is None or v == "":
            return False
        return v

    def is_blank(self) -> bool:
        return not self.name.strip() and not self.email_address.strip()

    def as_submitted(self) -> Dict[str, Any]:
        """Return the group as the client sent it, for re-display."""
        out: Dict[str, Any] = {"name": self.name, "email_address": self.email_address, "_destroy": self.destroy}
        if self.id is not None:
            out["id"] = self.id
        return out


class ApplicantAttributes(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    personal_references_attributes: Union[
        List[PersonalReferenceAttributes],
        Dict[str, PersonalReferenceAttributes],
    ] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def none_is_blank(cls, v: Any) -> Any:
        return "" if v is None else v

    def child_groups(self) -> List[PersonalReferenceAttributes]:
        groups = self.personal_references_attributes
        if isinstance(groups, dict):
            # Object keys preserve submission order
            return list(groups.values())
        return list(groups)

    def parent_attrs(self) -> Dict[str, Any]:
        return {"name": self.name}


class ApplicantForm(BaseModel):
    """Top-level body: `{"applicant": {...}}`."""

    applicant: ApplicantAttributes


__all__ = ["PersonalReferenceAttributes", "ApplicantAttributes", "ApplicantForm"]
