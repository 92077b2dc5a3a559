"""User-facing notices and validation messages."""

from __future__ import annotations

CREATED = "Applicant was successfully created."
UPDATED = "Applicant was successfully updated."
DESTROYED = "Applicant was successfully destroyed."

NAME_BLANK = "Name can't be blank"
REFERENCE_NAME_BLANK = "Personal references name can't be blank"
REFERENCE_ID_REPEATED = "Personal references id has already been submitted"


def errors_prohibited(count: int) -> str:
    noun = "error" if count == 1 else "errors"
    return f"{count} {noun} prohibited this applicant from being saved"


__all__ = [
    "CREATED",
    "UPDATED",
    "DESTROYED",
    "NAME_BLANK",
    "REFERENCE_NAME_BLANK",
    "REFERENCE_ID_REPEATED",
    "errors_prohibited",
]
