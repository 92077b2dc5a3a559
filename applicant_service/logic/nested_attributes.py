"""Translate submitted child groups into explicit child actions.

Each submitted personal reference group becomes at most one action:

- ``CreateChild``: no id, not marked for destruction
- ``UpdateChild``: id present, not marked for destruction
- ``DeleteChild``: id present, marked for destruction

A group marked for destruction without an id was never persisted and yields
no action. Groups marked for destruction are never validated. A stored id
submitted by more than one group is rejected. The plan is
computed in full, with every validation error collected, before anything is
written.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Union

from applicant_service.logic import messages
from applicant_service.models.applicant_form import PersonalReferenceAttributes
from applicant_service.models.save_result import FieldError


@dataclass(frozen=True)
class CreateChild:
    position: int
    name: str
    email_address: str


@dataclass(frozen=True)
class UpdateChild:
    position: int
    child_id: str
    name: str
    email_address: str


@dataclass(frozen=True)
class DeleteChild:
    position: int
    child_id: str


ChildAction = Union[CreateChild, UpdateChild, DeleteChild]


@dataclass
class ChildPlan:
    actions: List[ChildAction] = field(default_factory=list)
    errors: List[FieldError] = field(default_factory=list)
    # Submission positions of groups that produced no action
    ignored: List[int] = field(default_factory=list)

    @property
    def deletions(self) -> List[DeleteChild]:
        return [a for a in self.actions if isinstance(a, DeleteChild)]

    @property
    def survivors(self) -> List[Union[CreateChild, UpdateChild]]:
        return [a for a in self.actions if not isinstance(a, DeleteChild)]

    def referenced_ids(self) -> List[str]:
        return [a.child_id for a in self.actions if isinstance(a, (UpdateChild, DeleteChild))]


def validate_parent(parent_attrs: Dict[str, object]) -> List[FieldError]:
    name = str(parent_attrs.get("name") or "")
    if not name.strip():
        return [FieldError(field="name", message=messages.NAME_BLANK)]
    return []


def classify_group(
    position: int,
    group: PersonalReferenceAttributes,
    *,
    reject_all_blank: bool = True,
) -> tuple[Optional[ChildAction], Optional[FieldError]]:
    """Return the action for one group, or the validation error it raises."""
    if group.destroy:
        if group.id is None:
            return None, None
        return DeleteChild(position=position, child_id=group.id), None

    if group.id is None and reject_all_blank and group.is_blank():
        return None, None

    if not group.name.strip():
        return None, FieldError(
            field=f"personal_references[{position}].name",
            message=messages.REFERENCE_NAME_BLANK,
        )

    if group.id is None:
        return CreateChild(position=position, name=group.name, email_address=group.email_address), None
    return UpdateChild(
        position=position,
        child_id=group.id,
        name=group.name,
        email_address=group.email_address,
    ), None


def plan_child_actions(
    groups: Sequence[PersonalReferenceAttributes],
    *,
    reject_all_blank: bool = True,
) -> ChildPlan:
    plan = ChildPlan()
    seen_ids: set[str] = set()
    for position, group in enumerate(groups):
        # An id may appear once per submission; a second group for it is an error
        if group.id is not None:
            if group.id in seen_ids:
                plan.errors.append(
                    FieldError(field=f"personal_references[{position}].id", message=messages.REFERENCE_ID_REPEATED)
                )
                continue
            seen_ids.add(group.id)
        action, error = classify_group(position, group, reject_all_blank=reject_all_blank)
        if error is not None:
            plan.errors.append(error)
        elif action is None:
            plan.ignored.append(position)
        else:
            plan.actions.append(action)
    return plan


__all__ = [
    "CreateChild",
    "UpdateChild",
    "DeleteChild",
    "ChildAction",
    "ChildPlan",
    "validate_parent",
    "classify_group",
    "plan_child_actions",
]
