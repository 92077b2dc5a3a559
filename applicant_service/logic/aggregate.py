"""Aggregate save for an applicant and its nested personal references.

`ApplicantAggregate.save` takes the parent's attributes and the ordered child
groups of one form submission and applies them as a single unit:

1. Collecting: every child group is turned into a create, update or delete
   action (or ignored) and every validation error is gathered.
2. Validating: inside the transaction, referenced ids are checked against
   the stored applicant; if any field error was collected the attempt ends
   here without a single write (RolledBack).
3. Committed: parent insert/update, then each child action, in one
   transaction. Surviving references are stored in the order submitted,
   after any existing references the submission did not mention.

Store failures roll the transaction back and surface as `PersistenceError`.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from applicant_service.db.base import get_engine
from applicant_service.logic import messages
from applicant_service.logic import repository_applicants as repo
from applicant_service.logic.errors import NotFoundError, PersistenceError
from applicant_service.logic.events import APPLICANT_DESTROYED, APPLICANT_SAVED, publish
from applicant_service.logic.nested_attributes import (
    ChildPlan,
    CreateChild,
    UpdateChild,
    plan_child_actions,
    validate_parent,
)
from applicant_service.models.applicant_form import PersonalReferenceAttributes
from applicant_service.models.records import ApplicantRecord
from applicant_service.models.save_result import FieldError, SavePhase, SaveResult

logger = logging.getLogger(__name__)

ChildGroupInput = Union[PersonalReferenceAttributes, Mapping[str, Any]]


def _coerce_groups(groups: Iterable[ChildGroupInput]) -> List[PersonalReferenceAttributes]:
    out: List[PersonalReferenceAttributes] = []
    for g in groups:
        if isinstance(g, PersonalReferenceAttributes):
            out.append(g)
        else:
            out.append(PersonalReferenceAttributes.model_validate(dict(g)))
    return out


def submitted_shape(parent_attrs: Mapping[str, Any], groups: Sequence[PersonalReferenceAttributes]) -> dict:
    """Echo a submission so the form can be rebuilt exactly as the user left it."""
    return {
        "name": str(parent_attrs.get("name") or ""),
        "personal_references_attributes": [g.as_submitted() for g in groups],
    }


class ApplicantAggregate:
    def __init__(self, engine: Engine | None = None, *, reject_all_blank: bool = True) -> None:
        self._engine = engine
        self.reject_all_blank = reject_all_blank

    @property
    def engine(self) -> Engine:
        return self._engine or get_engine()

    def list_all(self) -> List[ApplicantRecord]:
        try:
            with self.engine.connect() as conn:
                return repo.list_applicants(conn)
        except SQLAlchemyError as e:
            logger.error("applicant.list.persistence_failed", exc_info=True)
            raise PersistenceError("could not load applicants") from e

    def get(self, applicant_id: str) -> ApplicantRecord:
        try:
            with self.engine.connect() as conn:
                found = repo.get_applicant(applicant_id, conn)
        except SQLAlchemyError as e:
            logger.error("applicant.get.persistence_failed applicant_id=%s", applicant_id, exc_info=True)
            raise PersistenceError(f"could not load applicant {applicant_id}") from e
        if found is None:
            raise NotFoundError("Applicant", applicant_id)
        return found

    def save(
        self,
        parent_attrs: Mapping[str, Any],
        child_groups: Iterable[ChildGroupInput] = (),
        applicant_id: Optional[str] = None,
    ) -> SaveResult:
        """Validate and persist one applicant submission.

        Returns a failed `SaveResult` carrying every field error and the echoed
        submission when validation fails; nothing is written in that case.
        Raises `NotFoundError` when the applicant or a referenced child does
        not exist, and `PersistenceError` when the store rejects the commit.
        """
        creating = applicant_id is None
        groups = _coerce_groups(child_groups)

        # Collecting
        plan = plan_child_actions(groups, reject_all_blank=self.reject_all_blank)
        errors: List[FieldError] = validate_parent(parent_attrs) + plan.errors
        name = str(parent_attrs.get("name") or "")

        # Validating
        target_id = applicant_id or repo.new_id()
        try:
            with self.engine.begin() as conn:
                existing_ids = self._check_references(conn, applicant_id, plan)
                if errors:
                    logger.info(
                        "applicant.save.rolled_back applicant_id=%s errors=%s",
                        applicant_id,
                        len(errors),
                    )
                    return SaveResult(
                        status="failure",
                        message=messages.errors_prohibited(len(errors)),
                        phase=SavePhase.ROLLED_BACK,
                        errors=errors,
                        submitted=submitted_shape(parent_attrs, groups),
                    )
                self._apply(conn, target_id, name, plan, existing_ids, creating=creating)
        except SQLAlchemyError as e:
            logger.error("applicant.save.persistence_failed applicant_id=%s", target_id, exc_info=True)
            raise PersistenceError(f"could not save applicant {target_id}") from e

        # Committed
        record = self.get(target_id)
        logger.info(
            "applicant.save.committed applicant_id=%s created=%s actions=%s",
            target_id,
            creating,
            len(plan.actions),
        )
        publish(APPLICANT_SAVED, {"applicant_id": target_id, "created": creating})
        return SaveResult(
            status="success",
            message=messages.CREATED if creating else messages.UPDATED,
            phase=SavePhase.COMMITTED,
            applicant=record,
        )

    def destroy(self, applicant_id: str) -> SaveResult:
        """Delete an applicant together with all of its references."""
        try:
            with self.engine.begin() as conn:
                removed = repo.delete_applicant(conn, applicant_id)
                if removed == 0:
                    raise NotFoundError("Applicant", applicant_id)
        except SQLAlchemyError as e:
            logger.error("applicant.destroy.persistence_failed applicant_id=%s", applicant_id, exc_info=True)
            raise PersistenceError(f"could not destroy applicant {applicant_id}") from e
        logger.info("applicant.destroy.committed applicant_id=%s", applicant_id)
        publish(APPLICANT_DESTROYED, {"applicant_id": applicant_id})
        return SaveResult(status="success", message=messages.DESTROYED, phase=SavePhase.COMMITTED)

    def _check_references(self, conn: Connection, applicant_id: Optional[str], plan: ChildPlan) -> List[str]:
        """Return the stored reference ids, raising for unknown ids in the plan."""
        if applicant_id is None:
            existing: List[str] = []
        else:
            if not repo.applicant_exists(conn, applicant_id):
                raise NotFoundError("Applicant", applicant_id)
            existing = repo.reference_ids_for(conn, applicant_id)
        known = set(existing)
        for child_id in plan.referenced_ids():
            if child_id not in known:
                raise NotFoundError("PersonalReference", child_id)
        return existing

    def _apply(
        self,
        conn: Connection,
        applicant_id: str,
        name: str,
        plan: ChildPlan,
        existing_ids: Sequence[str],
        *,
        creating: bool,
    ) -> None:
        now = repo.utc_timestamp()
        if creating:
            repo.insert_applicant(conn, applicant_id, name, now)
        else:
            repo.update_applicant(conn, applicant_id, name, now)

        for action in plan.deletions:
            repo.delete_reference(conn, applicant_id, action.child_id)

        mentioned = set(plan.referenced_ids())
        untouched = [rid for rid in existing_ids if rid not in mentioned]
        position = 0
        for rid in untouched:
            repo.set_reference_position(conn, applicant_id, rid, position)
            position += 1
        for action in plan.survivors:
            if isinstance(action, CreateChild):
                repo.insert_reference(
                    conn, applicant_id, repo.new_id(), action.name, action.email_address, position, now
                )
            elif isinstance(action, UpdateChild):
                repo.update_reference(
                    conn, applicant_id, action.child_id, action.name, action.email_address, position, now
                )
            position += 1


__all__ = ["ApplicantAggregate", "submitted_shape"]
