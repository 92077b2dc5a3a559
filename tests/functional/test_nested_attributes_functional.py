"""Functional tests for child group classification and payload parsing."""

from __future__ import annotations

import pytest

from applicant_service.logic import messages
from applicant_service.logic.nested_attributes import (
    CreateChild,
    DeleteChild,
    UpdateChild,
    classify_group,
    plan_child_actions,
    validate_parent,
)
from applicant_service.models.applicant_form import ApplicantForm, PersonalReferenceAttributes


def _group(**kw) -> PersonalReferenceAttributes:
    return PersonalReferenceAttributes.model_validate(kw)


def test_new_group_becomes_create():
    action, error = classify_group(0, _group(name="Friend", email_address="friend@example.com"))
    assert error is None
    assert action == CreateChild(position=0, name="Friend", email_address="friend@example.com")


def test_existing_group_becomes_update():
    action, error = classify_group(2, _group(id="abc", name="Friend", email_address=""))
    assert error is None
    assert action == UpdateChild(position=2, child_id="abc", name="Friend", email_address="")


def test_existing_group_marked_for_destruction_is_deleted_without_validation():
    action, error = classify_group(1, _group(id="abc", name="", email_address="", _destroy=True))
    assert error is None
    assert action == DeleteChild(position=1, child_id="abc")


def test_new_group_marked_for_destruction_is_ignored():
    action, error = classify_group(1, _group(name="", email_address="enemy@example.com", _destroy="1"))
    assert action is None
    assert error is None


def test_empty_name_is_reported_with_position():
    action, error = classify_group(3, _group(name="  ", email_address="friend@example.com"))
    assert action is None
    assert error is not None
    assert error.field == "personal_references[3].name"
    assert error.message == messages.REFERENCE_NAME_BLANK


def test_all_blank_new_group_ignored_only_when_rejecting_blank():
    blank = _group(name="", email_address="")
    assert classify_group(0, blank, reject_all_blank=True) == (None, None)
    action, error = classify_group(0, blank, reject_all_blank=False)
    assert action is None
    assert error is not None


def test_all_blank_existing_group_is_still_validated():
    action, error = classify_group(0, _group(id="abc", name="", email_address=""))
    assert action is None
    assert error is not None


def test_plan_collects_every_error_and_keeps_order():
    plan = plan_child_actions(
        [
            _group(name="", email_address="a@example.com"),
            _group(name="Kept", email_address="b@example.com"),
            _group(name="", email_address="c@example.com"),
            _group(id="old", _destroy=True),
            _group(name="Gone", _destroy=True),
        ]
    )
    assert [e.field for e in plan.errors] == ["personal_references[0].name", "personal_references[2].name"]
    assert plan.actions == [
        CreateChild(position=1, name="Kept", email_address="b@example.com"),
        DeleteChild(position=3, child_id="old"),
    ]
    assert plan.ignored == [4]
    assert plan.referenced_ids() == ["old"]
    assert [a.position for a in plan.survivors] == [1]


def test_repeated_id_is_rejected_not_applied_twice():
    plan = plan_child_actions(
        [
            _group(id="old", _destroy=True),
            _group(id="old", name="Renamed", email_address="r@example.com"),
        ]
    )
    assert plan.actions == [DeleteChild(position=0, child_id="old")]
    assert [(e.field, e.message) for e in plan.errors] == [
        ("personal_references[1].id", messages.REFERENCE_ID_REPEATED)
    ]


def test_validate_parent_requires_name():
    assert validate_parent({"name": "New Applicant"}) == []
    errors = validate_parent({"name": ""})
    assert [e.message for e in errors] == [messages.NAME_BLANK]
    assert validate_parent({}) == errors


@pytest.mark.parametrize("raw, expected", [("1", True), ("0", False), ("true", True), ("false", False), ("", False), (None, False), (True, True)])
def test_destroy_flag_accepts_form_values(raw, expected):
    assert _group(name="x", _destroy=raw).destroy is expected


def test_index_keyed_groups_keep_submission_order():
    form = ApplicantForm.model_validate(
        {
            "applicant": {
                "name": "New Applicant",
                "personal_references_attributes": {
                    "0": {"name": "Friend", "email_address": "friend@example.com"},
                    "1697040000000": {"name": "Enemy", "email_address": "enemy@example.com", "_destroy": "1"},
                },
            }
        }
    )
    groups = form.applicant.child_groups()
    assert [g.name for g in groups] == ["Friend", "Enemy"]
    assert [g.destroy for g in groups] == [False, True]


def test_list_groups_and_blank_ids():
    form = ApplicantForm.model_validate(
        {"applicant": {"name": "A", "personal_references_attributes": [{"id": "", "name": "Friend"}]}}
    )
    (group,) = form.applicant.child_groups()
    assert group.id is None
    assert group.as_submitted() == {"name": "Friend", "email_address": "", "_destroy": False}
