"""Functional HTTP tests for the applicant routes.

Runs the FastAPI app in-process with TestClient against the session SQLite
database. Response bodies are validated against JSON Schemas for the save
result, the form view and problem+json errors.
"""

from __future__ import annotations

from jsonschema import Draft202012Validator

from applicant_service.http.problem import PROBLEM_MEDIA_TYPE

BASE = "/api/v1/applicants"

FIELD_ERROR_SCHEMA = {
    "type": "object",
    "required": ["field", "message"],
    "properties": {"field": {"type": "string"}, "message": {"type": "string"}},
}

BLOCK_SCHEMA = {
    "type": "object",
    "required": ["index", "name", "email_address", "_destroy", "hidden"],
    "properties": {
        "index": {"type": "integer"},
        "id": {"type": "string"},
        "name": {"type": "string"},
        "email_address": {"type": "string"},
        "_destroy": {"type": "boolean"},
        "hidden": {"type": "boolean"},
    },
}

FORM_SCHEMA = {
    "type": "object",
    "required": ["heading", "submit_label", "name", "blocks", "remove_button_count"],
    "properties": {
        "heading": {"type": "string"},
        "submit_label": {"type": "string"},
        "name": {"type": "string"},
        "remove_button_count": {"type": "integer", "minimum": 0},
        "blocks": {"type": "array", "items": BLOCK_SCHEMA},
    },
}

SAVE_RESULT_SCHEMA = {
    "type": "object",
    "required": ["status", "message", "phase", "errors"],
    "properties": {
        "status": {"enum": ["success", "failure"]},
        "message": {"type": "string"},
        "phase": {"enum": ["committed", "rolled_back"]},
        "errors": {"type": "array", "items": FIELD_ERROR_SCHEMA},
        "code": {"const": "VALIDATION_FAILED"},
        "applicant_id": {"type": "string"},
        "form": FORM_SCHEMA,
    },
}

PROBLEM_SCHEMA = {
    "type": "object",
    "required": ["title", "status"],
    "properties": {"title": {"type": "string"}, "status": {"type": "integer"}, "code": {"type": "string"}},
}


def _validate(schema: dict, instance: dict) -> None:
    Draft202012Validator(schema).validate(instance)


def _body(name: str, groups) -> dict:
    return {"applicant": {"name": name, "personal_references_attributes": groups}}


def _create(client, name="Existing", groups=None):
    groups = groups if groups is not None else [{"name": "Friend", "email_address": "friend@example.com"}]
    resp = client.post(BASE, json=_body(name, groups))
    assert resp.status_code == 201, resp.text
    return resp.json()["applicant"]


def test_index_heading(client):
    resp = client.get(BASE)
    assert resp.status_code == 200
    assert resp.json() == {"heading": "Applicants", "applicants": []}


def test_new_form_view(client):
    resp = client.get(f"{BASE}/new")
    assert resp.status_code == 200
    form = resp.json()["form"]
    _validate(FORM_SCHEMA, form)
    assert form["submit_label"] == "Create Applicant"
    assert len(form["blocks"]) == 1


def test_create_with_nested_references(client):
    payload = {
        "applicant": {
            "name": "New Applicant",
            "personal_references_attributes": {
                "0": {"name": "Friend", "email_address": "friend@example.com"},
                "1": {"name": "Enemy", "email_address": "enemy@example.com", "_destroy": "0"},
            },
        }
    }
    resp = client.post(BASE, json=payload)

    assert resp.status_code == 201
    body = resp.json()
    _validate(SAVE_RESULT_SCHEMA, body)
    assert body["message"] == "Applicant was successfully created."
    assert resp.headers["Location"] == body["location"] == f"{BASE}/{body['applicant']['id']}"
    shown = client.get(body["location"]).json()["applicant"]
    assert [r["email_address"] for r in shown["personal_references"]] == ["friend@example.com", "enemy@example.com"]


def test_create_rejects_invalid_reference_and_rerenders(client):
    resp = client.post(
        BASE,
        json=_body(
            "New Applicant",
            [
                {"name": "", "email_address": "friend@example.com"},
                {"name": "Enemy", "email_address": "enemy@example.com", "_destroy": "1"},
            ],
        ),
    )

    assert resp.status_code == 422
    body = resp.json()
    _validate(SAVE_RESULT_SCHEMA, body)
    assert body["message"] == "1 error prohibited this applicant from being saved"
    form = body["form"]
    visible = [b for b in form["blocks"] if not b["hidden"]]
    assert [b["email_address"] for b in visible] == ["friend@example.com"]
    assert form["remove_button_count"] == 1
    assert client.get(BASE).json()["applicants"] == []


def test_edit_form_prepopulated(client):
    created = _create(client)
    resp = client.get(f"{BASE}/{created['id']}/edit")
    assert resp.status_code == 200
    form = resp.json()["form"]
    _validate(FORM_SCHEMA, form)
    assert form["submit_label"] == "Update Applicant"
    assert [(b["id"], b["email_address"]) for b in form["blocks"]] == [
        (created["personal_references"][0]["id"], "friend@example.com")
    ]


def test_update_destroys_marked_reference(client):
    created = _create(
        client,
        groups=[
            {"name": "Friend", "email_address": "friend@example.com"},
            {"name": "Enemy", "email_address": "enemy@example.com"},
        ],
    )
    friend, enemy = created["personal_references"]

    resp = client.patch(
        f"{BASE}/{created['id']}",
        json=_body("Existing", [dict(friend), dict(enemy, _destroy=True)]),
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Applicant was successfully updated."
    assert "enemy@example.com" not in resp.text
    shown = client.get(f"{BASE}/{created['id']}").text
    assert "enemy@example.com" not in shown
    assert "friend@example.com" in shown


def test_update_failure_rerenders_edit_form(client):
    created = _create(client)
    resp = client.patch(f"{BASE}/{created['id']}", json=_body("", []))
    assert resp.status_code == 422
    body = resp.json()
    _validate(SAVE_RESULT_SCHEMA, body)
    assert body["code"] == "VALIDATION_FAILED"
    assert body["form"]["heading"] == "Editing applicant"
    assert body["errors"] == [{"field": "name", "message": "Name can't be blank"}]

    edit_view = client.get(f"{BASE}/{created['id']}/edit").json()
    assert body["applicant_id"] == edit_view["applicant_id"] == created["id"]
    assert set(edit_view) <= set(body)


def test_destroy_applicant(client):
    created = _create(client)
    resp = client.delete(f"{BASE}/{created['id']}")
    assert resp.status_code == 200
    assert resp.json()["message"] == "Applicant was successfully destroyed."
    assert resp.json()["location"] == BASE

    missing = client.get(f"{BASE}/{created['id']}")
    assert missing.status_code == 404
    assert missing.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    _validate(PROBLEM_SCHEMA, missing.json())
    assert missing.json()["code"] == "NOT_FOUND"


def test_unknown_applicant_update_and_delete_are_404(client):
    assert client.patch(f"{BASE}/missing", json=_body("X", [])).status_code == 404
    assert client.delete(f"{BASE}/missing").status_code == 404


def test_malformed_body_is_problem_json(client):
    resp = client.post(BASE, json={"name": "no wrapper"})
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    body = resp.json()
    _validate(PROBLEM_SCHEMA, body)
    assert body["code"] == "REQUEST_BODY_INVALID"
    assert body["errors"]


def test_request_id_echoed_or_assigned(client):
    echoed = client.get(BASE, headers={"X-Request-Id": "abc-123"})
    assert echoed.headers["X-Request-Id"] == "abc-123"
    assigned = client.get(BASE)
    assert assigned.headers["X-Request-Id"]


def test_health(client):
    assert client.get("/api/v1/health").json() == {"status": "ok", "db": True}


def test_store_read_failure_is_persistence_problem(client, mocker):
    from sqlalchemy.exc import OperationalError

    from applicant_service.logic import repository_applicants as repo

    mocker.patch.object(
        repo,
        "list_applicants",
        side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
    )
    resp = client.get(BASE)

    assert resp.status_code == 500
    assert resp.headers["content-type"].startswith(PROBLEM_MEDIA_TYPE)
    _validate(PROBLEM_SCHEMA, resp.json())
    assert resp.json()["code"] == "PERSISTENCE_FAILED"
