"""Applicant resource routes.

List, show, new/edit form views, create, update and destroy. Handlers only
translate between HTTP and `ApplicantAggregate`; validation, persistence and
form rebuilding live in `applicant_service.logic`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from applicant_service.config import AppConfig
from applicant_service.logic.aggregate import ApplicantAggregate
from applicant_service.logic.errors import ValidationError
from applicant_service.logic.form_editor import NestedCollectionEditor
from applicant_service.models.applicant_form import ApplicantForm
from applicant_service.models.save_result import SaveResult

router = APIRouter()
logger = logging.getLogger(__name__)

INDEX_HEADING = "Applicants"
NEW_HEADING = "New applicant"
EDIT_HEADING = "Editing applicant"
CREATE_LABEL = "Create Applicant"
UPDATE_LABEL = "Update Applicant"


def get_aggregate(request: Request) -> ApplicantAggregate:
    return request.app.state.aggregate


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def _applicant_path(request: Request, applicant_id: str) -> str:
    return str(request.url_for("show_applicant", applicant_id=applicant_id).path)


def _failure_response(
    result: SaveResult,
    *,
    heading: str,
    submit_label: str,
    applicant_id: Optional[str] = None,
) -> JSONResponse:
    error = ValidationError(result.errors)
    logger.info("applicant.form.rerender code=%s errors=%s", error.code, len(error.errors))
    editor = NestedCollectionEditor.from_submitted(result.submitted or {})
    body: Dict[str, Any] = result.to_dict()
    body["code"] = error.code
    if applicant_id is not None:
        body["applicant_id"] = applicant_id
    body["form"] = editor.to_view(heading=heading, submit_label=submit_label)
    return JSONResponse(body, status_code=error.status)


@router.get("/applicants", summary="List applicants")
def list_applicants(aggregate: ApplicantAggregate = Depends(get_aggregate)):
    return {
        "heading": INDEX_HEADING,
        "applicants": [a.to_dict() for a in aggregate.list_all()],
    }


@router.get("/applicants/new", summary="Blank applicant form")
def new_applicant(config: AppConfig = Depends(get_config)):
    editor = NestedCollectionEditor.for_new(config.forms.initial_blocks)
    return {"form": editor.to_view(heading=NEW_HEADING, submit_label=CREATE_LABEL)}


@router.get("/applicants/{applicant_id}", name="show_applicant", summary="Show an applicant")
def show_applicant(applicant_id: str, aggregate: ApplicantAggregate = Depends(get_aggregate)):
    return {"applicant": aggregate.get(applicant_id).to_dict()}


@router.get("/applicants/{applicant_id}/edit", summary="Applicant form pre-populated for editing")
def edit_applicant(applicant_id: str, aggregate: ApplicantAggregate = Depends(get_aggregate)):
    applicant = aggregate.get(applicant_id)
    editor = NestedCollectionEditor.for_edit(applicant)
    return {
        "applicant_id": applicant.applicant_id,
        "form": editor.to_view(heading=EDIT_HEADING, submit_label=UPDATE_LABEL),
    }


@router.post("/applicants", summary="Create an applicant with its personal references")
def create_applicant(
    payload: ApplicantForm,
    request: Request,
    aggregate: ApplicantAggregate = Depends(get_aggregate),
):
    attrs = payload.applicant
    result = aggregate.save(attrs.parent_attrs(), attrs.child_groups())
    if not result.ok:
        return _failure_response(result, heading=NEW_HEADING, submit_label=CREATE_LABEL)
    location = _applicant_path(request, result.applicant.applicant_id)
    body = result.to_dict()
    body["location"] = location
    return JSONResponse(body, status_code=201, headers={"Location": location})


@router.patch("/applicants/{applicant_id}", summary="Update an applicant and its personal references")
def update_applicant(
    applicant_id: str,
    payload: ApplicantForm,
    request: Request,
    aggregate: ApplicantAggregate = Depends(get_aggregate),
):
    attrs = payload.applicant
    result = aggregate.save(attrs.parent_attrs(), attrs.child_groups(), applicant_id=applicant_id)
    if not result.ok:
        return _failure_response(
            result, heading=EDIT_HEADING, submit_label=UPDATE_LABEL, applicant_id=applicant_id
        )
    body = result.to_dict()
    body["location"] = _applicant_path(request, applicant_id)
    return JSONResponse(body, status_code=200)


@router.delete("/applicants/{applicant_id}", summary="Destroy an applicant and its personal references")
def destroy_applicant(
    applicant_id: str,
    request: Request,
    aggregate: ApplicantAggregate = Depends(get_aggregate),
):
    result = aggregate.destroy(applicant_id)
    body = result.to_dict()
    body["location"] = str(request.url_for("list_applicants").path)
    return JSONResponse(body, status_code=200)


__all__ = [
    "router",
    "list_applicants",
    "new_applicant",
    "show_applicant",
    "edit_applicant",
    "create_applicant",
    "update_applicant",
    "destroy_applicant",
]
