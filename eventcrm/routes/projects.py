import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventcrm.core.config import get_settings
from eventcrm.core.db import get_db
from eventcrm.models import Client, Event
from eventcrm.routes.common import validation_failed
from eventcrm.services.authz import CurrentUser, require_page
from eventcrm.services.forms import FieldError, FormModel, validate
from eventcrm.services.pipeline import move_event, ordered_pipeline, tail_rank
from eventcrm.services.projects import (
    PipelineStatus,
    ProjectForm,
    event_row,
    event_row_to_form,
    form_to_event_update,
    merge_project_form,
    project_form_to_insert_payload,
)

logger = logging.getLogger(__name__)

PAGE = "/crm/pipeline"

router = APIRouter(prefix="/api", tags=["projects"])


class MoveRequest(FormModel):
    status: PipelineStatus
    after_id: int | None = None
    before_id: int | None = None


def _get_event(db: Session, event_id: int) -> Event:
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Project not found")
    return event


def _unknown_client(db: Session, client_id: int) -> bool:
    return db.query(Client).filter(Client.id == client_id).first() is None


@router.post("/projects", status_code=status.HTTP_201_CREATED)
def create_project(
    payload: dict = Body(...),
    ctx: CurrentUser = Depends(require_page(PAGE)),
    db: Session = Depends(get_db),
):
    outcome = validate(ProjectForm, payload)
    if not outcome.ok:
        return validation_failed(outcome.errors)
    form = outcome.value
    if _unknown_client(db, form.client_id):
        return validation_failed([FieldError(field="clientId", message="client not found")])

    event = Event(
        **project_form_to_insert_payload(form, get_settings().tzinfo),
        pipeline_rank=tail_rank(db, form.pipeline_status),
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    logger.info("Project %s created in %s by user %s", event.id, event.pipeline_status, ctx.user.id)
    return event_row(event)


@router.get("/projects/{event_id}/form")
def get_project_form(event_id: int, ctx: CurrentUser = Depends(require_page(PAGE)), db: Session = Depends(get_db)):
    return event_row_to_form(_get_event(db, event_id), get_settings().tzinfo).model_dump(by_alias=True, mode="json")


@router.patch("/projects/{event_id}")
def update_project(
    event_id: int,
    payload: dict = Body(...),
    ctx: CurrentUser = Depends(require_page(PAGE)),
    db: Session = Depends(get_db),
):
    tz = get_settings().tzinfo
    event = _get_event(db, event_id)
    outcome, sent = merge_project_form(event_row_to_form(event, tz), payload)
    if not outcome.ok:
        return validation_failed(outcome.errors)
    form = outcome.value
    if "client_id" in sent and _unknown_client(db, form.client_id):
        return validation_failed([FieldError(field="clientId", message="client not found")])

    changes = form_to_event_update(form, sent, tz)
    if changes.get("pipeline_status", event.pipeline_status) != event.pipeline_status:
        changes["pipeline_rank"] = tail_rank(db, form.pipeline_status)
    for column, value in changes.items():
        setattr(event, column, value)
    db.commit()
    db.refresh(event)
    logger.info("Project %s updated by user %s (%s)", event.id, ctx.user.id, ", ".join(sorted(changes)) or "no changes")
    return event_row(event)


@router.get("/pipeline")
def pipeline(ctx: CurrentUser = Depends(require_page(PAGE)), db: Session = Depends(get_db)):
    return {column.value: [event_row(e) for e in events] for column, events in ordered_pipeline(db).items()}


@router.post("/pipeline/{event_id}/move")
def move(
    event_id: int,
    body: MoveRequest,
    ctx: CurrentUser = Depends(require_page(PAGE)),
    db: Session = Depends(get_db),
):
    try:
        event = move_event(db, event_id, body.status, after_id=body.after_id, before_id=body.before_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    db.commit()
    db.refresh(event)
    return event_row(event)
