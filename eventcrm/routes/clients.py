import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from eventcrm.core.db import get_db
from eventcrm.models import Client
from eventcrm.routes.common import validation_failed
from eventcrm.services.authz import CurrentUser, require_page
from eventcrm.services.clients import (
    ClientForm,
    ClientPatch,
    client_row,
    form_to_insert_payload,
    form_to_update_payload,
    row_to_form,
)
from eventcrm.services.forms import validate

logger = logging.getLogger(__name__)

PAGE = "/crm/clients"

router = APIRouter(prefix="/api/clients", tags=["clients"])


def _get_client(db: Session, client_id: int) -> Client:
    client = db.query(Client).filter(Client.id == client_id).first()
    if not client:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Client not found")
    return client


@router.get("")
def list_clients(ctx: CurrentUser = Depends(require_page(PAGE)), db: Session = Depends(get_db)):
    clients = db.query(Client).order_by(Client.name.asc()).all()
    return [client_row(c) for c in clients]


@router.post("", status_code=status.HTTP_201_CREATED)
def create_client(
    payload: dict = Body(...),
    ctx: CurrentUser = Depends(require_page(PAGE)),
    db: Session = Depends(get_db),
):
    outcome = validate(ClientForm, payload)
    if not outcome.ok:
        return validation_failed(outcome.errors)

    client = Client(**form_to_insert_payload(outcome.value))
    db.add(client)
    db.commit()
    db.refresh(client)
    logger.info("Client %s created by user %s", client.id, ctx.user.id)
    return client_row(client)


@router.get("/{client_id}")
def get_client(client_id: int, ctx: CurrentUser = Depends(require_page(PAGE)), db: Session = Depends(get_db)):
    return client_row(_get_client(db, client_id))


@router.get("/{client_id}/form")
def get_client_form(client_id: int, ctx: CurrentUser = Depends(require_page(PAGE)), db: Session = Depends(get_db)):
    return row_to_form(_get_client(db, client_id)).model_dump(by_alias=True, mode="json")


@router.patch("/{client_id}")
def update_client(
    client_id: int,
    payload: dict = Body(...),
    ctx: CurrentUser = Depends(require_page(PAGE)),
    db: Session = Depends(get_db),
):
    client = _get_client(db, client_id)
    outcome = validate(ClientPatch, payload)
    if not outcome.ok:
        return validation_failed(outcome.errors)

    changes = form_to_update_payload(outcome.value)
    for column, value in changes.items():
        setattr(client, column, value)
    db.commit()
    db.refresh(client)
    logger.info("Client %s updated by user %s (%s)", client.id, ctx.user.id, ", ".join(sorted(changes)) or "no changes")
    return client_row(client)
