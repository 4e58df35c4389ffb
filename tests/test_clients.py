import pytest

from eventcrm.models import Client
from eventcrm.services.clients import (
    ClientForm,
    ClientPatch,
    LifecycleStage,
    form_to_insert_payload,
    form_to_update_payload,
    row_to_form,
)
from eventcrm.services.forms import MappingError, validate

FULL_ROW = {
    "name": "Ana Costa",
    "company": "TechCorp Lda",
    "email": "ana@techcorp.pt",
    "phone": "351912345678",
    "nif": "123456789",
    "sector": "Eventos",
    "lifecycle_stage": "Oportunidade",
    "notes": "Cliente potencial",
}


def _login(client, email, password="pass1234"):
    response = client.post("/login", data={"email": email, "password": password}, follow_redirects=False)
    assert response.status_code == 303


def _client_count(session_factory):
    db = session_factory()
    try:
        return db.query(Client).count()
    finally:
        db.close()


def test_insert_payload_maps_and_normalizes_fields():
    form = ClientForm.model_validate(
        {
            "fullName": "João Silva",
            "company": "TechCorp Lda",
            "email": "joao@techcorp.pt",
            "phone": "+351 123 456 789",
            "nif": "123456789",
            "sector": "Tecnologia",
            "lifecycleStage": "Lead",
            "roleOrDepartment": "Diretor de TI",
            "notes": "Cliente potencial",
        }
    )

    assert form_to_insert_payload(form) == {
        "name": "João Silva",
        "company": "TechCorp Lda",
        "email": "joao@techcorp.pt",
        "phone": "351123456789",
        "nif": "123456789",
        "sector": "Tecnologia",
        "lifecycle_stage": "Lead",
        "notes": "Cliente potencial",
    }


def test_insert_payload_omits_empty_optionals_and_fills_stage():
    form = ClientForm.model_validate({"fullName": "Test User", "company": "", "email": "", "notes": "", "lifecycleStage": ""})
    assert form_to_insert_payload(form) == {"name": "Test User", "lifecycle_stage": "Lead"}


def test_unknown_and_ui_only_fields_never_reach_the_payload():
    form = ClientForm.model_validate({"fullName": "Test", "roleOrDepartment": "Compras", "jobTitle": "CEO", "id": 9})
    payload = form_to_insert_payload(form)
    assert set(payload) == {"name", "lifecycle_stage"}


def test_validation_collects_all_field_errors():
    outcome = validate(ClientForm, {"fullName": "", "email": "not-an-email", "lifecycleStage": "VIP", "nif": "9" * 51})
    assert not outcome.ok
    assert {e.field for e in outcome.errors} == {"fullName", "email", "lifecycleStage", "nif"}


def test_row_to_form_fills_empty_defaults():
    form = row_to_form({"id": 1, "name": "Test User", "company": None, "email": None, "phone": None, "lifecycle_stage": None})
    assert form.full_name == "Test User"
    assert form.company == ""
    assert form.email == ""
    assert form.phone == ""
    assert form.notes == ""
    assert form.role_or_department == ""
    assert form.lifecycle_stage is LifecycleStage.LEAD


def test_row_round_trip_reproduces_row():
    assert form_to_insert_payload(row_to_form(FULL_ROW)) == FULL_ROW


def test_round_trip_keeps_email_as_stored():
    row = {**FULL_ROW, "email": "Ana.Costa@TechCorp.PT"}
    assert form_to_insert_payload(row_to_form(row)) == row


def test_row_that_does_not_fit_the_form_is_a_mapping_error():
    with pytest.raises(MappingError):
        row_to_form({"id": 3, "name": None})
    with pytest.raises(MappingError):
        row_to_form({"id": 4, "name": "X", "lifecycle_stage": "Arquivado"})


def test_update_payload_only_contains_sent_fields():
    patch = ClientPatch.model_validate({"fullName": "João Santos", "phone": "+351 987 654 321"})
    assert form_to_update_payload(patch) == {"name": "João Santos", "phone": "351987654321"}
    assert form_to_update_payload(ClientPatch.model_validate({})) == {}


def test_update_payload_clears_blank_fields():
    patch = ClientPatch.model_validate({"company": "", "phone": "", "lifecycleStage": "", "roleOrDepartment": "x"})
    assert form_to_update_payload(patch) == {"company": None, "phone": None, "lifecycle_stage": "Lead"}


def test_update_cannot_clear_name():
    outcome = validate(ClientPatch, {"fullName": None})
    assert [e.field for e in outcome.errors] == ["fullName"]


def test_invalid_email_is_rejected_without_writing(client, session_factory):
    _login(client, "sales@eventos.pt")

    response = client.post("/api/clients", json={"fullName": "Bad Mail", "email": "not-an-email"})
    assert response.status_code == 422
    assert [e["field"] for e in response.json()["errors"]] == ["email"]
    assert _client_count(session_factory) == 0


def test_create_and_edit_client(client):
    _login(client, "sales@eventos.pt")

    created = client.post(
        "/api/clients",
        json={"fullName": "Festival Norte", "email": "geral@festivalnorte.pt", "phone": "+351 912-345 678", "roleOrDepartment": "Produção"},
    )
    assert created.status_code == 201
    row = created.json()
    assert row["name"] == "Festival Norte"
    assert row["phone"] == "351912345678"
    assert row["company"] is None
    assert row["lifecycle_stage"] == "Lead"

    form = client.get(f"/api/clients/{row['id']}/form").json()
    assert form["fullName"] == "Festival Norte"
    assert form["company"] == ""
    assert form["roleOrDepartment"] == ""

    updated = client.patch(f"/api/clients/{row['id']}", json={"company": "Norte Eventos", "lifecycleStage": "Cliente Ativo"})
    assert updated.status_code == 200
    assert updated.json()["company"] == "Norte Eventos"
    assert updated.json()["lifecycle_stage"] == "Cliente Ativo"
    assert updated.json()["email"] == "geral@festivalnorte.pt"

    listed = client.get("/api/clients").json()
    assert [c["name"] for c in listed] == ["Festival Norte"]


def test_missing_client_is_404(client):
    _login(client, "admin@eventos.pt")
    assert client.get("/api/clients/999").status_code == 404
    assert client.patch("/api/clients/999", json={"company": "X"}).status_code == 404


def test_client_api_requires_crm_access(client):
    assert client.get("/api/clients").status_code == 401

    _login(client, "tech@eventos.pt")
    assert client.get("/api/clients").status_code == 403
    assert client.post("/api/clients", json={"fullName": "Blocked"}).status_code == 403
