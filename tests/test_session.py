import time

from itsdangerous import TimestampSigner

from eventcrm.core.config import get_settings
from eventcrm.core.session import issue_token, user_id_from_token
from eventcrm.models import User


def _token_issued_hours_ago(monkeypatch, user_id, hours):
    issued = int(time.time()) - hours * 60 * 60
    with monkeypatch.context() as m:
        m.setattr(TimestampSigner, "get_timestamp", lambda self: issued)
        return issue_token(user_id)


def test_token_carries_user_id():
    assert user_id_from_token(issue_token(7)) == 7


def test_token_expires_after_max_age(monkeypatch):
    assert get_settings().session_max_age == 8 * 60 * 60
    assert user_id_from_token(_token_issued_hours_ago(monkeypatch, 7, 1)) == 7
    assert user_id_from_token(_token_issued_hours_ago(monkeypatch, 7, 9)) is None
    assert user_id_from_token(_token_issued_hours_ago(monkeypatch, 7, 1), max_age=30 * 60) is None


def test_tampered_token_is_rejected():
    _, signed = issue_token(7).split(".", 1)
    forged = issue_token(8).split(".", 1)[0] + "." + signed
    assert user_id_from_token(forged) is None
    assert user_id_from_token("not-a-token") is None


def test_expired_cookie_is_anonymous(client, db, monkeypatch):
    admin = db.query(User).filter(User.email == "admin@eventos.pt").one()
    cookie = get_settings().session_cookie

    client.cookies.set(cookie, _token_issued_hours_ago(monkeypatch, admin.id, 9))
    assert client.get("/navigation").status_code == 401

    client.cookies.set(cookie, _token_issued_hours_ago(monkeypatch, admin.id, 1))
    assert client.get("/navigation").json()["role"] == "Admin"
