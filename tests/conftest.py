from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from eventcrm.core.db import Base, get_db
from eventcrm.core.security import hash_password
from eventcrm.main import app
from eventcrm.models import User

PASSWORD = "pass1234"
PASSWORD_HASH = hash_password(PASSWORD)

USERS = {
    "admin@eventos.pt": "Admin",
    "coord@eventos.pt": "Coordenador",
    "material@eventos.pt": "Gestor de Material",
    "finance@eventos.pt": "Financeiro",
    "tech@eventos.pt": "Técnico",
    "sales@eventos.pt": "Comercial",
    "norole@eventos.pt": None,
}


@pytest.fixture()
def session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    db.add_all(
        [User(email=email, full_name=email.split("@")[0].title(), password_hash=PASSWORD_HASH, role=role) for email, role in USERS.items()]
    )
    db.commit()
    db.close()
    return TestingSessionLocal


@pytest.fixture()
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory) -> Generator[TestClient, None, None]:
    def override_get_db():
        test_db = session_factory()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()

