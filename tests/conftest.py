import os

# Settings are read at import time, so the environment must be ready first
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from app.main import app
from app.db.session import build_engine, create_db_and_tables, drop_db_and_tables, get_session
from app.services.administrator import AdministratorService
from app.services.auth import TokenIssuer

from tests.fixtures import ADMIN_EMAIL, ADMIN_PASSWORD


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    drop_db_and_tables(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def get_test_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = get_test_session
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def administrator(session):
    return AdministratorService(session).create(ADMIN_EMAIL, ADMIN_PASSWORD, "Ada", "Lovelace")


@pytest.fixture
def issuer():
    return TokenIssuer()


@pytest.fixture
def auth_headers(administrator, issuer):
    token = issuer.issue_access(administrator.to_claims())
    return {"Authorization": f"Bearer {token}"}
