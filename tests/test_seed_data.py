from sqlmodel import Session

from app.core.config import settings
from app.services.administrator import AdministratorService
from seed_data import seed_administrator


def configure_seed(monkeypatch, email, password="seed-password-123"):
    monkeypatch.setattr(settings, "SEED_ADMIN_EMAIL", email)
    monkeypatch.setattr(settings, "SEED_ADMIN_PASSWORD", password)


def test_seeded_administrator_can_log_in(engine, client, monkeypatch):
    configure_seed(monkeypatch, "owner@example.com")

    administrator = seed_administrator(engine)

    assert administrator is not None
    resp = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "seed-password-123"})
    assert resp.status_code == 200

    wrong = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "nope"})
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Invalid credentials"


def test_seed_is_idempotent(engine, monkeypatch):
    configure_seed(monkeypatch, "owner@example.com")

    assert seed_administrator(engine) is not None
    assert seed_administrator(engine) is None
    with Session(engine) as session:
        assert AdministratorService(session).count() == 1


def test_seed_rejects_reserved_email_domain(engine, monkeypatch):
    configure_seed(monkeypatch, "admin@company.local")

    assert seed_administrator(engine) is None
    with Session(engine) as session:
        assert AdministratorService(session).count() == 0


def test_seed_rejects_short_password(engine, monkeypatch):
    configure_seed(monkeypatch, "owner@example.com", password="short")

    assert seed_administrator(engine) is None


def test_seed_requires_credentials(engine, monkeypatch):
    configure_seed(monkeypatch, None, password=None)

    assert seed_administrator(engine) is None
