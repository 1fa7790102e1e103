"""Shared fixtures. Points the app at a throwaway SQLite file before it is imported."""
import os
import shutil
import tempfile

import pytest

_TMP_DIR = tempfile.mkdtemp(prefix="kbs-rental-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("SECRET_KEY", "test-only-secret-key")

from fastapi.testclient import TestClient  # noqa: E402

from app.core.security import get_password_hash  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.models import RentalRecord, ServiceRecord, User  # noqa: E402

STAFF_EMAIL = "staff@kbstractors.com"
STAFF_PASSWORD = "Tractor-Staff-2024"


@pytest.fixture(scope="session", autouse=True)
def _remove_test_database():
    yield
    engine.dispose()
    shutil.rmtree(_TMP_DIR, ignore_errors=True)


def _clear_records():
    db = SessionLocal()
    try:
        db.query(RentalRecord).delete()
        db.query(ServiceRecord).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        _clear_records()


@pytest.fixture
def client():
    from app.main import app

    with TestClient(app) as test_client:
        yield test_client
    _clear_records()


@pytest.fixture
def auth_client(client):
    session = SessionLocal()
    try:
        if not session.query(User).filter(User.email == STAFF_EMAIL).first():
            session.add(User(
                email=STAFF_EMAIL,
                name="Staff",
                hashed_password=get_password_hash(STAFF_PASSWORD),
            ))
            session.commit()
    finally:
        session.close()

    resp = client.post("/auth/login", json={"email": STAFF_EMAIL, "password": STAFF_PASSWORD})
    assert resp.status_code == 200, resp.text
    client.headers["Authorization"] = f"Bearer {resp.json()['access_token']}"
    return client
