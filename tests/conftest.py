import os
import tempfile

_tmp = tempfile.mkdtemp(prefix="payfam-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_tmp}/payfam.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["AUDIT_LOG_DIR"] = os.path.join(_tmp, "logs")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from payfam.db.base import engine, SessionLocal, get_db
from payfam.models import Base, UserRoleEnum
from payfam.main import app
from payfam.services.auth import create_user, create_access_token_for_user
from payfam.services.member import create_member


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_member(db):
    def _make(name="Ahmed Khan", phone_number="+923001234567", monthly_fee=Decimal("5000"), **fields):
        return create_member(db, name=name, phone_number=phone_number, monthly_fee=monthly_fee, **fields)
    return _make


@pytest.fixture
def member(make_member):
    return make_member(joining_date=date(2024, 1, 1))


def _auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token_for_user(user)}"}


@pytest.fixture
def admin_user(db):
    return create_user(db, email="admin@example.com", password="secret123", full_name="Admin", role=UserRoleEnum.ADMIN)


@pytest.fixture
def manager_user(db):
    return create_user(db, email="manager@example.com", password="secret123", full_name="Manager", role=UserRoleEnum.MANAGER)


@pytest.fixture
def admin_headers(admin_user):
    return _auth_headers(admin_user)


@pytest.fixture
def manager_headers(manager_user):
    return _auth_headers(manager_user)


@pytest.fixture
def auth_headers():
    return _auth_headers
