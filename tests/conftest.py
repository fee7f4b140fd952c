"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Each test gets a fresh schema, and outbound
email is replaced by a recorder so nothing leaves the process.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backoffice.main import app
from backoffice.models import Base
from backoffice.models.base import get_db
from backoffice.models.enums import RoleTier
from backoffice.services.authorization import AuthorizationGate, Caller
from backoffice.services.email_service import get_email_sender
from backoffice.services.identity_provider import LocalIdentityProvider
from backoffice.services.permissions import full_permissions


# SQLite file database, no server needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class RecordingEmailSender:
    """Stands in for EmailSender; keeps every message it is handed."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.sent = []

    @property
    def configured(self) -> bool:
        return self.succeed

    def send(self, to: str, subject: str, body: str) -> bool:
        self.sent.append({"to": to, "subject": subject, "body": body})
        return self.succeed


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def outbox():
    return RecordingEmailSender()


@pytest.fixture
def client(db_session, outbox):
    """
    Provide a test client with the test database.

    get_db is overridden so the app uses the test session, and
    get_email_sender so emails land in the outbox fixture.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: outbox
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def identity_provider(db_session):
    return LocalIdentityProvider(db_session)


@pytest.fixture
def gate(db_session, identity_provider):
    return AuthorizationGate(db_session, identity_provider)


def make_caller(account_id="admin-1", name="Alice", role="Super Admin", tier=None, permissions=None):
    """A Caller for service tests that don't go through the gate."""
    account = {
        "id": account_id,
        "name": name,
        "email": f"{account_id}@test.com",
        "role": role,
        "status": "active",
        "permissions": permissions if permissions is not None else full_permissions(),
    }
    return Caller(
        id=account_id,
        account=account,
        tier=tier or RoleTier.from_legacy_name(role),
    )


@pytest.fixture
def caller_factory():
    return make_caller


# --- HTTP helpers ---

def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def login(client, email: str, password: str) -> str:
    response = client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.json()
    return response.json()["accessToken"]


@pytest.fixture
def admin_token(client):
    """Sign up the bootstrap account and return its token."""
    response = client.post("/signup", json={
        "email": "admin@test.com",
        "password": "admin-pass",
        "name": "Alice Admin",
        "role": "Super Admin",
    })
    assert response.status_code == 200, response.json()
    return login(client, "admin@test.com", "admin-pass")


@pytest.fixture
def make_staff(client, admin_token):
    """
    Factory: provision a staff account through the admin and
    return (account_id, token).
    """
    def _make(email, name="Sam Staff", role="Staff", permissions=None, password="staff-pass"):
        body = {
            "email": email,
            "password": password,
            "name": name,
            "role": role,
        }
        if permissions is not None:
            body["permissions"] = permissions
        response = client.post("/signup", json=body, headers=bearer(admin_token))
        assert response.status_code == 200, response.json()
        return response.json()["user"]["id"], login(client, email, password)

    return _make
