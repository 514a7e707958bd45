import os
import tempfile

# Settings are read once on first import, so the environment has to be in place before the app is imported
os.environ["HTTPS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["USE_REDIS"] = "false"
os.environ["DB_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["LOGS_DIR"] = tempfile.mkdtemp(prefix="tutorhub-test-logs-")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from tutorhub.config import Settings
from tutorhub.credentials import DemoCredentialStore, get_credential_store
from tutorhub.database.database import Base, build_engine, get_db, init_db, utcnow
from tutorhub.main import app

STUDENT = {"email": "student@tutorhub.com", "password": "password123"}
ADMIN = {"email": "admin@tutorhub.com", "password": "admin123"}
OTHER_STUDENT = {"email": "other.student@example.com", "password": "other-pass"}


@pytest.fixture
def engine():
    # Fresh in-memory database for every test
    engine = build_engine("sqlite://")
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def TestingSessionLocal(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def override_get_db(TestingSessionLocal):
    def _get_test_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def db_session(TestingSessionLocal):
    db = TestingSessionLocal()
    yield db
    db.close()


def login(client: TestClient, credentials: dict):
    response = client.post("/api/auth/login", json=credentials)
    assert response.status_code == 200, response.text
    return response.json()["user"]


@pytest.fixture
def client():
    """Anonymous client"""
    return TestClient(app)


@pytest.fixture
def student_client():
    client = TestClient(app)
    client.user = login(client, STUDENT)
    return client


@pytest.fixture
def admin_client():
    client = TestClient(app)
    client.user = login(client, ADMIN)
    return client


@pytest.fixture
def other_student_client():
    """A second student, accepted by swapping in a demo store with different credentials"""
    settings = Settings(
        demo_student_email=OTHER_STUDENT["email"],
        demo_student_password=OTHER_STUDENT["password"],
    )
    app.dependency_overrides[get_credential_store] = lambda: DemoCredentialStore(settings)
    client = TestClient(app)
    try:
        client.user = login(client, OTHER_STUDENT)
    finally:
        app.dependency_overrides.pop(get_credential_store, None)
    return client


def tutor_payload(**overrides):
    payload = {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "specialty": "Mathematics",
        "bio": "Analytical engines and calculus.",
        "hourlyRate": "45",
        "availability": "Mon-Fri 9:00-17:00",
    }
    payload.update(overrides)
    return payload


def session_payload(tutor_id: str, **overrides):
    payload = {
        "tutorId": tutor_id,
        "subject": "Calculus",
        "scheduledDate": (utcnow() + timedelta(days=2)).isoformat(),
        "duration": "60 minutes",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def tutor(admin_client):
    response = admin_client.post("/api/tutors", json=tutor_payload())
    assert response.status_code == 200, response.text
    return response.json()
