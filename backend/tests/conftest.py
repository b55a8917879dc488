"""Pytest fixtures — per-test SQLite database, local object storage, zero-delay classifier."""
import os
import tempfile

# Required settings must exist before davaoclean.config is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("PUBLIC_API_KEY", "test-public-key")
os.environ.setdefault("MEDIA_ROOT", tempfile.mkdtemp(prefix="davaoclean-media-"))
os.environ.setdefault("CLASSIFIER_BACKEND", "stub")
os.environ.setdefault("CLASSIFIER_STUB_DELAY_SECONDS", "0")

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from davaoclean.database import Base, get_db  # noqa: E402
from davaoclean.main import app  # noqa: E402
from davaoclean.services.classifier_service import StubClassifier, get_classifier  # noqa: E402
from davaoclean.storage import LocalObjectStorage, get_storage  # noqa: E402

# Import all models so they register with Base.metadata
from davaoclean.models.profile import Profile, AuthSession  # noqa: E402,F401
from davaoclean.models.event import Event                   # noqa: E402,F401
from davaoclean.models.participant import Participant       # noqa: E402,F401
from davaoclean.models.upload import Upload                 # noqa: E402,F401

API_KEY = os.environ["PUBLIC_API_KEY"]


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session for direct assertions."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def storage(tmp_path):
    return LocalObjectStorage(tmp_path / "media", "http://testserver/media")


@pytest.fixture(scope="function")
def client(db_engine, storage):
    """TestClient with database, storage and classifier dependencies overridden."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_classifier] = lambda: StubClassifier(delay_seconds=0)
    with TestClient(app) as c:
        c.headers["apikey"] = API_KEY
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def sign_up(client: TestClient, email: str = "volunteer@example.com", password: str = "secret123") -> dict:
    """Helper — POST /api/auth/sign-up and return response JSON (token + profile)."""
    resp = client.post("/api/auth/sign-up", json={"email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()


def auth(user: dict) -> dict:
    """Authorization header for a signed-up user."""
    return {"Authorization": f"Bearer {user['access_token']}"}


def make_organizer(client: TestClient, email: str = "organizer@example.com") -> dict:
    """Helper — sign up and promote to organizer."""
    user = sign_up(client, email=email)
    resp = client.post("/api/profiles/me/become-organizer", headers=auth(user))
    assert resp.status_code == 200, resp.text
    user["profile"] = resp.json()
    return user


def create_test_event(
    client: TestClient,
    organizer: dict,
    title: str = "Bucana Beach Clean-up",
    event_date: str = "2024-06-01T08:00:00",
    location: str = "Bucana Beach",
    **extra,
) -> dict:
    """Helper — POST /api/events and return response JSON."""
    resp = client.post("/api/events/", headers=auth(organizer), json={
        "title": title,
        "description": extra.pop("description", "Bring gloves."),
        "location": location,
        "event_date": event_date,
        **extra,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def upload_photo(client: TestClient, event_id: str, user: dict, filename: str = "photo.jpg",
                 content_type: str = "image/jpeg", data: bytes = b"\xff\xd8\xff\xe0fake-jpeg"):
    """Helper — POST a photo to an event, returns the raw response."""
    return client.post(
        f"/api/events/{event_id}/uploads",
        headers=auth(user),
        files={"file": (filename, data, content_type)},
    )
