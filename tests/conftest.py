import os
import sys
import tempfile
import contextlib
import uuid

# --- ensure project root is importable ---
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# --- point the app at a throwaway database before it reads its config ---
if os.getenv("TEST_DATABASE_URL"):
    TEST_DB_URL = os.environ["TEST_DATABASE_URL"]
    _TEST_DB_PATH = None
else:
    _fd, _TEST_DB_PATH = tempfile.mkstemp(prefix="fitsync_test_", suffix=".db")
    os.close(_fd)
    TEST_DB_URL = f"sqlite:///{_TEST_DB_PATH}"
os.environ["DATABASE_URL"] = TEST_DB_URL

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session

from fitsync.main import app
from fitsync.db import create_db_engine, get_session as prod_get_session


@pytest.fixture(scope="session")
def _test_db_url():
    yield TEST_DB_URL
    if _TEST_DB_PATH:
        with contextlib.suppress(FileNotFoundError):
            os.remove(_TEST_DB_PATH)


@pytest.fixture(scope="session")
def _engine(_test_db_url):
    engine = create_db_engine(_test_db_url)
    # Import models to register metadata, then create tables
    from fitsync import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(_engine):
    with Session(_engine) as s:
        yield s


@pytest.fixture
def client(db, _engine):
    # Override the app's DB session dependency to use the test engine
    def _get_session_override():
        with Session(_engine) as s:
            yield s

    app.dependency_overrides[prod_get_session] = _get_session_override
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


def signup(client, email=None, password="secret123", name=None):
    """Register a fresh account; returns (user, headers)."""
    body = {"email": email or unique_email(), "password": password}
    if name:
        body["name"] = name
    r = client.post("/auth/signup", json=body)
    assert r.status_code == 201, r.text
    data = r.json()["data"]
    return data["user"], {"Authorization": f"Bearer {data['token']}"}


@pytest.fixture
def auth_headers(client):
    _, headers = signup(client)
    return headers
