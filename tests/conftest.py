# tests/conftest.py
import os
import sys
import io
import pathlib
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# -------------------------------------------------------------------------------------------------
# Path & environment setup (must happen BEFORE importing the app)
# -------------------------------------------------------------------------------------------------

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Temp SQLite DB file for tests
TEST_DB_FILE = str(pathlib.Path(tempfile.gettempdir()) / "hr_round_test.sqlite")

os.environ["DATABASE_URL"] = f"sqlite:///{TEST_DB_FILE}"
os.environ["AI_PROVIDER"] = "stub"
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")
os.environ.setdefault("S3_BUCKET", "test-bucket")
os.environ.setdefault("S3_REGION", "us-east-1")
os.environ.setdefault("S3_ENDPOINT", "http://127.0.0.1:9000")
os.environ.setdefault("PRESIGNED_URL_EXPIRES", "900")
os.environ.setdefault("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("TEST_PLAINTEXT_PASSWORDS", "1")


# -------------------------------------------------------------------------------------------------
# Import app & modules AFTER env vars
# -------------------------------------------------------------------------------------------------
from hr_round.main import app
from hr_round.api import deps
from hr_round.ai import llm_client
from hr_round.db import models as m
from hr_round.db.session import Base
from hr_round.core import security

# -------------------------------------------------------------------------------------------------
# Test DB engine + session factory
# -------------------------------------------------------------------------------------------------
engine = create_engine(
    f"sqlite:///{TEST_DB_FILE}",
    connect_args={"check_same_thread": False},
    future=True,
)
TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture(scope="function", autouse=True)
def reset_db():
    """Drop + recreate DB before each test function to ensure isolation"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture(scope="function")
def db():
    """Yield a fresh DB session per test function."""
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def _override_get_db():
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


# Override the app's DB dependency
app.dependency_overrides[deps.get_db] = _override_get_db


# -------------------------------------------------------------------------------------------------
# ---- Fake S3 client (no network) ----
class _FakeS3:
    def __init__(self):
        self._store = {}

    def upload_fileobj(self, Fileobj, Bucket, Key, ExtraArgs=None):
        self._store[(Bucket, Key)] = Fileobj.read()

    def generate_presigned_url(self, ClientMethod, Params=None, ExpiresIn=3600):
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"


@pytest.fixture(scope="function")
def fake_s3(monkeypatch):
    """Every code path that asks for an S3 client gets this one."""
    import hr_round.api.media as media_mod

    fake = _FakeS3()
    monkeypatch.setattr(media_mod, "get_s3_client", lambda: fake)
    return fake


# -------------------------------------------------------------------------------------------------
# ---- Fake generative model ----
class FakeLLM:
    """
    Scripted replacement for llm_client.generate_text. Replies are queued per
    purpose; when a queue is empty the built-in stub output is used. Exceptions
    in a queue are raised instead of returned.
    """

    def __init__(self):
        self.replies = {}
        self.calls = []

    def queue(self, purpose, *replies):
        self.replies.setdefault(purpose, []).extend(replies)

    def __call__(self, prompt, purpose="text", model=None, timeout=None):
        self.calls.append((purpose, prompt))
        pending = self.replies.get(purpose)
        if pending:
            reply = pending.pop(0)
            if isinstance(reply, Exception):
                raise reply
            return reply
        return llm_client._stub_response(prompt, purpose)

    def purposes(self):
        return [p for p, _ in self.calls]


@pytest.fixture(scope="function")
def fake_llm(monkeypatch):
    fake = FakeLLM()
    monkeypatch.setattr(llm_client, "generate_text", fake)
    return fake


# -------------------------------------------------------------------------------------------------
# TestClient
# -------------------------------------------------------------------------------------------------
@pytest.fixture(scope="session")
def client():
    return TestClient(app)


# -------------------------------------------------------------------------------------------------
# Helpers: users and JWTs (real tokens, real auth dependency)
# -------------------------------------------------------------------------------------------------
def _make_user(db, email, password="secret123", resume=None):
    u = m.User(
        email=email,
        full_name=email.split("@")[0],
        hashed_password=security.get_password_hash(password),
        resume=resume,
        is_active=True,
        is_superuser=False,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture(scope="function")
def user_and_token(db, client):
    email = "candidate@example.com"
    pwd = "secret123"
    u = _make_user(db, email, pwd, resume="Five years building payment APIs in Python.")

    # exercise /auth/login_json to keep the flow realistic
    r = client.post("/auth/login_json", json={"email": email, "password": pwd})
    assert r.status_code == 200, r.text
    return u, r.json()["access_token"]


@pytest.fixture(scope="function")
def auth_headers(user_and_token):
    _, token = user_and_token
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def other_headers(db):
    u = _make_user(db, "someone.else@example.com")
    return {"Authorization": f"Bearer {security.create_access_token(subject=str(u.id))}"}


@pytest.fixture
def interview_payload():
    return {
        "job_position": "Backend Engineer",
        "job_description": "Build and run Python services for payments.",
        "job_experience": 3,
        "difficulty_level": "INTERMEDIATE",
        "total_questions": 2,
        "skills": ["Python", "SQL", " "],
    }


@pytest.fixture(scope="function")
def interview(client, auth_headers, fake_llm, interview_payload):
    """A created interview (JSON body of the create response)."""
    r = client.post("/hr-round", json=interview_payload, headers=auth_headers)
    assert r.status_code == 201, r.text
    return r.json()["hr_interview"]


@pytest.fixture
def audio_file():
    return io.BytesIO(b"RIFF....WAVEfmt fake audio bytes")
