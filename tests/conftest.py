import os
import time
import uuid
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-supabase-jwt-secret"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["FRONTEND_URL"] = "http://localhost:3000"

from fastapi.testclient import TestClient
from jose import jwt

from minutemate.database import Base, get_db
from minutemate.main import app
from minutemate.models import UserProfile
from minutemate.services.linkedin_extractor import get_linkedin_extractor
from minutemate.services.supabase_service import get_supabase_service

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]

# SQLite in-memory database configuration
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeSupabase:
    """Stands in for SupabaseService; records calls and serves canned responses"""

    def __init__(self):
        self.calls = []
        self.files = {}
        self.removed = []
        self.sign_up_error = None
        self.sign_in_error = None
        self.resend_error = None
        self.verify_error = None
        self.upload_error = None
        self.email_confirmed = True
        self.user_id = str(uuid.uuid4())

    def _user(self, email=None):
        return SimpleNamespace(
            id=self.user_id,
            email=email,
            email_confirmed_at="2026-01-01T00:00:00Z" if self.email_confirmed else None,
        )

    def sign_up(self, email, password, metadata, redirect_to):
        self.calls.append(("sign_up", email, metadata, redirect_to))
        if self.sign_up_error:
            raise self.sign_up_error
        return SimpleNamespace(user=self._user(email), session=None)

    def sign_in(self, email, password):
        self.calls.append(("sign_in", email))
        if self.sign_in_error:
            raise self.sign_in_error
        session = SimpleNamespace(access_token="access", refresh_token="refresh", expires_in=3600)
        return SimpleNamespace(user=self._user(email), session=session)

    def resend_confirmation(self, email, redirect_to):
        self.calls.append(("resend", email, redirect_to))
        if self.resend_error:
            raise self.resend_error

    def verify_email(self, token_hash, otp_type="email"):
        self.calls.append(("verify", token_hash, otp_type))
        if self.verify_error:
            raise self.verify_error
        return SimpleNamespace(user=self._user(), session=None)

    def get_user(self, user_id):
        return self._user()

    def upload_file(self, bucket, path, content, content_type, upsert=False):
        if self.upload_error:
            raise self.upload_error
        self.files[(bucket, path)] = content
        return path

    def remove_files(self, bucket, paths):
        for path in paths:
            self.removed.append((bucket, path))
            self.files.pop((bucket, path), None)

    def get_public_url(self, bucket, path):
        return f"https://project.supabase.co/storage/v1/object/public/{bucket}/{path}"

    def download_file(self, bucket, path):
        if (bucket, path) not in self.files:
            raise RuntimeError("Object not found")
        return self.files[(bucket, path)]


class FakeChatCompletions:
    def __init__(self):
        self.content = "{}"
        self.error = None
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self):
        self.completions = FakeChatCompletions()
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema and session for each test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def fake_supabase():
    return FakeSupabase()


@pytest.fixture(scope="function")
def fake_openai():
    return FakeOpenAI()


@pytest.fixture(scope="function")
def client(db_session, fake_supabase, fake_openai):
    """TestClient wired to the test session and fake external services"""
    from minutemate.services.linkedin_extractor import LinkedInExtractor

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_supabase_service] = lambda: fake_supabase
    app.dependency_overrides[get_linkedin_extractor] = lambda: LinkedInExtractor(client=fake_openai)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(db_session, user_type="expert", step=None, **fields):
    is_expert = user_type == "expert"
    user = UserProfile(
        id=str(uuid.uuid4()),
        first_name="Ada",
        last_name="Lovelace",
        email=f"ada-{uuid.uuid4().hex[:8]}@example.com",
        user_type=user_type,
        onboarding_completed=not is_expert,
        onboarding_step=(step or 1) if is_expert else None,
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def expert_user(db_session):
    return make_user(db_session, "expert")


@pytest.fixture(scope="function")
def client_user(db_session):
    return make_user(db_session, "client")


def make_token(user_id, email=None, user_metadata=None, expires_in=3600, secret=JWT_SECRET):
    now = int(time.time())
    payload = {
        "sub": user_id,
        "aud": "authenticated",
        "email": email,
        "user_metadata": user_metadata or {},
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture(scope="function")
def auth_headers():
    """Helper fixture building Bearer headers for a user"""

    def _auth_headers(user):
        return {"Authorization": f"Bearer {make_token(user.id, user.email)}"}

    return _auth_headers
