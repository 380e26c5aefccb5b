"""Shared fixtures.

The environment is configured before any project module is imported: the
database is an in-memory SQLite shared through a StaticPool, SMTP is left
unconfigured and the AI gateway is replaced by a scripted chat model.
"""

import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="mtss-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATA_DIR"] = _TMP_DIR
os.environ["STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["SMTP_HOST"] = ""
os.environ["AI_GATEWAY_API_KEY"] = ""

from typing import List, Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from langchain_core.messages import AIMessage  # noqa: E402

from api.routes.auth import create_access_token  # noqa: E402
from app import app  # noqa: E402
from core import dependencies  # noqa: E402
from core.database import SessionLocal, engine  # noqa: E402
from models.base import Base  # noqa: E402
from utils.ai_gateway import AIGateway  # noqa: E402
from utils.email_sender import EmailDeliveryError, EmailSender  # noqa: E402
from utils.storage import BlobStorage  # noqa: E402
from utils.user_manager import UserManager  # noqa: E402

# Cheapest cost factor bcrypt accepts
FAST_BCRYPT_ROUNDS = 4


class FakeChatModel:
    """Stands in for ChatOpenAI: returns scripted replies and records calls."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls = []

    def invoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else ""
        return AIMessage(content=content)


class RecordingEmailSender(EmailSender):
    """EmailSender that keeps messages in memory."""

    def __init__(self, fail: bool = False):
        super().__init__(host="smtp.test", sender="MTSS <test@mtss.local>")
        self.fail = fail
        self.sent = []

    def send(self, to: str, subject: str, html: str) -> bool:
        if self.fail:
            raise EmailDeliveryError("connection refused")
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_manager(db):
    return UserManager(db, bcrypt_rounds=FAST_BCRYPT_ROUNDS)


@pytest.fixture
def fake_llm():
    return FakeChatModel()


@pytest.fixture
def gateway(fake_llm):
    return AIGateway(llm=fake_llm)


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def blob_storage(tmp_path):
    return BlobStorage(root=tmp_path / "blobs")


@pytest.fixture
def client(gateway, email_sender, blob_storage):
    app.dependency_overrides[dependencies.get_ai_gateway] = lambda: gateway
    app.dependency_overrides[dependencies.get_email_sender] = lambda: email_sender
    app.dependency_overrides[dependencies.get_blob_storage] = lambda: blob_storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(user_manager):
    """Create an account and return (user, auth headers)."""

    def _make_user(email: str, role: str, is_verified: bool = True, full_name: str = None):
        user = user_manager.sign_up(
            email=email,
            password="password123",
            full_name=full_name or email.split("@")[0].title(),
            role=role,
            is_verified=is_verified,
        )
        token = create_access_token({"sub": user.user_id})
        return user, {"Authorization": f"Bearer {token}"}

    return _make_user


@pytest.fixture
def admin(make_user):
    return make_user("admin@school.example.com", "admin", full_name="Ada Admin")


@pytest.fixture
def teacher(make_user):
    return make_user("teacher@school.example.com", "teacher", full_name="Tom Teacher")


@pytest.fixture
def parent(make_user):
    return make_user("parent@school.example.com", "parent", full_name="Pat Parent")
