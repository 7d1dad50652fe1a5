"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import os

# Settings are read at import time; configure before importing the app.
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RESET_PASSWORD_URL", "https://front.example.com/changepassword")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from clima.core.auth import get_auth_service  # noqa: E402
from clima.core.email_client import OutgoingEmail  # noqa: E402
from clima.core.errors import MailDeliveryError  # noqa: E402
from clima.database import get_session  # noqa: E402
from clima.main import app  # noqa: E402
from clima.repositories.user_repo import UserRepository  # noqa: E402
from clima.services.auth_service import AuthConfig, AuthService  # noqa: E402

RESET_URL = "https://front.example.com/changepassword"


class RecordingMailer:
    """Collects outgoing mail instead of delivering it."""

    def __init__(self) -> None:
        self.sent: list[OutgoingEmail] = []
        self.fail = False

    def send(self, message: OutgoingEmail) -> None:
        if self.fail:
            raise MailDeliveryError()
        self.sent.append(message)


class FakeClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def auth_config(mailer, clock) -> AuthConfig:
    return AuthConfig(
        secret="test-secret",
        mailer=mailer,
        reset_url=RESET_URL,
        clock=clock,
    )


@pytest.fixture()
def auth_service(auth_config) -> AuthService:
    return AuthService(UserRepository(), auth_config)


@pytest.fixture()
def client(engine, auth_service):
    """Test client bound to the in-memory database and the test AuthService."""

    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_auth_service] = lambda: auth_service
    yield TestClient(app)
    app.dependency_overrides.clear()
