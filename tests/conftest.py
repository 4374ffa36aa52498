import os
import sys
from dataclasses import dataclass
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")
os.environ.setdefault("NOTIFICATION_DISPATCH", "background")
sys.path.append(str(Path(__file__).resolve().parents[1]))

from lab_booking.core.rate_limiter import rate_limiter
from lab_booking.core.security import create_access_token, get_password_hash
from lab_booking.db.base import Base
from lab_booking.db.models import LabTest, TestType, User, UserRole
from lab_booking.db.session import get_db
from lab_booking.domain.actor import Actor
from lab_booking.main import app
from lab_booking.services.email_service import EmailResult, get_notifier

TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "StrongPass123!"


@lru_cache
def _hashed_test_password() -> str:
    return get_password_hash(TEST_PASSWORD)


@dataclass
class SentEmail:
    to_email: str
    subject: str
    body_html: str


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[SentEmail] = []
        self.fail_with: Exception | None = None

    def send(self, to_email: str, subject: str, body_html: str) -> EmailResult:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(SentEmail(to_email=to_email, subject=subject, body_html=body_html))
        return EmailResult(success=True, message_id=f"test-{len(self.sent)}")


@pytest.fixture(autouse=True)
def reset_database() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    rate_limiter.reset()


@pytest.fixture()
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def client(notifier) -> TestClient:
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(db_session):
    def _make_user(
        email: str = "patient@example.com",
        role: UserRole = UserRole.USER,
        name: str = "Test Patient",
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email,
            name=name,
            phone="9876543210",
            hashed_password=_hashed_test_password(),
            role=role.value,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def make_lab_test(db_session):
    def _make_lab_test(
        name: str = "Complete Blood Count",
        price: str = "500.00",
        category: str = "Blood",
        test_type: TestType = TestType.CLINIC_TEST,
        is_active: bool = True,
    ) -> LabTest:
        test = LabTest(
            name=name,
            description=f"{name} panel",
            category=category,
            price=Decimal(price),
            test_type=test_type.value,
            is_active=is_active,
        )
        db_session.add(test)
        db_session.commit()
        db_session.refresh(test)
        return test

    return _make_lab_test


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=user.role, email=user.email, name=user.name)


def bearer_headers(user: User) -> dict[str, str]:
    token = create_access_token(subject=user.id, extra_claims={"role": user.role, "email": user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def patient(make_user) -> User:
    return make_user()


@pytest.fixture()
def admin(make_user) -> User:
    return make_user(email="admin@example.com", role=UserRole.ADMIN, name="Lab Admin")


@pytest.fixture()
def patient_headers(patient) -> dict[str, str]:
    return bearer_headers(patient)


@pytest.fixture()
def admin_headers(admin) -> dict[str, str]:
    return bearer_headers(admin)


@pytest.fixture()
def auth_headers():
    return bearer_headers


@pytest.fixture()
def as_actor():
    return actor_for
