# tests/conftest.py
# Shared fixtures: in-memory MongoDB, controllable clock and a recording mailer

import os

# must be set before passlib builds its context
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import timedelta

import mongomock
import pytest
from fastapi.testclient import TestClient

from stylist.app_factory import create_app
from stylist.exceptions import EmailDeliveryError
from stylist.services.auth_service import AuthService
from stylist.services.user_store import UserStore
from stylist.utils.auth import TokenService
from stylist.utils.clock import truncate_to_millis, utcnow
from stylist.utils.config import Settings
from stylist.utils.db_setup import Database

JWT_SECRET = "test-secret"


class FakeClock:
    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = truncate_to_millis(self.now + timedelta(**kwargs))


class RecordingEmailService:
    def __init__(self):
        self.verification_emails = []
        self.reset_emails = []
        self.fail = False

    def send_verification_email(self, to_email, token):
        if self.fail:
            raise EmailDeliveryError("SMTP is down")
        self.verification_emails.append((to_email, token))

    def send_password_reset_email(self, to_email, token):
        if self.fail:
            raise EmailDeliveryError("SMTP is down")
        self.reset_emails.append((to_email, token))

    def last_verification_token(self, email):
        tokens = [token for to_email, token in self.verification_emails if to_email == email]
        return tokens[-1] if tokens else None


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("CLIENT_URL", "http://localhost:8080")
    for var in ("SMTP_HOST", "SMTP_USER", "SMTP_PASS", "EMAIL_FROM", "MONGO_DB_NAME"):
        monkeypatch.delenv(var, raising=False)
    return Settings()


@pytest.fixture
def database():
    db = Database("mongodb://localhost:27017", "stylist_test", client_factory=mongomock.MongoClient)
    yield db
    db.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def store(database, clock):
    return UserStore(database.users, clock=clock)


@pytest.fixture
def token_service(clock):
    return TokenService(JWT_SECRET, clock=clock)


@pytest.fixture
def auth_service(store, token_service, email_service, clock):
    return AuthService(store, token_service, email_service, clock=clock)


@pytest.fixture
def app(settings, database, email_service, clock):
    return create_app(settings, database=database, email_service=email_service, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def signup_payload(email="a@x.com", password="Secret123", **overrides):
    payload = {
        "fullName": "Amira Hassan",
        "email": email,
        "password": password,
        "confirmPassword": password,
        "country": "Egypt",
        "city": "Cairo",
        "brands": ["Haute Hijab"],
        "hijabStyle": "turban",
        "favoriteColors": ["olive", "sand"],
        "stylePersonality": ["minimal"],
    }
    payload.update(overrides)
    return payload


def auth_header(token):
    return {"Authorization": f"Bearer {token}"}
