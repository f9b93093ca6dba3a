import re

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.core_settings import Settings, get_settings
from app.domain.catalog import load_catalog
from app.domain.models import Base
from app.infrastructure.db import get_db
from app.infrastructure.notifications import get_notifier
from app.infrastructure.payments import FakeGateway, get_payment_gateway

ADMIN_TOKEN = "admin-secret"


class RecordingNotifier:
    def __init__(self):
        self.emails = []
        self.sms = []

    def send_email(self, to, subject, body):
        self.emails.append((to, subject, body))

    def send_sms(self, phone, body):
        self.sms.append((phone, body))

    def last_code(self) -> str:
        body = (self.emails or self.sms)[-1][-1]
        return re.search(r"\d{6}", body).group(0)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ADMIN_TOKEN=ADMIN_TOKEN,
        PAYMENT_PROVIDER="fake",
        JWT_SECRET="test-secret",
        YOOKASSA_RETURN_URL="https://sello.test/thanks",
        SMTP_HOST=None,
        ORDER_ID_ATTEMPTS=3,
    )


@pytest.fixture
def catalog():
    return load_catalog()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(session_factory, settings, gateway, notifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_notifier] = lambda: notifier
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"x-admin-token": ADMIN_TOKEN}
