from datetime import datetime, timedelta, timezone

import pytest

from app.application.verification import VerificationService
from app.domain.errors import (
    CodeExpired,
    CodeMismatch,
    CodeNotRequested,
    Conflict,
    UserNotFound,
    ValidationError,
)
from app.domain.models import User

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock(T0)


@pytest.fixture
def service(db, notifier, settings, clock):
    return VerificationService(db, notifier, settings, clock=clock, code_factory=lambda: "123456")


def test_request_code_creates_unverified_user(service, notifier):
    user = service.request_code(email="User@Example.com", full_name="Anna", city="Москва")
    assert user.email == "user@example.com"
    assert user.role == "buyer"
    assert user.is_verified is False
    assert user.verification_code == "123456"
    assert user.verification_expires_at == T0 + timedelta(minutes=10)
    assert notifier.emails[0][0] == "user@example.com"
    assert "123456" in notifier.emails[0][2]
    assert notifier.sms == []


def test_request_code_requires_contact(service):
    with pytest.raises(ValidationError):
        service.request_code(email="  ", phone=None)


def test_both_channels_are_used(service, notifier):
    service.request_code(email="a@example.com", phone="+79990000000", role="seller")
    assert len(notifier.emails) == 1
    assert notifier.sms[0][0] == "+79990000000"


def test_reissue_overwrites_same_identity(service, db):
    first = service.request_code(email="user@example.com", full_name="Old", role="seller")
    service.verify_code("123456", email="user@example.com")
    second = service.request_code(email="USER@example.com", full_name="New")
    assert second.id == first.id
    assert second.full_name == "New"
    assert second.role == "buyer"
    assert second.is_verified is False
    assert db.query(User).count() == 1


def test_phone_only_identity(service, db):
    first = service.request_code(phone=" +79991112233 ")
    second = service.request_code(phone="+79991112233", full_name="Ivan")
    assert first.id == second.id
    assert db.query(User).count() == 1


def test_phone_only_request_keeps_stored_email(service, db, notifier):
    first = service.request_code(email="anna@example.com", phone="+79990001122")
    second = service.request_code(phone="+79990001122")
    assert second.id == first.id
    assert second.email == "anna@example.com"
    assert len(notifier.emails) == 1
    third = service.request_code(email="anna@example.com")
    assert third.id == first.id
    assert third.phone == "+79990001122"
    assert db.query(User).count() == 1


def test_phone_owned_by_other_user_conflicts(service):
    service.request_code(email="a@example.com", phone="+7000")
    with pytest.raises(Conflict):
        service.request_code(email="b@example.com", phone="+7000")


def test_wrong_code(service):
    service.request_code(email="user@example.com")
    with pytest.raises(CodeMismatch):
        service.verify_code("654321", email="user@example.com")


def test_expired_code(service, clock):
    service.request_code(email="user@example.com")
    clock.now = T0 + timedelta(minutes=10, seconds=1)
    with pytest.raises(CodeExpired):
        service.verify_code("123456", email="user@example.com")


def test_code_is_single_use(service, clock):
    service.request_code(email="user@example.com")
    clock.now = T0 + timedelta(minutes=9)
    user = service.verify_code(" 123456 ", email="USER@example.com")
    assert user.is_verified is True
    assert user.verification_code is None
    assert user.verification_expires_at is None
    with pytest.raises(CodeNotRequested):
        service.verify_code("123456", email="user@example.com")


def test_verify_by_phone(service):
    service.request_code(phone="+79990001122")
    assert service.verify_code(123456, phone="+79990001122").is_verified is True


def test_unknown_user(service):
    with pytest.raises(UserNotFound):
        service.verify_code("123456", email="nobody@example.com")


def test_verify_requires_identity(service):
    with pytest.raises(ValidationError):
        service.verify_code("123456")


def test_code_flow_over_http(client, notifier):
    resp = client.post("/api/users/request-code", json={"fullName": "Anna", "email": "anna@example.com", "city": "Казань"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["ok"] is True
    assert data["role"] == "buyer"

    wrong = client.post("/api/users/verify-code", json={"email": "anna@example.com", "code": "000000"})
    assert wrong.status_code == 400
    assert wrong.json() == {"error": "Verification code does not match"}

    resp = client.post("/api/users/verify-code", json={"email": "anna@example.com", "code": notifier.last_code()})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user"]["isVerified"] is True
    assert body["user"]["id"] == data["userId"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {body['accessToken']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "anna@example.com"
    assert me.json()["fullName"] == "Anna"

    again = client.post("/api/users/verify-code", json={"email": "anna@example.com", "code": notifier.last_code()})
    assert again.status_code == 400
    assert again.json() == {"error": "No verification code was requested"}


def test_request_code_without_contact_over_http(client):
    resp = client.post("/api/users/request-code", json={"fullName": "Nobody"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Email or phone is required"}


def test_verify_unknown_user_over_http(client):
    resp = client.post("/api/users/verify-code", json={"phone": "+70000000000", "code": "123456"})
    assert resp.status_code == 404


@pytest.mark.parametrize("headers", [{}, {"Authorization": "Bearer nonsense"}, {"Authorization": "Token abc"}])
def test_me_requires_valid_token(client, headers):
    assert client.get("/api/users/me", headers=headers).status_code == 401
