from datetime import datetime, timedelta, timezone

import pytest

from app.core_settings import get_settings
from app.domain.models import Order, OrderItem, Seller, User

ADMIN_ROUTES = [
    ("get", "/api/admin/orders", None),
    ("get", "/api/admin/orders/SO-100001", None),
    ("patch", "/api/admin/orders/SO-100001", {"status": "shipped"}),
    ("get", "/api/admin/users", None),
    ("get", "/api/admin/sellers", None),
    ("get", "/api/admin/sellers/1", None),
    ("patch", "/api/admin/sellers/1", {"status": "approved"}),
]


@pytest.fixture
def seeded(db):
    base = datetime(2026, 5, 1, tzinfo=timezone.utc)
    for n in range(3):
        db.add(Order(
            id=f"SO-10000{n}", total=100 * (n + 1), customer={}, created_at=base + timedelta(hours=n),
            items=[OrderItem(product_id="p-01", title="Aether Runner V2", price=100, qty=n + 1, seller_id="s-01")],
        ))
    db.add(Seller(name="Zhuk Select", email="zhuk@example.com", status="pending"))
    db.add(User(email="buyer@example.com", role="buyer"))
    db.commit()


def call(client, method, path, body=None, headers=None):
    return client.request(method.upper(), path, json=body, headers=headers or {})


@pytest.mark.parametrize("method, path, body", ADMIN_ROUTES)
def test_missing_token_is_unauthorized(client, method, path, body):
    resp = call(client, method, path, body)
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize("method, path, body", ADMIN_ROUTES)
def test_wrong_token_is_unauthorized(client, method, path, body):
    assert call(client, method, path, body, {"x-admin-token": "guess"}).status_code == 401


@pytest.mark.parametrize("method, path, body", ADMIN_ROUTES)
def test_unconfigured_token_fails_closed(client, settings, admin_headers, method, path, body):
    from app.main import app
    app.dependency_overrides[get_settings] = lambda: settings.model_copy(update={"ADMIN_TOKEN": None})

    resp = call(client, method, path, body, admin_headers)

    assert resp.status_code == 500
    assert resp.json() == {"error": "Admin token is not configured"}


def test_list_orders_newest_first(client, seeded, admin_headers):
    resp = client.get("/api/admin/orders", headers=admin_headers)
    assert resp.status_code == 200
    orders = resp.json()
    assert [o["id"] for o in orders] == ["SO-100002", "SO-100001", "SO-100000"]
    assert orders[0]["items"][0]["qty"] == 3


def test_get_order(client, seeded, admin_headers):
    resp = client.get("/api/admin/orders/SO-100001", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["total"] == 200


@pytest.mark.parametrize("status", ["paid", "shipped", "completed", "canceled", "pending"])
def test_set_order_status(client, seeded, admin_headers, db, status):
    resp = client.patch("/api/admin/orders/SO-100001", json={"status": status}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == status
    db.expire_all()
    assert db.get(Order, "SO-100001").status == status


def test_any_allowed_status_may_follow_any_other(client, seeded, admin_headers):
    client.patch("/api/admin/orders/SO-100001", json={"status": "completed"}, headers=admin_headers)
    resp = client.patch("/api/admin/orders/SO-100001", json={"status": "pending"}, headers=admin_headers)
    assert resp.json()["status"] == "pending"


@pytest.mark.parametrize("body", [{"status": "refunded"}, {"status": ""}, {}])
def test_invalid_order_status(client, seeded, admin_headers, db, body):
    resp = client.patch("/api/admin/orders/SO-100001", json=body, headers=admin_headers)
    assert resp.status_code == 400
    db.expire_all()
    assert db.get(Order, "SO-100001").status == "pending"


def test_unknown_order(client, seeded, admin_headers):
    assert client.patch("/api/admin/orders/SO-999999", json={"status": "paid"}, headers=admin_headers).status_code == 404
    assert client.get("/api/admin/orders/SO-999999", headers=admin_headers).status_code == 404


def test_list_users(client, seeded, admin_headers):
    users = client.get("/api/admin/users", headers=admin_headers).json()
    assert [u["email"] for u in users] == ["buyer@example.com"]


def test_seller_moderation(client, seeded, admin_headers, db):
    seller_id = client.get("/api/admin/sellers", headers=admin_headers).json()[0]["id"]

    resp = client.patch(f"/api/admin/sellers/{seller_id}", json={"status": "approved"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "approved"

    resp = client.patch(f"/api/admin/sellers/{seller_id}", json={"status": "blocked"}, headers=admin_headers)
    assert resp.json()["status"] == "blocked"
    assert client.get(f"/api/admin/sellers/{seller_id}", headers=admin_headers).json()["status"] == "blocked"


@pytest.mark.parametrize("status", ["active", "paid", None, "APPROVED"])
def test_invalid_seller_status_does_not_mutate(client, seeded, admin_headers, db, status):
    seller_id = db.query(Seller).one().id
    resp = client.patch(f"/api/admin/sellers/{seller_id}", json={"status": status}, headers=admin_headers)
    assert resp.status_code == 400
    db.expire_all()
    assert db.get(Seller, seller_id).status == "pending"


def test_unknown_seller(client, admin_headers):
    assert client.get("/api/admin/sellers/404", headers=admin_headers).status_code == 404
