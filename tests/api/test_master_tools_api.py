from __future__ import annotations

import pytest


def login(app, email: str, password: str = "demo123"):
    client = app.test_client()
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


def completed_order(app, final_price: float = 30) -> dict:
    customer = login(app, "musteri@demo.az")
    master = login(app, "usta@demo.az")
    categories = customer.get("/api/categories").get_json()["data"]
    cat = next(c["id"] for c in categories if c["slug"] == "santexnika")
    profile = next(m for m in customer.get("/api/masters").get_json()["data"] if m["fullName"] == "Elvin Həsənov")

    order = customer.post(
        "/api/orders",
        json={
            "categoryId": cat,
            "masterId": profile["id"],
            "title": "Kran axır",
            "description": "Mətbəxdə kran axır",
            "address": "Nərimanov r., Bakı",
            "scheduledDate": "2030-03-12",
            "scheduledTime": "10:00",
        },
    ).get_json()["data"]
    for action in ("accept", "start", "complete"):
        resp = master.post(f"/api/master/orders/{order['id']}/{action}", json={"finalPrice": final_price})
        assert resp.status_code == 200, resp.get_json()
    return order


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/api/master/portfolio"),
        ("post", "/api/master/portfolio"),
        ("get", "/api/master/availability"),
        ("put", "/api/master/availability"),
        ("get", "/api/master/analytics"),
    ],
)
def test_master_tools_refuse_customers(app, method, path):
    customer = login(app, "musteri@demo.az")

    assert getattr(customer, method)(path, json={}).status_code == 403
    assert getattr(app.test_client(), method)(path, json={}).status_code == 401


def test_portfolio_add_and_list(app):
    master = login(app, "usta@demo.az")
    assert master.get("/api/master/portfolio").get_json()["data"] == []

    resp = master.post("/api/master/portfolio", json={"url": "/api/files/portfolio/a.jpg"})
    assert resp.status_code == 400

    resp = master.post(
        "/api/master/portfolio",
        json={
            "title": "Hamam təmiri",
            "url": "/api/files/portfolio/after.jpg",
            "type": "before_after",
            "beforeImage": "/api/files/portfolio/before.jpg",
            "afterImage": "/api/files/portfolio/after.jpg",
            "price": 120,
        },
    )
    assert resp.status_code == 201
    item = resp.get_json()["data"]
    assert item["type"] == "BEFORE_AFTER"
    assert item["images"] == []

    items = master.get("/api/master/portfolio").get_json()["data"]
    assert [i["title"] for i in items] == ["Hamam təmiri"]


def test_availability_replace_and_add(app):
    master = login(app, "usta@demo.az")

    resp = master.put(
        "/api/master/availability",
        json={
            "slots": [
                {"date": "2030-03-13", "startTime": "14:00", "endTime": "18:00"},
                {"date": "2030-03-12T00:00:00.000Z", "startTime": "09:00", "endTime": "12:00", "isAvailable": False},
            ]
        },
    )
    assert resp.status_code == 200, resp.get_json()
    slots = resp.get_json()["data"]
    assert [(s["date"], s["startTime"]) for s in slots] == [("2030-03-12", "09:00"), ("2030-03-13", "14:00")]
    assert slots[0]["isAvailable"] is False

    resp = master.post("/api/master/availability", json={"date": "2030-03-14", "startTime": "10:00", "endTime": "11:30"})
    assert resp.status_code == 201
    assert len(master.get("/api/master/availability").get_json()["data"]) == 3

    resp = master.put("/api/master/availability", json={"slots": []})
    assert resp.get_json()["data"] == []


@pytest.mark.parametrize(
    "body",
    [
        {"slots": "09:00-12:00"},
        {"slots": [{"date": "2030-03-12", "startTime": "9:00", "endTime": "12:00"}]},
        {"slots": [{"date": "2030-03-12", "startTime": "12:00", "endTime": "09:00"}]},
        {"slots": [{"date": "12.03.2030", "startTime": "09:00", "endTime": "12:00"}]},
    ],
)
def test_availability_rejects_bad_slots(app, body):
    master = login(app, "usta@demo.az")

    assert master.put("/api/master/availability", json=body).status_code == 400


def test_master_analytics_covers_six_months(app):
    completed_order(app, final_price=30)
    master = login(app, "usta@demo.az")

    data = master.get("/api/master/analytics").get_json()["data"]

    assert len(data["monthlyData"]) == 6
    periods = [m["period"] for m in data["monthlyData"]]
    assert periods == sorted(periods)
    assert data["monthlyData"][-1]["orders"] == 1
    assert data["monthlyData"][-1]["revenue"] == 30
    assert data["completedJobs"] == 1


def test_admin_analytics_shape(app):
    completed_order(app)
    admin = login(app, "admin@demo.az")

    data = admin.get("/api/admin/analytics").get_json()["data"]

    assert set(data["stats"]) == {"revenue", "orders", "users", "masters"}
    assert data["stats"]["orders"] == {"current": 1, "previous": 0, "change": 100.0}
    # cash orders stay unpaid
    assert data["stats"]["revenue"]["current"] == 0
    assert data["stats"]["masters"]["current"] == 1
    assert data["topMasters"][0]["name"] == "Elvin Həsənov"
    assert data["topMasters"][0]["orders"] == 1
    assert data["topServices"][0]["name"] == "Santexnik"
    assert data["topServices"][0]["orders"] == 1
    assert len(data["monthlyData"]) == 12
    assert data["monthlyData"][-1]["orders"] == 1

    assert login(app, "usta@demo.az").get("/api/admin/analytics").status_code == 403


def test_admin_master_detail_and_update(app):
    admin = login(app, "admin@demo.az")
    master_id = admin.get("/api/admin/masters").get_json()["data"][0]["id"]

    detail = admin.get(f"/api/admin/masters/{master_id}").get_json()["data"]
    assert detail["user"]["email"] == "usta@demo.az"
    assert {s["name"] for s in detail["services"]} == {"Kran təmiri", "Rozetka quraşdırma"}

    resp = admin.patch(f"/api/admin/masters/{master_id}", json={"isVerified": True, "bio": "20 il təcrübə"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["isVerified"] is True
    assert resp.get_json()["data"]["bio"] == "20 il təcrübə"

    assert admin.patch(f"/api/admin/masters/{master_id}", json={"unknown": 1}).status_code == 400
    assert admin.get("/api/admin/masters/999999").status_code == 404


def test_admin_master_delete(app):
    admin = login(app, "admin@demo.az")
    completed_order(app)
    demo_id = admin.get("/api/admin/masters").get_json()["data"][0]["id"]
    assert admin.delete(f"/api/admin/masters/{demo_id}").status_code == 400

    newcomer = app.test_client()
    newcomer.post(
        "/api/auth/register",
        json={"email": "yeni.usta@mail.az", "password": "secret1", "firstName": "Rəşad", "lastName": "Quliyev"},
    )
    newcomer.post("/api/auth/login", json={"email": "yeni.usta@mail.az", "password": "secret1"})
    assert newcomer.post("/api/auth/upgrade-to-master", json={"categories": ["elektrik"]}).status_code == 200
    newcomer_id = next(
        m["id"] for m in admin.get("/api/admin/masters?search=Quliyev").get_json()["data"] if m["lastName"] == "Quliyev"
    )

    assert admin.delete(f"/api/admin/masters/{newcomer_id}").status_code == 200
    assert admin.get(f"/api/admin/masters/{newcomer_id}").status_code == 404
    resp = app.test_client().post("/api/auth/login", json={"email": "yeni.usta@mail.az", "password": "secret1"})
    assert resp.status_code == 401
