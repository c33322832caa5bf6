from __future__ import annotations

import io

import pytest
from PIL import Image


def login(app, email: str, password: str = "demo123"):
    client = app.test_client()
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


def category_id(client, slug: str) -> int:
    categories = client.get("/api/categories").get_json()["data"]
    return next(c["id"] for c in categories if c["slug"] == slug)


def demo_master(client) -> dict:
    masters = client.get("/api/masters").get_json()["data"]
    return next(m for m in masters if m["fullName"] == "Elvin Həsənov")


def order_payload(cat_id: int, **overrides) -> dict:
    values = {
        "categoryId": cat_id,
        "title": "Kran axır",
        "description": "Mətbəxdə kran axır",
        "address": "Nərimanov r., Bakı",
        "scheduledDate": "2030-03-12",
        "scheduledTime": "10:00",
    }
    values.update(overrides)
    return values


def test_errors_use_json_envelope(client):
    resp = client.get("/api/orders")
    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "error": "Daxil olmamısınız"}

    resp = client.get("/api/no-such-route")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_register_login_and_me(client):
    resp = client.post(
        "/api/auth/register",
        json={"email": "Yeni@Mail.az", "password": "secret1", "firstName": "Nigar", "lastName": "Əliyeva"},
    )
    assert resp.status_code == 201
    assert resp.get_json()["data"]["role"] == "CUSTOMER"

    resp = client.post("/api/auth/login", json={"email": "yeni@mail.az", "password": "secret1"})
    assert resp.status_code == 200

    me = client.get("/api/auth/me").get_json()["data"]
    assert me["email"] == "yeni@mail.az"
    assert me["name"] == "Nigar Əliyeva"

    history = client.get("/api/auth/login-history").get_json()["data"]
    assert len(history) == 1

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_bad_login(client):
    resp = client.post("/api/auth/login", json={"email": "musteri@demo.az", "password": "wrong"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_otp_round_trip_with_exposed_code(client):
    client.post(
        "/api/auth/register",
        json={"email": "otp@mail.az", "password": "secret1", "firstName": "Otp", "lastName": "Test"},
    )

    sent = client.post("/api/auth/otp", json={"action": "send", "email": "otp@mail.az"}).get_json()["data"]
    resp = client.post("/api/auth/otp/verify", json={"email": "otp@mail.az", "otpCode": sent["otpCode"]})

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Email uğurla təsdiqləndi"
    assert client.post("/api/auth/otp/send", json={"email": "ghost@mail.az"}).status_code == 404


def test_public_catalog_and_calculator(client):
    categories = client.get("/api/categories?includeSubcategories=true&includeCount=true").get_json()["data"]
    plumbing = next(c for c in categories if c["slug"] == "santexnika")

    assert plumbing["subcategories"]
    assert plumbing["_count"]["masters"] == 1

    estimate = client.post("/api/calculator", json={"categoryId": plumbing["id"]}).get_json()["data"]
    assert (estimate["min"], estimate["max"], estimate["estimated"]) == (15, 25, 20)
    assert estimate["mastersAvailable"] == 2
    assert estimate["currency"] == "AZN"


def test_calculator_base_price_does_not_count_as_master(client):
    categories = client.get("/api/categories?includeSubcategories=true").get_json()["data"]
    renovation = next(c for c in categories if c["slug"] == "temir")
    kitchen = next(s for s in renovation["subcategories"] if s["slug"] == "metbex-temiri")

    estimate = client.post(
        "/api/calculator", json={"categoryId": renovation["id"], "subcategoryId": kitchen["id"]}
    ).get_json()["data"]

    assert estimate["estimated"] == 500
    assert estimate["mastersAvailable"] == 0


def test_create_order_requires_fields(app):
    customer = login(app, "musteri@demo.az")

    resp = customer.post("/api/orders", json={"description": "Başlıq yoxdur"})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_direct_booking_lifecycle_and_review(app):
    customer = login(app, "musteri@demo.az")
    master = login(app, "usta@demo.az")
    profile = demo_master(customer)
    cat = category_id(customer, "santexnika")
    service = next(s for s in customer.get(f"/api/masters/{profile['id']}").get_json()["data"]["services"]
                   if s["name"] == "Kran təmiri")

    created = customer.post(
        "/api/orders", json=order_payload(cat, masterId=profile["id"], serviceId=service["id"], urgency="URGENT")
    )
    assert created.status_code == 201
    order = created.get_json()["data"]
    assert order["estimatedPrice"] == 25
    assert order["urgencyFee"] == 7.5

    notes = master.get("/api/notifications").get_json()
    assert notes["unreadCount"] == 1
    assert notes["data"][0]["type"] == "ORDER_NEW"

    assert customer.post(f"/api/master/orders/{order['id']}/accept").status_code == 403
    assert master.post(f"/api/master/orders/{order['id']}/start").status_code == 400

    for action, status in (("accept", "ACCEPTED"), ("start", "IN_PROGRESS"), ("complete", "COMPLETED")):
        resp = master.post(f"/api/master/orders/{order['id']}/{action}", json={"finalPrice": 30})
        assert resp.status_code == 200, resp.get_json()
        assert resp.get_json()["data"]["status"] == status

    track = customer.get(f"/api/orders/{order['id']}/track").get_json()["data"]
    assert all(step["completed"] for step in track["timeline"])

    resp = customer.post("/api/reviews", json={"orderId": order["id"], "rating": 4, "comment": "Yaxşı"})
    assert resp.status_code == 201
    assert customer.post("/api/reviews", json={"orderId": order["id"], "rating": 5}).status_code == 400

    detail = customer.get(f"/api/masters/{profile['id']}").get_json()["data"]
    assert detail["rating"] == 4.0
    assert detail["reviewCount"] == 1
    assert detail["completedJobs"] == 1
    assert detail["reviews"][0]["comment"] == "Yaxşı"

    reviews = customer.get(f"/api/reviews?masterId={profile['id']}").get_json()
    assert reviews["ratingBreakdown"]["4"] == 1

    stats = master.get("/api/master/stats").get_json()["data"]
    assert stats["completedJobs"] == 1


def test_open_order_applications(app):
    customer = login(app, "musteri@demo.az")
    master = login(app, "usta@demo.az")

    second = app.test_client()
    second.post(
        "/api/auth/register",
        json={"email": "usta2@mail.az", "password": "secret1", "firstName": "Rəşad", "lastName": "Quliyev",
              "role": "MASTER"},
    )
    second.post("/api/auth/login", json={"email": "usta2@mail.az", "password": "secret1"})

    cat = category_id(customer, "santexnika")
    order = customer.post("/api/orders", json=order_payload(cat)).get_json()["data"]
    assert order["masterId"] is None

    open_orders = master.get("/api/orders/open").get_json()["data"]
    assert [o["id"] for o in open_orders] == [order["id"]]
    assert customer.get("/api/orders/open").status_code == 403

    first_app = master.post("/api/applications", json={"orderId": order["id"], "price": 40}).get_json()["data"]
    second_app = second.post("/api/applications", json={"orderId": order["id"], "price": 35}).get_json()["data"]
    assert master.post("/api/applications", json={"orderId": order["id"], "price": 39}).status_code == 400

    listed = customer.get(f"/api/orders/{order['id']}/applications").get_json()["data"]
    assert len(listed) == 2

    resp = customer.patch(f"/api/applications/{second_app['id']}", json={"action": "accept"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "ACCEPTED"

    first = master.get(f"/api/applications/{first_app['id']}").get_json()["data"]
    assert first["status"] == "REJECTED"

    accepted = customer.get(f"/api/orders/{order['id']}").get_json()["data"]
    assert accepted["status"] == "ACCEPTED"
    assert accepted["masterName"] == "Rəşad Quliyev"
    assert master.get("/api/orders/open").get_json()["data"] == []


def test_cancel_by_customer(app):
    customer = login(app, "musteri@demo.az")
    cat = category_id(customer, "santexnika")
    order = customer.post("/api/orders", json=order_payload(cat)).get_json()["data"]

    resp = customer.patch(f"/api/orders/{order['id']}", json={"action": "cancel", "cancelReason": "Lazım deyil"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "CANCELLED"
    assert resp.get_json()["data"]["cancelReason"] == "Lazım deyil"
    assert customer.patch(f"/api/orders/{order['id']}", json={"action": "cancel"}).status_code == 400


def test_payments_cash_card_and_webhook(app):
    customer = login(app, "musteri@demo.az")
    profile = demo_master(customer)
    cat = category_id(customer, "santexnika")
    order = customer.post("/api/orders", json=order_payload(cat, masterId=profile["id"])).get_json()["data"]

    cash = customer.post("/api/payments", json={"orderId": order["id"], "amount": 50, "method": "cash"})
    assert cash.status_code == 200
    assert cash.get_json()["message"] == "Ödəniş nağd olaraq qeydə alındı"
    assert cash.get_json()["data"]["totalPrice"] == 50

    card = customer.post("/api/payments", json={"orderId": order["id"], "amount": 50, "method": "CARD"})
    data = card.get_json()["data"]
    assert data["demo"] is True
    assert data["transactionId"].startswith("DEMO_")

    status = customer.get(f"/api/payments?orderId={order['id']}").get_json()["data"]
    assert status["paymentStatus"] == "PENDING"
    assert status["gatewayStatus"] == "success"

    hook = app.test_client().post(
        "/api/payments/webhook",
        json={"orderId": order["id"], "status": "success", "transactionId": data["transactionId"]},
    )
    assert hook.get_json()["data"]["paymentStatus"] == "PAID"

    anonymous = app.test_client()
    for payload in ({"orderId": order["id"]}, {"orderId": order["id"], "status": "whatever"},
                    {"orderId": order["id"], "status": "pending"}, {"status": "success"}):
        resp = anonymous.post("/api/payments/webhook", json=payload)
        assert resp.status_code == 400, payload
        assert resp.get_json()["success"] is False
    assert customer.get(f"/api/payments?orderId={order['id']}").get_json()["data"]["paymentStatus"] == "PAID"

    again = customer.post("/api/payments", json={"orderId": order["id"], "amount": 50, "method": "CARD"})
    assert again.status_code == 400


def test_messages_between_customer_and_master(app):
    customer = login(app, "musteri@demo.az")
    master = login(app, "usta@demo.az")
    profile = demo_master(customer)

    sent = customer.post("/api/messages", json={"receiverId": profile["id"], "content": "Salam, sabah gələ bilərsiniz?"})
    assert sent.status_code == 201

    conversations = master.get("/api/messages").get_json()["data"]
    assert len(conversations) == 1
    assert conversations[0]["unreadCount"] == 1

    thread = master.get(f"/api/messages/{conversations[0]['id']}").get_json()["data"]
    assert thread["messages"][0]["content"].startswith("Salam")
    assert master.get("/api/messages").get_json()["data"][0]["unreadCount"] == 0


def test_upgraded_master_messages_customer_not_master_with_same_id(app):
    customer = login(app, "musteri@demo.az")
    demo = login(app, "usta@demo.az")
    customer_profile_id = customer.get("/api/user/profile").get_json()["data"]["id"]

    upgraded = app.test_client()
    upgraded.post(
        "/api/auth/register",
        json={"email": "kecid@mail.az", "password": "secret1", "firstName": "Orxan", "lastName": "Babayev"},
    )
    upgraded.post("/api/auth/login", json={"email": "kecid@mail.az", "password": "secret1"})
    resp = upgraded.post("/api/auth/upgrade-to-master", json={"categories": ["santexnika"]})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["user"]["role"] == "MASTER"

    sent = upgraded.post("/api/messages", json={"receiverId": customer_profile_id, "content": "Salam müştəri"})
    assert sent.status_code == 201

    received = customer.get("/api/messages").get_json()["data"]
    assert [c["lastMessage"]["content"] for c in received] == ["Salam müştəri"]
    assert received[0]["otherParty"]["name"] == "Orxan Babayev"
    assert demo.get("/api/messages").get_json()["data"] == []

    # the same account can still write to a master as a customer
    demo_id = demo_master(customer)["id"]
    resp = upgraded.post(
        "/api/messages", json={"receiverId": demo_id, "receiverType": "master", "content": "Kranı siz təmir edərsiniz?"}
    )
    assert resp.status_code == 201
    assert len(demo.get("/api/messages").get_json()["data"]) == 1
    assert upgraded.post(
        "/api/messages", json={"receiverId": demo_id, "receiverType": "admin", "content": "x"}
    ).status_code == 400


def test_favorites(app):
    customer = login(app, "musteri@demo.az")
    profile = demo_master(customer)

    assert customer.post("/api/user/favorites", json={"masterId": profile["id"]}).status_code == 201
    assert customer.post("/api/user/favorites", json={"masterId": profile["id"]}).status_code == 400
    assert [m["id"] for m in customer.get("/api/user/favorites").get_json()["data"]] == [profile["id"]]
    assert customer.delete(f"/api/user/favorites?masterId={profile['id']}").status_code == 200
    assert customer.get("/api/user/favorites").get_json()["data"] == []


def test_admin_area_is_role_gated(app):
    customer = login(app, "musteri@demo.az")
    admin = login(app, "admin@demo.az")

    assert app.test_client().get("/api/admin/stats").status_code == 401
    assert customer.get("/api/admin/stats").status_code == 403

    stats = admin.get("/api/admin/stats").get_json()["data"]["stats"]
    assert stats["totalMasters"] == 1
    assert stats["totalCustomers"] >= 1

    resp = admin.patch("/api/admin/settings/platform_commission_percent", json={"value": 15})
    assert resp.get_json()["data"]["typedValue"] == 15

    exported = admin.get("/api/admin/export?type=users&format=xlsx")
    assert exported.status_code == 200
    assert exported.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    rows = admin.get("/api/admin/export?type=masters&format=json").get_json()["data"]
    assert rows[0]["Ad"] == "Elvin Həsənov"


def test_admin_blocks_user(app):
    admin = login(app, "admin@demo.az")
    customer_id = next(
        u["id"] for u in admin.get("/api/admin/users?search=musteri").get_json()["data"] if u["email"] == "musteri@demo.az"
    )

    assert admin.post(f"/api/admin/users/{customer_id}/block").status_code == 200
    resp = app.test_client().post("/api/auth/login", json={"email": "musteri@demo.az", "password": "demo123"})
    assert resp.status_code == 403

    assert admin.delete(f"/api/admin/users/{customer_id}/block").status_code == 200
    login(app, "musteri@demo.az")


def png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


def test_upload_and_serve_image(app):
    customer = login(app, "musteri@demo.az")

    resp = customer.post(
        "/api/upload",
        data={"file": (io.BytesIO(png_bytes()), "kran.png", "image/png"), "folder": "orders"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    stored = resp.get_json()["data"]
    assert stored["url"].startswith("/media/orders/")
    assert stored["fileName"].endswith(".png")

    served = app.test_client().get(stored["url"])
    assert served.status_code == 200
    assert served.data == png_bytes()


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"file": (io.BytesIO(b"not an image"), "fake.png", "image/png")}, 400),
        ({"file": (io.BytesIO(b"MZ"), "tool.exe", "application/octet-stream")}, 400),
        ({}, 400),
    ],
)
def test_upload_rejects_bad_files(app, payload, expected):
    customer = login(app, "musteri@demo.az")

    resp = customer.post("/api/upload", data=payload, content_type="multipart/form-data")

    assert resp.status_code == expected


def test_media_path_traversal_is_refused(client):
    assert client.get("/media/orders/..%2F..%2Fsecret.txt").status_code in (400, 404)
    assert client.get("/media/etc/passwd").status_code == 404
