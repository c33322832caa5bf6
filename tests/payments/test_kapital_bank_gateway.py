import hashlib
import hmac

import pytest
import requests

from src.ustabul.ustabul.core.exceptions import IntegrationError
from src.ustabul.ustabul.integrations import kapital_bank
from src.ustabul.ustabul.integrations.kapital_bank import KapitalBankGateway, map_status_code, to_qapik


class FakeResponse:
    def __init__(self, status_code: int, payload: dict):
        self.status_code = status_code
        self._payload = payload

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> dict:
        return self._payload


def live_gateway() -> KapitalBankGateway:
    return KapitalBankGateway(merchant_id="M-1", secret_key="s3cret", api_url="https://bank.test/v1/")


def test_status_codes_map_to_gateway_states():
    assert map_status_code("000") == "success"
    assert map_status_code("001") == "pending"
    assert map_status_code("006") == "cancelled"
    assert map_status_code("999") == "failed"
    assert map_status_code(None) == "failed"


def test_amount_is_sent_in_qapik():
    assert to_qapik(12.5) == 1250
    assert to_qapik(0.1 + 0.2) == 30


def test_demo_mode_without_merchant():
    gateway = KapitalBankGateway(merchant_id=None, secret_key=None)

    session = gateway.initialize_payment(order_id=7, amount=20, description="UB-7")

    assert gateway.is_demo
    assert session.demo
    assert session.transaction_id.startswith("DEMO_")
    assert "demo=true" in session.redirect_url
    assert gateway.check_status(session.transaction_id).status == "success"
    assert gateway.refund(transaction_id=session.transaction_id) is True
    assert gateway.verify_signature(b"{}", None) is True


def test_live_signature_is_hmac_sha256():
    gateway = live_gateway()
    body = b'{"transaction_id":"T1","status":"000"}'
    expected = hmac.new(b"s3cret", body, hashlib.sha256).hexdigest()

    assert gateway.sign(body) == expected
    assert gateway.verify_signature(body, expected)
    assert not gateway.verify_signature(body, "bad")
    assert not gateway.verify_signature(body, None)


def test_live_initialize_posts_signed_request(monkeypatch):
    calls = []

    def fake_request(method, url, data=None, headers=None, timeout=None):
        calls.append((method, url, data, headers))
        return FakeResponse(200, {"success": True, "transaction_id": "T-9", "payment_url": "https://pay/T-9"})

    monkeypatch.setattr(kapital_bank.requests, "request", fake_request)

    session = live_gateway().initialize_payment(order_id=3, amount=15.25, description="UB-1")

    method, url, data, headers = calls[0]
    assert method == "POST"
    assert url == "https://bank.test/v1/payment/create"
    assert b'"amount":1525' in data
    assert headers["X-Merchant-ID"] == "M-1"
    assert headers["X-Signature"] == live_gateway().sign(data)
    assert session.transaction_id == "T-9"
    assert session.redirect_url == "https://pay/T-9"
    assert not session.demo


def test_live_status_converts_amount(monkeypatch):
    monkeypatch.setattr(
        kapital_bank.requests,
        "request",
        lambda *a, **kw: FakeResponse(200, {"status": "001", "amount": 2500}),
    )

    status = live_gateway().check_status("T-1")

    assert status.status == "pending"
    assert status.amount == 25


def test_live_initialize_failure_raises(monkeypatch):
    monkeypatch.setattr(
        kapital_bank.requests,
        "request",
        lambda *a, **kw: FakeResponse(400, {"success": False, "error_message": "Limit"}),
    )

    with pytest.raises(IntegrationError, match="Limit"):
        live_gateway().initialize_payment(order_id=1, amount=1, description="x")


def test_network_error_becomes_integration_error(monkeypatch):
    def boom(*a, **kw):
        raise requests.ConnectionError("down")

    monkeypatch.setattr(kapital_bank.requests, "request", boom)

    with pytest.raises(IntegrationError):
        live_gateway().refund(transaction_id="T-1", amount=5)
