"""Kapital Bank payment gateway client.

Without a merchant id the client runs in demo mode and never leaves the
process; that is how development and tests use it.
"""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlencode

import requests

from ..core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

DEMO_MERCHANT = "DEMO_MERCHANT"
DEFAULT_API_URL = "https://api.kapitalbank.az/v1"

STATUS_CODES = {
    "000": "success",
    "001": "pending",
    "006": "cancelled",
}


@dataclass(frozen=True)
class PaymentSession:
    transaction_id: str
    redirect_url: str
    demo: bool = False


@dataclass(frozen=True)
class GatewayStatus:
    transaction_id: str
    status: str
    amount: Optional[float] = None


def map_status_code(code: Optional[str]) -> str:
    return STATUS_CODES.get(str(code or ""), "failed")


def to_qapik(amount: float) -> int:
    return int(round(float(amount) * 100))


class KapitalBankGateway:
    def __init__(
        self,
        *,
        merchant_id: Optional[str],
        secret_key: Optional[str],
        api_url: str = DEFAULT_API_URL,
        return_url: str = "http://localhost:5000/payment/result",
        timeout: int = 15,
    ):
        self._merchant_id = merchant_id or ""
        self._secret = (secret_key or "").encode("utf-8")
        self._api_url = api_url.rstrip("/")
        self._return_url = return_url
        self._timeout = timeout

    @property
    def is_demo(self) -> bool:
        return not self._merchant_id or self._merchant_id == DEMO_MERCHANT

    def sign(self, payload: str | bytes) -> str:
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def verify_signature(self, payload: bytes, signature: Optional[str]) -> bool:
        if self.is_demo:
            return True
        if not signature:
            return False
        return hmac.compare_digest(self.sign(payload), signature)

    def _headers(self, signed: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Merchant-ID": self._merchant_id,
            "X-Signature": self.sign(signed),
        }

    def _call(self, method: str, path: str, *, body: Optional[dict[str, Any]] = None, signed: str = "") -> dict[str, Any]:
        payload = None
        if body is not None:
            payload = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
            signed = payload
        try:
            resp = requests.request(
                method,
                f"{self._api_url}{path}",
                data=payload.encode("utf-8") if payload else None,
                headers=self._headers(signed),
                timeout=self._timeout,
            )
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Kapital Bank %s %s failed: %s", method, path, e)
            raise IntegrationError("Ödəniş sistemi ilə əlaqə qurula bilmədi") from e

        if resp.status_code >= 500:
            logger.error("Kapital Bank %s returned %s", path, resp.status_code)
            raise IntegrationError("Ödəniş sistemi ilə əlaqə qurula bilmədi")
        data["_ok"] = resp.ok
        return data

    def initialize_payment(
        self,
        *,
        order_id: int,
        amount: float,
        description: str,
        customer_email: Optional[str] = None,
    ) -> PaymentSession:
        if self.is_demo:
            transaction_id = f"DEMO_{int(time.time() * 1000)}"
            logger.info("[demo] payment %s for order %s amount=%.2f", transaction_id, order_id, amount)
            query = urlencode({"transaction_id": transaction_id, "demo": "true"})
            return PaymentSession(transaction_id=transaction_id, redirect_url=f"{self._return_url}?{query}", demo=True)

        data = self._call(
            "POST",
            "/payment/create",
            body={
                "merchant_id": self._merchant_id,
                "order_id": str(order_id),
                "amount": to_qapik(amount),
                "currency": "AZN",
                "description": description,
                "return_url": self._return_url,
                "fail_url": self._return_url,
                "customer_email": customer_email,
                "language": "az",
            },
        )
        if not (data["_ok"] and data.get("success")):
            raise IntegrationError(data.get("error_message") or "Ödəniş başlana bilmədi")

        logger.info("Payment %s initialized for order %s", data.get("transaction_id"), order_id)
        return PaymentSession(transaction_id=str(data["transaction_id"]), redirect_url=str(data["payment_url"]))

    def check_status(self, transaction_id: str) -> GatewayStatus:
        if self.is_demo:
            return GatewayStatus(transaction_id=transaction_id, status="success", amount=0.0)

        data = self._call("GET", f"/payment/status/{transaction_id}", signed=transaction_id)
        amount = data.get("amount")
        return GatewayStatus(
            transaction_id=transaction_id,
            status=map_status_code(data.get("status")),
            amount=(float(amount) / 100) if amount is not None else None,
        )

    def refund(self, *, transaction_id: str, amount: Optional[float] = None) -> bool:
        if self.is_demo:
            logger.info("[demo] refund %s amount=%s", transaction_id, amount)
            return True

        body: dict[str, Any] = {"transaction_id": transaction_id}
        if amount is not None:
            body["amount"] = to_qapik(amount)
        data = self._call("POST", "/payment/refund", body=body)
        return bool(data["_ok"] and data.get("success"))
