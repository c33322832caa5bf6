"""Transactional e-mail senders.

`ResendEmailSender` talks to the Resend HTTP API; `ConsoleEmailSender` only
logs the message and is used in development and tests.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

import requests

from ..core.exceptions import IntegrationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_SENDER = "UstaBul <onboarding@resend.dev>"


class EmailSender(Protocol):
    def send(self, *, to: str, subject: str, html: str) -> None:
        raise NotImplementedError


class ResendEmailSender:
    def __init__(self, api_key: Optional[str], *, sender: str = DEFAULT_SENDER, timeout: int = 10):
        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def send(self, *, to: str, subject: str, html: str) -> None:
        if not self.is_configured():
            raise IntegrationError("Email xidməti konfiqurasiya edilməyib")

        try:
            resp = requests.post(
                RESEND_API_URL,
                json={"from": self._sender, "to": [to], "subject": subject, "html": html},
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            logger.error("Resend request failed: %s", e)
            raise IntegrationError("Email göndərilə bilmədi") from e

        if resp.status_code >= 300:
            logger.error("Resend rejected e-mail to %s: %s %s", to, resp.status_code, resp.text[:200])
            raise IntegrationError("Email göndərilə bilmədi")
        logger.info("E-mail sent to %s", to)


@dataclass
class ConsoleEmailSender:
    """Keeps sent messages in memory and logs them."""

    outbox: list[dict] = field(default_factory=list)

    def send(self, *, to: str, subject: str, html: str) -> None:
        self.outbox.append({"to": to, "subject": subject, "html": html})
        logger.info("[console e-mail] to=%s subject=%s", to, subject)


def build_email_sender(config) -> EmailSender:
    backend = str(config.get("EMAIL_BACKEND", "console")).lower()
    if backend == "resend":
        return ResendEmailSender(config.get("RESEND_API_KEY"), sender=config.get("EMAIL_FROM") or DEFAULT_SENDER)
    return ConsoleEmailSender()
