"""Resend HTTP API client and the HTML templates rendered for it."""

from __future__ import annotations

import logging
import os

import httpx
from jinja2 import Environment, PackageLoader, select_autoescape
from pydantic import BaseModel

from rialto.config import RestaurantConfig
from rialto.errors import ConfigError, NotificationError

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com"

_templates = Environment(
    loader=PackageLoader("rialto.relay", "templates"),
    autoescape=select_autoescape(["html"]),
)


class RelaySettings(BaseModel):
    resend_api_key: str
    sender: str
    inbox_email: str
    restaurant_name: str
    relay_token: str | None = None
    api_url: str = RESEND_API_URL

    @classmethod
    def from_env(cls, config: RestaurantConfig) -> RelaySettings:
        """Secrets from the environment, addresses from the restaurant config."""
        api_key = os.environ.get("RESEND_API_KEY", "")
        if not api_key:
            raise ConfigError("RESEND_API_KEY environment variable is required")
        return cls(
            resend_api_key=api_key,
            sender=config.sender,
            inbox_email=config.inbox_email,
            restaurant_name=config.name,
            relay_token=os.environ.get("RELAY_TOKEN") or None,
        )


def render(template: str, **context) -> str:
    return _templates.get_template(template).render(**context)


class ResendMailer:
    """Sends one HTML email per call through Resend's /emails endpoint."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        *,
        api_url: str = RESEND_API_URL,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self.sender = sender
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def send(self, to: str, subject: str, html: str) -> dict:
        body = {"from": self.sender, "to": to, "subject": subject, "html": html}
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    f"{self._api_url}/emails",
                    json=body,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            detail = _error_message(e.response)
            logger.warning("Resend rejected email to %s: %s", to, detail)
            raise NotificationError(detail) from e
        except httpx.HTTPError as e:
            logger.warning("Resend unreachable: %s", e)
            raise NotificationError(f"Email provider unreachable: {e}") from e

        logger.info("Email %r sent to %s", subject, to)
        return resp.json()


def _error_message(resp: httpx.Response) -> str:
    try:
        return resp.json().get("message") or f"HTTP {resp.status_code}"
    except ValueError:
        return f"HTTP {resp.status_code}"
