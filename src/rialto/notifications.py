"""Booking confirmation emails, sent through the email relay service."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from rialto.errors import NotificationError
from rialto.models import Reservation

logger = logging.getLogger(__name__)

RELAY_TOKEN_HEADER = "X-Relay-Token"


def confirmation_payload(reservation: Reservation) -> dict[str, Any]:
    """Body accepted by the relay's /send-email and /send-admin-confirmation."""
    payload: dict[str, Any] = {
        "name": reservation.name,
        "email": reservation.email,
        "date": reservation.date.isoformat(),
        "time": reservation.time.strftime("%H:%M"),
        "guests": reservation.guests,
    }
    if reservation.occasion:
        payload["occasion"] = reservation.occasion
    if reservation.special_requests:
        payload["special_requests"] = reservation.special_requests
    return payload


class ConfirmationNotifier:
    """
    Posts reservation details to the relay.

        notifier = ConfirmationNotifier("http://localhost:3001")
        await notifier.send_confirmation(reservation)

    Any failure surfaces as NotificationError; callers decide whether it matters.
    """

    def __init__(
        self,
        relay_url: str,
        *,
        notify_admin: bool = False,
        timeout: float = 10.0,
        relay_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.relay_url = relay_url.rstrip("/")
        self.notify_admin = notify_admin
        self._timeout = timeout
        self._relay_token = relay_token
        self._transport = transport

    async def send_confirmation(self, reservation: Reservation) -> dict:
        """Send the guest confirmation, plus the staff copy when enabled."""
        payload = confirmation_payload(reservation)
        result = await self._post("/send-email", payload)
        logger.info("Confirmation sent to %s for %s %s", reservation.email, payload["date"], payload["time"])
        if self.notify_admin:
            await self._post("/send-admin-confirmation", payload)
        return result

    async def _post(self, path: str, payload: dict) -> dict:
        headers = {RELAY_TOKEN_HEADER: self._relay_token} if self._relay_token else {}
        try:
            async with httpx.AsyncClient(
                base_url=self.relay_url, timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(path, json=payload, headers=headers)
            body = resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise NotificationError(f"Email relay unreachable: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            error = body.get("error") if isinstance(body, dict) else None
            raise NotificationError(error or f"Email relay returned HTTP {resp.status_code}")
        return body
