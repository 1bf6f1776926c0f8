"""Email relay: renders reservation emails and forwards them to Resend.

Endpoints:
- POST /send-email               confirmation to the guest
- POST /send-admin-confirmation  copy to the restaurant inbox
- GET  /health

When RELAY_TOKEN is configured every send requires a matching X-Relay-Token
header.
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, EmailStr, Field

from rialto.errors import NotificationError
from rialto.notifications import RELAY_TOKEN_HEADER
from rialto.relay.mailer import RelaySettings, ResendMailer, render

logger = logging.getLogger(__name__)

_relay_token_header = APIKeyHeader(name=RELAY_TOKEN_HEADER, auto_error=False)


class EmailRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    date: str
    time: str
    guests: int = Field(..., ge=1)
    occasion: str | None = None
    special_requests: str | None = None


async def _require_relay_token(request: Request, token: str | None = Depends(_relay_token_header)):
    expected = request.app.state.settings.relay_token
    if expected and token != expected:
        raise HTTPException(401, "Invalid relay token")


def create_relay_app(settings: RelaySettings, mailer: ResendMailer | None = None) -> FastAPI:
    app = FastAPI(title=f"{settings.restaurant_name} email relay")
    app.state.settings = settings
    app.state.mailer = mailer or ResendMailer(
        settings.resend_api_key, settings.sender, api_url=settings.api_url
    )
    if not settings.relay_token:
        logger.warning("RELAY_TOKEN not set; relay accepts unauthenticated requests")

    async def _deliver(to: str, subject: str, template: str, body: EmailRequest):
        html = render(template, restaurant=settings.restaurant_name, **body.model_dump())
        try:
            response = await app.state.mailer.send(to, subject, html)
        except NotificationError as e:
            logger.error("Error sending email to %s: %s", to, e)
            return JSONResponse(status_code=500, content={"success": False, "error": str(e)})
        return {"success": True, "response": response}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.post("/send-email", dependencies=[Depends(_require_relay_token)])
    async def send_email(body: EmailRequest):
        logger.info("Sending confirmation to %s for %s %s", body.email, body.date, body.time)
        return await _deliver(
            body.email,
            f"Reservation Confirmation - {settings.restaurant_name}",
            "confirmation.html",
            body,
        )

    @app.post("/send-admin-confirmation", dependencies=[Depends(_require_relay_token)])
    async def send_admin_confirmation(body: EmailRequest):
        logger.info("Sending staff copy for %s on %s %s", body.name, body.date, body.time)
        return await _deliver(
            settings.inbox_email,
            f"New Reservation - {body.name} ({body.date} {body.time})",
            "admin_confirmation.html",
            body,
        )

    return app
