"""FastAPI application factory for the restaurant site API."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rialto.availability import AvailabilityCalculator
from rialto.catalog import SlotCatalog
from rialto.closures import ClosureManager
from rialto.config import RestaurantConfig, load_dotenv, resolve_config
from rialto.errors import (
    AuthError,
    CapacityError,
    DuplicateError,
    InvalidTransitionError,
    NotFoundError,
    RialtoError,
    StoreError,
    UnavailableError,
    ValidationError,
)
from rialto.inbox import ContactInbox
from rialto.lifecycle import ReservationService
from rialto.notifications import ConfirmationNotifier
from rialto.store import SupabaseStore
from rialto.web import db

logger = logging.getLogger(__name__)
WEB_DIR = Path(__file__).parent

_STATUS_CODES: dict[type[RialtoError], int] = {
    ValidationError: 422,
    NotFoundError: 404,
    AuthError: 401,
    UnavailableError: 409,
    CapacityError: 409,
    DuplicateError: 409,
    InvalidTransitionError: 409,
    StoreError: 502,
}


def status_code_for(exc: RialtoError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return 500


def _default_notifier(config: RestaurantConfig) -> ConfirmationNotifier:
    settings = config.notifications
    return ConfirmationNotifier(
        settings.relay_url,
        notify_admin=settings.notify_admin,
        timeout=settings.timeout_seconds,
        relay_token=os.environ.get("RELAY_TOKEN") or None,
    )


def create_app(
    config: RestaurantConfig | None = None,
    *,
    store=None,
    auth_client=None,
    notifier: ConfirmationNotifier | None = None,
    today: Callable[[], date] = date.today,
) -> FastAPI:
    """Build the app. Without `store`, Supabase clients are created at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        load_dotenv(WEB_DIR.parent.parent.parent)
        cfg = config or resolve_config()
        app.state.config = cfg

        active_store, active_auth = store, auth_client
        if active_store is None:
            try:
                active_auth, service_client = await db.init_supabase()
                active_store = SupabaseStore(service_client)
            except RuntimeError as e:
                logger.warning("Supabase not configured: %s", e)
                logger.warning("Reservation and admin endpoints will return 503 until env vars are set")
        app.state.auth_client = active_auth

        if active_store is not None:
            calculator = AvailabilityCalculator(active_store)
            app.state.availability = calculator
            app.state.reservations = ReservationService(
                active_store,
                calculator=calculator,
                notifier=notifier if notifier is not None else _default_notifier(cfg),
                policy=cfg.booking,
                today=today,
            )
            app.state.closures = ClosureManager(active_store)
            app.state.catalog = SlotCatalog(active_store)
            app.state.inbox = ContactInbox(active_store)
        logger.info("%s API ready", cfg.name)

        yield

        logger.info("%s API shutting down", cfg.name)

    app = FastAPI(title="Rialto", lifespan=lifespan)

    origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(CORSMiddleware, allow_origins=origins, allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(RialtoError)
    async def rialto_error(request: Request, exc: RialtoError):
        return JSONResponse(status_code=status_code_for(exc), content={"detail": str(exc)})

    from rialto.web.routes import admin, auth, availability, contact, reservations

    app.include_router(auth.router, prefix="/api/auth")
    app.include_router(availability.router, prefix="/api/availability")
    app.include_router(reservations.router, prefix="/api/reservations")
    app.include_router(contact.router, prefix="/api/contact")
    app.include_router(admin.router, prefix="/api/admin")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
