"""FastAPI dependencies: services from app.state and staff authentication.

`require_admin` validates a Supabase JWT via the Supabase auth server and,
when `admin_emails` is configured, checks the signed-in email against it.
"""

from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from rialto.availability import AvailabilityCalculator
from rialto.catalog import SlotCatalog
from rialto.closures import ClosureManager
from rialto.inbox import ContactInbox
from rialto.lifecycle import ReservationService

logger = logging.getLogger(__name__)

http_bearer = HTTPBearer(auto_error=False)


def _service(request: Request, name: str):
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(503, "Store not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY.")
    return service


def get_reservations(request: Request) -> ReservationService:
    return _service(request, "reservations")


def get_availability(request: Request) -> AvailabilityCalculator:
    return _service(request, "availability")


def get_closures(request: Request) -> ClosureManager:
    return _service(request, "closures")


def get_catalog(request: Request) -> SlotCatalog:
    return _service(request, "catalog")


def get_inbox(request: Request) -> ContactInbox:
    return _service(request, "inbox")


def get_auth_client(request: Request):
    client = getattr(request.app.state, "auth_client", None)
    if client is None:
        raise HTTPException(503, "Authentication service not configured.")
    return client


async def get_current_user(
    creds: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    client=Depends(get_auth_client),
) -> dict:
    """Validate a Supabase JWT and return the user data. Raises 401 if invalid."""
    if not creds:
        raise HTTPException(status_code=401, detail="Authentication required")

    try:
        resp = await client.auth.get_user(creds.credentials)
        if not resp or not resp.user:
            raise HTTPException(status_code=401, detail="Invalid token")
        return {"id": resp.user.id, "email": resp.user.email, "role": resp.user.role}
    except HTTPException:
        raise
    except Exception as e:
        logger.debug("Token validation failed: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired token")


async def require_admin(request: Request, user: dict = Depends(get_current_user)) -> dict:
    """Signed-in staff member; restricted to `admin_emails` when configured."""
    allowed = {e.lower() for e in request.app.state.config.admin_emails}
    if allowed and (user.get("email") or "").lower() not in allowed:
        raise HTTPException(status_code=403, detail="Not an administrator")
    return user
