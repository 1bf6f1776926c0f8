"""Staff auth routes: email and password via Supabase.

Flow:
1. POST /login  → returns a Supabase JWT for the admin dashboard
2. GET  /me     → the signed-in staff member
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from rialto.web.deps import get_auth_client, require_admin
from rialto.web.schemas import LoginRequest, LoginResponse, StaffProfileResponse

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, client=Depends(get_auth_client)):
    try:
        resp = await client.auth.sign_in_with_password({"email": body.email, "password": body.password})
    except Exception as e:
        logger.warning("Sign-in failed for %s: %s", body.email, e)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not resp.session:
        raise HTTPException(status_code=401, detail="Sign-in failed: no session returned")

    return LoginResponse(
        access_token=resp.session.access_token,
        refresh_token=resp.session.refresh_token,
        user_id=resp.user.id,
    )


@router.get("/me", response_model=StaffProfileResponse)
async def me(user: dict = Depends(require_admin)):
    return StaffProfileResponse(user_id=user["id"], email=user.get("email"))
