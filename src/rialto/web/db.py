"""Supabase async client init.

Uses two Supabase clients:
- "auth client" (anon key): for auth operations (sign-in, sign-up, get_user)
- "service client" (service key): for DB operations that bypass RLS

Both are returned to the caller, which keeps them on app.state for the
lifetime of the process.
"""

from __future__ import annotations

import logging
import os

from supabase import AsyncClient, acreate_client

logger = logging.getLogger(__name__)


async def init_supabase() -> tuple[AsyncClient, AsyncClient]:
    """Create the async Supabase clients from the environment."""
    url = os.environ.get("SUPABASE_URL", "")
    anon_key = os.environ.get("SUPABASE_ANON_KEY", "")
    service_key = os.environ.get("SUPABASE_SERVICE_KEY", "")

    if not url or not anon_key:
        raise RuntimeError(
            "SUPABASE_URL and SUPABASE_ANON_KEY environment variables are required"
        )

    auth_client = await acreate_client(url, anon_key)
    logger.info("Supabase auth client initialized (%s)", url)

    if service_key:
        service_client = await acreate_client(url, service_key)
        logger.info("Supabase service client initialized (full DB access)")
    else:
        logger.warning(
            "SUPABASE_SERVICE_KEY not set, using anon key for DB operations. "
            "Some operations may fail due to RLS policies."
        )
        service_client = auth_client

    return auth_client, service_client
