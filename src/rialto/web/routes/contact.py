"""Public contact form."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rialto.inbox import ContactInbox
from rialto.models import ContactMessage, ContactMessageRequest
from rialto.web.deps import get_inbox

router = APIRouter()


@router.post("", response_model=ContactMessage, status_code=201)
async def submit_message(body: ContactMessageRequest, inbox: ContactInbox = Depends(get_inbox)):
    return await inbox.submit(body)
