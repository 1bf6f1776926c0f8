"""Contact form messages and the staff inbox."""

from __future__ import annotations

import logging
from typing import Any

from rialto.errors import NotFoundError, ValidationError
from rialto.models import ContactMessage, ContactMessageRequest, MessageStatus, parse_model

logger = logging.getLogger(__name__)


class ContactInbox:
    def __init__(self, store) -> None:
        self.store = store

    async def submit(self, data: ContactMessageRequest | dict[str, Any]) -> ContactMessage:
        request = parse_model(ContactMessageRequest, data)
        message = await self.store.insert_contact_message(request.to_row())
        logger.info("Contact message %s received (%s)", message.id, message.subject.value)
        return message

    async def list_messages(
        self,
        *,
        status: MessageStatus | str | None = None,
        search: str | None = None,
    ) -> list[ContactMessage]:
        """Newest first; `search` matches names, email, subject and body, case-insensitively."""
        messages = await self.store.list_contact_messages(status=_parse_status(status) if status else None)
        if search and search.strip():
            messages = [m for m in messages if m.matches(search.strip())]
        return messages

    async def update_status(self, message_id: str, status: MessageStatus | str) -> ContactMessage:
        message = await self.store.update_contact_message(
            message_id, {"status": _parse_status(status).value}
        )
        if message is None:
            raise NotFoundError("Message not found")
        return message


def _parse_status(status: MessageStatus | str) -> MessageStatus:
    try:
        return MessageStatus(status)
    except ValueError:
        raise ValidationError(f"Unknown message status: {status}") from None
