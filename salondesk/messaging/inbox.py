"""In-memory WhatsApp inbox fed by realtime insert events."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)

PREVIEW_CHARS = 80


@dataclass
class ChatMessage:
    id: str
    chat_id: str
    body: str
    created_at: datetime
    direction: str = "inbound"


@dataclass
class Chat:
    """One conversation row as listed in the ``chats_v`` view."""

    id: str
    name: str
    last_message_at: Optional[datetime] = None
    last_message: str = ""
    unread: int = 0
    messages: List[ChatMessage] = field(default_factory=list)


def _parse_timestamp(raw: Any) -> Optional[datetime]:
    if isinstance(raw, datetime):
        return raw
    if not isinstance(raw, str) or not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def _preview(body: str) -> str:
    compact = " ".join(body.split())
    if len(compact) <= PREVIEW_CHARS:
        return compact
    return compact[: PREVIEW_CHARS - 1].rstrip() + "…"


def _sort_key(chat: Chat) -> datetime:
    return chat.last_message_at or datetime.min.replace(tzinfo=timezone.utc)


class ChatInbox:
    """Chats ordered by recency, updated one inserted message row at a time."""

    def __init__(self, chats: Iterable[Mapping[str, Any]] = ()) -> None:
        self._chats: Dict[str, Chat] = {}
        self._seen: set[str] = set()
        for row in chats:
            chat_id = str(row.get("chat_id") or row.get("id") or "")
            if not chat_id:
                continue
            self._chats[chat_id] = Chat(
                id=chat_id,
                name=row.get("name") or row.get("contact_name") or chat_id,
                last_message_at=_parse_timestamp(row.get("last_message_at")),
                last_message=row.get("last_message") or "",
                unread=int(row.get("unread") or 0),
            )

    @property
    def chats(self) -> List[Chat]:
        """Chats newest-first; stable for equal timestamps."""

        return sorted(self._chats.values(), key=_sort_key, reverse=True)

    def get(self, chat_id: str) -> Optional[Chat]:
        return self._chats.get(chat_id)

    def apply_inserted_message(self, payload: Mapping[str, Any]) -> Optional[ChatMessage]:
        """Handle a realtime INSERT (``{"new": row}`` / ``{"record": row}``) or a bare row.

        Returns the appended message, or ``None`` for duplicates and rows
        without a chat id.
        """

        row = payload.get("new") or payload.get("record") or payload
        message_id = str(row.get("id") or "")
        chat_id = str(row.get("chat_id") or row.get("phone") or "")
        if not chat_id:
            logger.debug("Ignoring message without chat id: %r", row)
            return None
        if message_id and message_id in self._seen:
            return None

        created_at = _parse_timestamp(row.get("created_at")) or datetime.now(timezone.utc)
        message = ChatMessage(
            id=message_id,
            chat_id=chat_id,
            body=str(row.get("body") or row.get("message") or ""),
            created_at=created_at,
            direction=row.get("direction") or "inbound",
        )

        chat = self._chats.get(chat_id)
        if chat is None:
            chat = Chat(id=chat_id, name=row.get("contact_name") or chat_id)
            self._chats[chat_id] = chat
        chat.messages.append(message)
        if chat.last_message_at is None or created_at >= chat.last_message_at:
            chat.last_message_at = created_at
            chat.last_message = _preview(message.body)
        if message.direction == "inbound":
            chat.unread += 1
        if message_id:
            self._seen.add(message_id)
        return message

    def mark_read(self, chat_id: str) -> None:
        chat = self._chats.get(chat_id)
        if chat is not None:
            chat.unread = 0
