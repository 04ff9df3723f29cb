"""Messaging inbox state."""
from salondesk.messaging.inbox import Chat, ChatInbox, ChatMessage

__all__ = ["Chat", "ChatInbox", "ChatMessage"]
