from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Conversation, Message


class MessageRepository(Protocol):
    def get_conversation(self, conversation_id: int) -> Optional[Conversation]:
        raise NotImplementedError

    def find_or_create_conversation(
        self, *, customer_id: int, master_id: int, order_id: Optional[int]
    ) -> Conversation:
        raise NotImplementedError

    def list_conversations(
        self, *, customer_id: Optional[int], master_id: Optional[int]
    ) -> Sequence[Conversation]:
        raise NotImplementedError

    def add_message(self, conversation_id: int, *, sender_user_id: int, content: str, sent_at: datetime) -> Message:
        """Store the message and bump the conversation's last activity."""
        raise NotImplementedError

    def list_messages(self, conversation_id: int) -> Sequence[Message]:
        raise NotImplementedError

    def last_message(self, conversation_id: int) -> Optional[Message]:
        raise NotImplementedError

    def count_unread(self, conversation_id: int, *, reader_user_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, conversation_id: int, *, reader_user_id: int) -> int:
        raise NotImplementedError
