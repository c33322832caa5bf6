from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Message:
    message_id: int
    conversation_id: int
    sender_user_id: int
    content: str
    is_read: bool
    created_at: datetime


@dataclass(frozen=True)
class Conversation:
    """A thread between one customer profile and one master profile."""

    conversation_id: int
    customer_id: int
    master_id: int
    customer_user_id: int
    master_user_id: int
    last_message_at: datetime
    created_at: datetime
    order_id: Optional[int] = None
    customer_name: str = ""
    customer_avatar: Optional[str] = None
    master_name: str = ""
    master_avatar: Optional[str] = None

    def involves(self, user_id: int) -> bool:
        return int(user_id) in (self.customer_user_id, self.master_user_id)

    def other_user_id(self, user_id: int) -> int:
        return self.master_user_id if int(user_id) == self.customer_user_id else self.customer_user_id
