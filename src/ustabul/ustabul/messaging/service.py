from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso, now_local
from ..common.validators import optional_int
from ..core.enums import NotificationType, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..masters.repository import MasterRepository
from ..notifications.service import NotificationService
from ..users.model import SessionUser
from ..users.repository import UserRepository
from .model import Conversation, Message
from .repository import MessageRepository

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 50
RECEIVER_TYPES = frozenset({"", "customer", "master"})


def message_json(m: Message) -> dict:
    return {
        "id": m.message_id,
        "conversationId": m.conversation_id,
        "senderId": m.sender_user_id,
        "content": m.content,
        "isRead": m.is_read,
        "createdAt": iso(m.created_at),
    }


def _other_party(c: Conversation, user_id: int) -> dict:
    if int(user_id) == c.customer_user_id:
        return {"id": c.master_id, "userId": c.master_user_id, "name": c.master_name, "avatar": c.master_avatar, "type": "master"}
    return {"id": c.customer_id, "userId": c.customer_user_id, "name": c.customer_name, "avatar": c.customer_avatar, "type": "customer"}


class MessagingService:
    def __init__(
        self,
        messages: MessageRepository,
        users: UserRepository,
        masters: MasterRepository,
        notifications: NotificationService,
    ):
        self._messages = messages
        self._users = users
        self._masters = masters
        self._notifications = notifications

    def _conversation(self, actor: SessionUser, conversation_id: int) -> Conversation:
        conversation = self._messages.get_conversation(conversation_id)
        if not conversation:
            raise NotFoundError("Söhbət tapılmadı")
        if not conversation.involves(actor.user_id):
            raise AuthorizationError("Bu söhbətə giriş icazəniz yoxdur")
        return conversation

    def list_conversations(self, actor: SessionUser) -> list[dict]:
        result = []
        for c in self._messages.list_conversations(customer_id=actor.customer_id, master_id=actor.master_id):
            last = self._messages.last_message(c.conversation_id)
            result.append(
                {
                    "id": c.conversation_id,
                    "orderId": c.order_id,
                    "otherParty": _other_party(c, actor.user_id),
                    "lastMessage": message_json(last) if last else None,
                    "unreadCount": self._messages.count_unread(c.conversation_id, reader_user_id=actor.user_id),
                    "lastMessageAt": iso(c.last_message_at),
                }
            )
        return result

    def _resolve_by_receiver(
        self,
        actor: SessionUser,
        receiver_id: int,
        order_id: Optional[int],
        receiver_type: Optional[str] = None,
    ) -> Conversation:
        receiver_type = (receiver_type or "").strip().lower()
        if receiver_type not in RECEIVER_TYPES:
            raise ValidationError("Alıcı növü yanlışdır")
        if not receiver_type:
            receiver_type = "customer" if actor.role == Role.MASTER and actor.master_id is not None else "master"

        if receiver_type == "customer":
            # receiverId is a customer profile id
            if actor.master_id is None:
                raise AuthorizationError("Müştəriyə yalnız usta yaza bilər")
            customer = self._users.get_customer_by_id(receiver_id)
            if not customer:
                raise NotFoundError("Alıcı tapılmadı")
            if customer.user_id == actor.user_id:
                raise ValidationError("Özünüzə mesaj yaza bilməzsiniz")
            return self._messages.find_or_create_conversation(
                customer_id=receiver_id, master_id=actor.master_id, order_id=order_id
            )

        master = self._masters.get_by_id(receiver_id)
        if not master:
            raise NotFoundError("Alıcı tapılmadı")
        if master.user_id == actor.user_id:
            raise ValidationError("Özünüzə mesaj yaza bilməzsiniz")
        customer = self._users.ensure_customer_profile(actor.user_id)
        return self._messages.find_or_create_conversation(
            customer_id=customer.customer_id, master_id=master.master_id, order_id=order_id
        )

    def send(
        self,
        actor: SessionUser,
        *,
        content: Optional[str],
        conversation_id=None,
        receiver_id=None,
        order_id=None,
        receiver_type: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Message:
        content = (content or "").strip()
        if not content:
            raise ValidationError("Mesaj boş ola bilməz")

        conversation_id = optional_int(conversation_id, "Söhbət")
        receiver_id = optional_int(receiver_id, "Alıcı")
        order_id = optional_int(order_id, "Sifariş")

        if conversation_id:
            conversation = self._conversation(actor, conversation_id)
        elif receiver_id:
            conversation = self._resolve_by_receiver(actor, receiver_id, order_id, receiver_type)
        else:
            raise ValidationError("Söhbət və ya alıcı tələb olunur")

        if not conversation.involves(actor.user_id):
            raise AuthorizationError("Bu söhbətə giriş icazəniz yoxdur")

        message = self._messages.add_message(
            conversation.conversation_id, sender_user_id=actor.user_id, content=content, sent_at=now or now_local()
        )
        logger.debug("Message %s in conversation %s", message.message_id, conversation.conversation_id)

        preview = content if len(content) <= PREVIEW_LENGTH else content[:PREVIEW_LENGTH] + "..."
        self._notifications.notify(
            user_id=conversation.other_user_id(actor.user_id),
            type=NotificationType.MESSAGE_NEW,
            title=f"{actor.full_name} sizə mesaj yazdı",
            message=preview,
            data={"conversationId": conversation.conversation_id},
        )
        return message

    def open_conversation(self, actor: SessionUser, conversation_id: int) -> dict:
        conversation = self._conversation(actor, conversation_id)
        self._messages.mark_read(conversation_id, reader_user_id=actor.user_id)
        return {
            "conversation": {
                "id": conversation.conversation_id,
                "orderId": conversation.order_id,
                "otherParty": _other_party(conversation, actor.user_id),
                "createdAt": iso(conversation.created_at),
            },
            "messages": [message_json(m) for m in self._messages.list_messages(conversation_id)],
        }
