from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, or_, select, update

from ..database.base import transaction
from ..database.schema import ConversationRow, MessageRow
from ..extensions import db
from .model import Conversation, Message
from .repository import MessageRepository


def _name(profile) -> str:
    return f"{profile.first_name} {profile.last_name}".strip() if profile else ""


def _to_conversation(row: ConversationRow) -> Conversation:
    return Conversation(
        conversation_id=int(row.id),
        customer_id=int(row.customer_id),
        master_id=int(row.master_id),
        customer_user_id=int(row.customer.user_id),
        master_user_id=int(row.master.user_id),
        last_message_at=row.last_message_at,
        created_at=row.created_at,
        order_id=row.order_id,
        customer_name=_name(row.customer),
        customer_avatar=row.customer.avatar,
        master_name=_name(row.master),
        master_avatar=row.master.avatar,
    )


def _to_message(row: MessageRow) -> Message:
    return Message(
        message_id=int(row.id),
        conversation_id=int(row.conversation_id),
        sender_user_id=int(row.sender_user_id),
        content=row.content,
        is_read=bool(row.is_read),
        created_at=row.created_at,
    )


class SQLAlchemyMessageRepository(MessageRepository):
    def get_conversation(self, conversation_id: int) -> Optional[Conversation]:
        row = db.session.get(ConversationRow, int(conversation_id))
        return _to_conversation(row) if row else None

    def find_or_create_conversation(
        self, *, customer_id: int, master_id: int, order_id: Optional[int]
    ) -> Conversation:
        with transaction() as session:
            row = session.execute(
                select(ConversationRow).where(
                    ConversationRow.customer_id == int(customer_id), ConversationRow.master_id == int(master_id)
                )
            ).scalars().first()
            if not row:
                row = ConversationRow(customer_id=int(customer_id), master_id=int(master_id), order_id=order_id)
                session.add(row)
                session.flush()
            elif order_id and not row.order_id:
                row.order_id = order_id
            return _to_conversation(row)

    def list_conversations(
        self, *, customer_id: Optional[int], master_id: Optional[int]
    ) -> Sequence[Conversation]:
        clauses = []
        if customer_id is not None:
            clauses.append(ConversationRow.customer_id == int(customer_id))
        if master_id is not None:
            clauses.append(ConversationRow.master_id == int(master_id))
        if not clauses:
            return []
        rows = db.session.execute(
            select(ConversationRow).where(or_(*clauses)).order_by(ConversationRow.last_message_at.desc())
        ).scalars()
        return [_to_conversation(r) for r in rows]

    def add_message(self, conversation_id: int, *, sender_user_id: int, content: str, sent_at: datetime) -> Message:
        with transaction() as session:
            row = MessageRow(
                conversation_id=int(conversation_id),
                sender_user_id=int(sender_user_id),
                content=content,
                created_at=sent_at,
            )
            session.add(row)
            session.get(ConversationRow, int(conversation_id)).last_message_at = sent_at
            session.flush()
            return _to_message(row)

    def list_messages(self, conversation_id: int) -> Sequence[Message]:
        rows = db.session.execute(
            select(MessageRow)
            .where(MessageRow.conversation_id == int(conversation_id))
            .order_by(MessageRow.created_at.asc(), MessageRow.id.asc())
        ).scalars()
        return [_to_message(r) for r in rows]

    def last_message(self, conversation_id: int) -> Optional[Message]:
        row = db.session.execute(
            select(MessageRow)
            .where(MessageRow.conversation_id == int(conversation_id))
            .order_by(MessageRow.created_at.desc(), MessageRow.id.desc())
            .limit(1)
        ).scalar_one_or_none()
        return _to_message(row) if row else None

    def count_unread(self, conversation_id: int, *, reader_user_id: int) -> int:
        return int(
            db.session.execute(
                select(func.count(MessageRow.id)).where(
                    MessageRow.conversation_id == int(conversation_id),
                    MessageRow.sender_user_id != int(reader_user_id),
                    MessageRow.is_read.is_(False),
                )
            ).scalar_one()
        )

    def mark_read(self, conversation_id: int, *, reader_user_id: int) -> int:
        with transaction() as session:
            result = session.execute(
                update(MessageRow)
                .where(
                    MessageRow.conversation_id == int(conversation_id),
                    MessageRow.sender_user_id != int(reader_user_id),
                    MessageRow.is_read.is_(False),
                )
                .values(is_read=True)
                .execution_options(synchronize_session=False)
            )
            return int(result.rowcount or 0)
