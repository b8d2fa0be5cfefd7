from sqlalchemy import select, func, update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from db import session_execute, session_flush
from models.chat_message import ChatMessage


class ChatMessageRepository:
    @staticmethod
    async def create(message: ChatMessage, session: AsyncSession) -> ChatMessage:
        session.add(message)
        await session_flush(session)
        return message

    @staticmethod
    def _conversation(user_id: int, counterpart_id: int, order_id: int):
        return and_(
            ChatMessage.order_id == order_id,
            or_(
                and_(ChatMessage.sender_id == user_id, ChatMessage.receiver_id == counterpart_id),
                and_(ChatMessage.sender_id == counterpart_id, ChatMessage.receiver_id == user_id),
            )
        )

    @staticmethod
    async def get_conversation_page(user_id: int, counterpart_id: int, order_id: int,
                                    limit: int, offset: int, session: AsyncSession) -> list[ChatMessage]:
        """Newest first."""
        stmt = (select(ChatMessage)
                .where(ChatMessageRepository._conversation(user_id, counterpart_id, order_id))
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
                .limit(limit)
                .offset(offset))
        messages = await session_execute(stmt, session)
        return list(messages.scalars().all())

    @staticmethod
    async def count_conversation(user_id: int, counterpart_id: int, order_id: int, session: AsyncSession) -> int:
        stmt = select(func.count(ChatMessage.id)).where(
            ChatMessageRepository._conversation(user_id, counterpart_id, order_id))
        count = await session_execute(stmt, session)
        return count.scalar_one()

    @staticmethod
    async def mark_as_read(receiver_id: int, sender_id: int, order_id: int, session: AsyncSession) -> int:
        stmt = (update(ChatMessage)
                .where(ChatMessage.receiver_id == receiver_id,
                       ChatMessage.sender_id == sender_id,
                       ChatMessage.order_id == order_id,
                       ChatMessage.read.is_(False))
                .values(read=True))
        result = await session_execute(stmt, session)
        return result.rowcount

    @staticmethod
    async def get_involving_user(user_id: int, session: AsyncSession) -> list[ChatMessage]:
        """All messages sent or received by the user, newest first."""
        stmt = (select(ChatMessage)
                .where(or_(ChatMessage.sender_id == user_id, ChatMessage.receiver_id == user_id))
                .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc()))
        messages = await session_execute(stmt, session)
        return list(messages.scalars().all())

    @staticmethod
    async def count_unread_by_sender(receiver_id: int, session: AsyncSession) -> dict[int, int]:
        stmt = (select(ChatMessage.sender_id, func.count(ChatMessage.id))
                .where(ChatMessage.receiver_id == receiver_id, ChatMessage.read.is_(False))
                .group_by(ChatMessage.sender_id))
        rows = await session_execute(stmt, session)
        return {sender_id: count for sender_id, count in rows.all()}
