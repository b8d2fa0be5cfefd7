from datetime import datetime

from pydantic import BaseModel, Field
from sqlalchemy import Column, Integer, ForeignKey, DateTime, Text, String, Boolean, Index
from sqlalchemy import Enum as SQLEnum

from enums.chat_message_type import ChatMessageType
from models.base import Base


class ChatMessage(Base):
    __tablename__ = 'chat_messages'

    id = Column(Integer, primary_key=True)
    sender_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False)
    receiver_id = Column(Integer, ForeignKey('users.id', ondelete="CASCADE"), nullable=False)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete="CASCADE"), nullable=False)
    type = Column(SQLEnum(ChatMessageType), nullable=False, default=ChatMessageType.TEXT)
    message = Column(Text, nullable=True)
    media_url = Column(String, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.now, nullable=False)

    __table_args__ = (
        Index('ix_chat_messages_order_created', 'order_id', 'created_at'),
        Index('ix_chat_messages_receiver_read', 'receiver_id', 'read'),
    )


class ChatMessageDTO(BaseModel):
    id: int | None = None
    sender_id: int | None = None
    receiver_id: int | None = None
    order_id: int | None = None
    type: ChatMessageType | None = None
    message: str | None = None
    media_url: str | None = None
    read: bool | None = None
    created_at: datetime | None = None


class ChatPageDTO(BaseModel):
    current_page: int
    total_pages: int
    total_messages: int
    messages: list[ChatMessageDTO]


class ChatListEntryDTO(BaseModel):
    counterpart_id: int
    latest_message: ChatMessageDTO
    unread_count: int = 0


class SendMessageRequest(BaseModel):
    receiver_id: int
    order_id: int
    type: ChatMessageType = ChatMessageType.TEXT
    message: str | None = Field(default=None, max_length=4000)
    media_url: str | None = None


class MarkAsReadRequest(BaseModel):
    sender_id: int
    order_id: int
