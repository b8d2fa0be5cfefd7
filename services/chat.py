import logging

from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import session_commit
from enums.chat_message_type import ChatMessageType
from exceptions.chat import ChatNotAllowedException, EmptyMessageException
from exceptions.order import OrderNotFoundException
from models.chat_message import (
    ChatMessage,
    ChatMessageDTO,
    ChatPageDTO,
    ChatListEntryDTO,
    SendMessageRequest,
)
from models.user import UserDTO
from repositories.chat_message import ChatMessageRepository
from repositories.order import OrderRepository
from repositories.supplier import SupplierRepository
from services.realtime import get_realtime_hub
from utils.pagination import page_offset, total_pages
from utils.phone import mask_phone_numbers

logger = logging.getLogger(__name__)


def to_dto(message: ChatMessage) -> ChatMessageDTO:
    dto = ChatMessageDTO.model_validate(message, from_attributes=True)
    dto.message = mask_phone_numbers(dto.message)
    return dto


class ChatService:

    @staticmethod
    async def _check_participants(order_id: int, user_id: int, counterpart_id: int, session: AsyncSession) -> None:
        """The two users must be the buyer and the supplier's user of the order."""
        order = await OrderRepository.get_by_id(order_id, session)
        if order is None:
            raise OrderNotFoundException(order_id)
        supplier = await SupplierRepository.get_by_id(order.supplier_id, session)
        participants = {order.buyer_id, supplier.user_id if supplier else None}
        if user_id == counterpart_id or user_id not in participants or counterpart_id not in participants:
            raise ChatNotAllowedException(order_id, user_id, counterpart_id)

    @staticmethod
    async def send(request: SendMessageRequest, current_user: UserDTO, session: AsyncSession) -> ChatMessageDTO:
        text = (request.message or "").strip()
        if request.type == ChatMessageType.TEXT and not text:
            raise EmptyMessageException()
        if request.type != ChatMessageType.TEXT and not request.media_url:
            raise EmptyMessageException()
        await ChatService._check_participants(request.order_id, current_user.id, request.receiver_id, session)

        message = await ChatMessageRepository.create(ChatMessage(
            sender_id=current_user.id,
            receiver_id=request.receiver_id,
            order_id=request.order_id,
            type=request.type,
            message=mask_phone_numbers(text) or None,
            media_url=request.media_url,
            read=False,
        ), session)
        await session_commit(session)

        dto = to_dto(message)
        hub = get_realtime_hub()
        if hub is not None:
            payload = dto.model_dump(mode="json")
            await hub.publish(request.receiver_id, "newMessage", payload)
            await hub.publish(current_user.id, "newMessage", payload)
        logger.debug(f"💬 Message {message.id} on order {message.order_id}: {current_user.id} -> {request.receiver_id}")
        return dto

    @staticmethod
    async def get_messages(counterpart_id: int, order_id: int, page: int, limit: int | None,
                           current_user: UserDTO, session: AsyncSession) -> ChatPageDTO:
        """Pages count from the newest message; each page is returned oldest first."""
        limit = limit or config.CHAT_PAGE_ENTRIES
        page = max(page, 1)
        await ChatService._check_participants(order_id, current_user.id, counterpart_id, session)
        messages = await ChatMessageRepository.get_conversation_page(
            current_user.id, counterpart_id, order_id, limit, page_offset(page, limit), session)
        count = await ChatMessageRepository.count_conversation(current_user.id, counterpart_id, order_id, session)
        return ChatPageDTO(
            current_page=page,
            total_pages=total_pages(count, limit),
            total_messages=count,
            messages=[to_dto(m) for m in reversed(messages)],
        )

    @staticmethod
    async def mark_as_read(sender_id: int, order_id: int, current_user: UserDTO, session: AsyncSession) -> int:
        updated = await ChatMessageRepository.mark_as_read(current_user.id, sender_id, order_id, session)
        await session_commit(session)
        return updated

    @staticmethod
    async def get_chat_list(current_user: UserDTO, session: AsyncSession) -> list[ChatListEntryDTO]:
        """Latest message per counterpart, newest conversation first."""
        messages = await ChatMessageRepository.get_involving_user(current_user.id, session)
        unread = await ChatMessageRepository.count_unread_by_sender(current_user.id, session)
        entries: dict[int, ChatListEntryDTO] = {}
        for message in messages:
            counterpart_id = message.receiver_id if message.sender_id == current_user.id else message.sender_id
            if counterpart_id not in entries:
                entries[counterpart_id] = ChatListEntryDTO(
                    counterpart_id=counterpart_id,
                    latest_message=to_dto(message),
                    unread_count=unread.get(counterpart_id, 0),
                )
        return list(entries.values())
