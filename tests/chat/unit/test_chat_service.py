"""
Unit Tests: ChatService

Order-scoped buyer/supplier conversations covering:
- Participant checks
- Phone number masking
- Paging (newest page first, messages oldest first within a page)
- Read receipts and chat list
- Realtime push through the hub
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import as_dto
from enums.chat_message_type import ChatMessageType
from exceptions.chat import ChatNotAllowedException, EmptyMessageException
from models.chat_message import SendMessageRequest
from repositories.user import UserRepository
from services.chat import ChatService


@pytest.fixture
def conversation(test_session, make_user, make_supplier, make_product, make_order):
    """Buyer and supplier user sharing one order."""

    async def _setup():
        buyer = await make_user()
        supplier = await make_supplier()
        order = await make_order(buyer, supplier, [(await make_product(supplier), 1)])
        supplier_user = await UserRepository.get_by_id(supplier.user_id, test_session)
        return buyer, supplier_user, order

    return _setup


def text(receiver_id: int, order_id: int, message: str) -> SendMessageRequest:
    return SendMessageRequest(receiver_id=receiver_id, order_id=order_id, message=message)


class TestSend:

    @pytest.mark.asyncio
    async def test_buyer_messages_supplier(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()

        message = await ChatService.send(text(supplier_user.id, order.id, "  Is it in stock?  "), as_dto(buyer),
                                         test_session)

        assert message.message == "Is it in stock?"
        assert message.sender_id == buyer.id
        assert message.read is False

    @pytest.mark.asyncio
    async def test_phone_numbers_are_hidden(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()

        message = await ChatService.send(text(supplier_user.id, order.id, "Call me on 0712345678"), as_dto(buyer),
                                         test_session)

        assert message.message == "Call me on [hidden]"

    @pytest.mark.asyncio
    async def test_empty_text_is_rejected(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()

        with pytest.raises(EmptyMessageException):
            await ChatService.send(text(supplier_user.id, order.id, "   "), as_dto(buyer), test_session)

    @pytest.mark.asyncio
    async def test_image_needs_media_url(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()
        request = SendMessageRequest(receiver_id=supplier_user.id, order_id=order.id, type=ChatMessageType.IMAGE)

        with pytest.raises(EmptyMessageException):
            await ChatService.send(request, as_dto(buyer), test_session)

        request.media_url = "https://img.example.com/photo.jpg"
        message = await ChatService.send(request, as_dto(buyer), test_session)
        assert message.media_url == "https://img.example.com/photo.jpg"
        assert message.message is None

    @pytest.mark.asyncio
    async def test_outsider_cannot_join_conversation(self, test_session, conversation, make_user):
        buyer, supplier_user, order = await conversation()
        outsider = await make_user()

        with pytest.raises(ChatNotAllowedException):
            await ChatService.send(text(supplier_user.id, order.id, "hello"), as_dto(outsider), test_session)
        with pytest.raises(ChatNotAllowedException):
            await ChatService.send(text(outsider.id, order.id, "hello"), as_dto(buyer), test_session)

    @pytest.mark.asyncio
    async def test_cannot_message_self(self, test_session, conversation):
        buyer, _, order = await conversation()

        with pytest.raises(ChatNotAllowedException):
            await ChatService.send(text(buyer.id, order.id, "hello"), as_dto(buyer), test_session)

    @pytest.mark.asyncio
    async def test_message_is_pushed_to_both_participants(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()
        hub = MagicMock()
        hub.publish = AsyncMock()

        with patch("services.chat.get_realtime_hub", return_value=hub):
            await ChatService.send(text(supplier_user.id, order.id, "hi"), as_dto(buyer), test_session)

        receivers = [call.args[0] for call in hub.publish.await_args_list]
        assert receivers == [supplier_user.id, buyer.id]
        assert hub.publish.await_args_list[0].args[1] == "newMessage"
        assert hub.publish.await_args_list[0].args[2]["message"] == "hi"


class TestHistory:

    @pytest.mark.asyncio
    async def test_pages_start_from_newest(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()
        for i in range(5):
            await ChatService.send(text(supplier_user.id, order.id, f"message {i}"), as_dto(buyer), test_session)

        first = await ChatService.get_messages(buyer.id, order.id, 1, 2, as_dto(supplier_user), test_session)
        last = await ChatService.get_messages(supplier_user.id, order.id, 3, 2, as_dto(buyer), test_session)

        assert first.total_messages == 5
        assert first.total_pages == 3
        assert [m.message for m in first.messages] == ["message 3", "message 4"]
        assert [m.message for m in last.messages] == ["message 0"]

    @pytest.mark.asyncio
    async def test_mark_as_read_and_chat_list(self, test_session, conversation):
        buyer, supplier_user, order = await conversation()
        await ChatService.send(text(supplier_user.id, order.id, "one"), as_dto(buyer), test_session)
        await ChatService.send(text(supplier_user.id, order.id, "two"), as_dto(buyer), test_session)

        chats = await ChatService.get_chat_list(as_dto(supplier_user), test_session)
        assert len(chats) == 1
        assert chats[0].counterpart_id == buyer.id
        assert chats[0].unread_count == 2
        assert chats[0].latest_message.message == "two"

        assert await ChatService.mark_as_read(buyer.id, order.id, as_dto(supplier_user), test_session) == 2

        chats = await ChatService.get_chat_list(as_dto(supplier_user), test_session)
        assert chats[0].unread_count == 0
