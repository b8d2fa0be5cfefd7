"""
Buyer/supplier chat: REST history plus a WebSocket for live delivery.

WebSocket protocol, JSON frames {"event": ..., "data": ...}:
- client -> server: registerUser, sendMessage (data = SendMessageRequest)
- server -> client: onlineUsers, newMessage, notification, error
"""

import logging

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

import config
from db import get_db_session
from exceptions.base import MarketplaceException
from models.chat_message import (
    ChatMessageDTO,
    ChatPageDTO,
    ChatListEntryDTO,
    SendMessageRequest,
    MarkAsReadRequest,
)
from models.user import UserDTO
from services.chat import ChatService
from services.realtime import get_realtime_hub
from web.dependencies import get_session, get_current_user, get_user_from_token

logger = logging.getLogger(__name__)

chat_router = APIRouter(prefix="/chat", tags=["chat"])


@chat_router.post("/messages", status_code=status.HTTP_201_CREATED)
async def send_message(payload: SendMessageRequest,
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> ChatMessageDTO:
    return await ChatService.send(payload, current_user, session)


@chat_router.get("/messages")
async def get_messages(counterpart_id: int, order_id: int,
                       page: int = Query(1, ge=1),
                       limit: int | None = Query(None, ge=1, le=100),
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> ChatPageDTO:
    return await ChatService.get_messages(counterpart_id, order_id, page, limit or config.CHAT_PAGE_ENTRIES,
                                          current_user, session)


@chat_router.post("/read")
async def mark_as_read(payload: MarkAsReadRequest,
                       current_user: UserDTO = Depends(get_current_user),
                       session: AsyncSession = Depends(get_session)) -> dict:
    updated = await ChatService.mark_as_read(payload.sender_id, payload.order_id, current_user, session)
    return {"success": True, "updated": updated}


@chat_router.get("/list")
async def chat_list(current_user: UserDTO = Depends(get_current_user),
                    session: AsyncSession = Depends(get_session)) -> list[ChatListEntryDTO]:
    return await ChatService.get_chat_list(current_user, session)


@chat_router.get("/online")
async def online_users(current_user: UserDTO = Depends(get_current_user)) -> list[int]:
    hub = get_realtime_hub()
    return await hub.online_users() if hub is not None else []


async def _send_error(websocket: WebSocket, message: str) -> None:
    await websocket.send_json({"event": "error", "data": {"message": message}})


@chat_router.websocket("/ws")
async def chat_socket(websocket: WebSocket, token: str | None = None):
    hub = get_realtime_hub()
    if hub is None or not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        async with get_db_session() as session:
            user = await get_user_from_token(token, session)
    except MarketplaceException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    await hub.connect(user.id, websocket)
    logger.info(f"🔌 Chat socket opened for user {user.id}")
    try:
        while True:
            frame = await websocket.receive_json()
            event = frame.get("event") if isinstance(frame, dict) else None
            match event:
                case "registerUser":
                    await websocket.send_json({"event": "onlineUsers", "data": await hub.online_users()})
                case "sendMessage":
                    try:
                        request = SendMessageRequest.model_validate(frame.get("data") or {})
                        async with get_db_session() as session:
                            await ChatService.send(request, user, session)
                    except ValidationError as e:
                        await _send_error(websocket, f"Invalid message: {e.error_count()} validation error(s)")
                    except MarketplaceException as e:
                        await _send_error(websocket, e.message)
                case _:
                    await _send_error(websocket, f"Unknown event: {event}")
    except WebSocketDisconnect:
        pass
    except ValueError as e:
        logger.warning(f"Closing chat socket of user {user.id}: {e}")
    finally:
        await hub.disconnect(user.id, websocket)
        logger.info(f"🔌 Chat socket closed for user {user.id}")
