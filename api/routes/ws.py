"""WebSocket push channel.

The socket is push-only: clients do not send commands. Text frames are
echoed back as ``Unexpected Message: <text>``, binary frames get
``Invalid Message``. Comment events arrive through the connection
handle registered with the ChatBox.
"""
from __future__ import annotations

import uuid

import structlog
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from api.dependencies import get_ws_chat_box
from api.middleware.request_id import get_request_client_ip
from application.services.chat_service import ChatBox
from core.config import settings
from core.logging_config import get_logger
from domain.common.exceptions import ConnectionClosedError
from infrastructure.realtime.connection_handle import WebSocketConnectionHandle


logger = get_logger(__name__)


router = APIRouter(prefix="/ws", tags=["WebSocket"])


def _client_id(ws: WebSocket) -> str:
    client_id = (ws.query_params.get(settings.realtime.client_id_param) or "").strip()
    return client_id or uuid.uuid4().hex


@router.websocket("/{room}")
async def websocket_endpoint(
    ws: WebSocket,
    room: str,
    chat_box: ChatBox = Depends(get_ws_chat_box),
) -> None:
    await ws.accept()
    client_id = _client_id(ws)
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(client_id=client_id, client_ip=get_request_client_ip(ws))

    handle = WebSocketConnectionHandle(client_id, ws)
    handle.start()
    await chat_box.connect(client_id, handle, room_name=room)
    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            if message.get("text") is not None:
                handle.deliver(f"Unexpected Message: {message['text']}")
            elif message.get("bytes") is not None:
                handle.deliver("Invalid Message")
    except WebSocketDisconnect:
        pass
    except ConnectionClosedError:
        # 连接已被新连接取代或发送失败，socket 由 handle.close 关闭
        logger.info("ws_handle_closed", client_id=client_id)
    except Exception as exc:
        logger.error("ws_error", client_id=client_id, error=str(exc), exc_info=True)
    finally:
        await chat_box.disconnect(client_id, handle)
