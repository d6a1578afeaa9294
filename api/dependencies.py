"""
API依赖项 - 从应用状态获取共享的 ChatBox 实例
"""
from fastapi import Request, WebSocket

from application.services.chat_service import ChatBox


def _chat_box_from_state(state) -> ChatBox:
    chat_box = getattr(state, "chat_box", None)
    if chat_box is None:
        raise RuntimeError("ChatBox not initialized. Ensure lifespan sets app.state.chat_box.")
    return chat_box


async def get_chat_box(request: Request) -> ChatBox:
    return _chat_box_from_state(request.app.state)


async def get_ws_chat_box(ws: WebSocket) -> ChatBox:
    return _chat_box_from_state(ws.app.state)
