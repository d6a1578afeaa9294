"""房间与评论相关路由。"""
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status
from starlette.requests import ClientDisconnect

from api.dependencies import get_chat_box
from application.dto import RoomDetailDTO, RoomSummaryDTO
from application.services.chat_service import ChatBox
from domain.common.exceptions import InvalidCommentException
from domain.room.registry import CreateStatus
from shared.codes import BusinessCode

router = APIRouter(tags=["Rooms"])


@router.get("/rooms", summary="房间列表", response_model=List[RoomSummaryDTO])
async def list_rooms(chat_box: ChatBox = Depends(get_chat_box)):
    return await chat_box.list_rooms()


@router.post(
    "/room/{room}",
    summary="创建房间（幂等）",
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "房间已存在"}},
)
async def create_room(room: str, chat_box: ChatBox = Depends(get_chat_box)) -> Response:
    result = await chat_box.create_room(room)
    if result is CreateStatus.CREATED:
        return Response(status_code=status.HTTP_201_CREATED)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/room/{room}", summary="房间详情", response_model=RoomDetailDTO)
async def get_room(room: str, chat_box: ChatBox = Depends(get_chat_box)):
    return await chat_box.get_room_detail(room)


@router.post("/room/{room}/comments", summary="发表评论")
async def post_comment(room: str, request: Request, chat_box: ChatBox = Depends(get_chat_box)) -> Response:
    # 请求体是原始 UTF-8 文本，不做 JSON 解析
    try:
        raw = await request.body()
    except ClientDisconnect:
        raise InvalidCommentException("Could not read comment body", code=BusinessCode.BODY_READ_ERROR)
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise InvalidCommentException()
    await chat_box.post_comment(room, text)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/room/{room}/comments", summary="评论列表", response_model=List[str])
async def get_comments(room: str, chat_box: ChatBox = Depends(get_chat_box)):
    return await chat_box.get_comments(room)
