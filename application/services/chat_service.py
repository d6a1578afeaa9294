"""Application service for rooms, comments and push fan-out.

ChatBox composes the room registry and the connection registry. One
instance is built at application startup and shared by every request
handler; nothing here is a module-level singleton.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from application.dto import RoomDetailDTO, RoomSummaryDTO
from application.ports.realtime import CommentEvent, ConnectionHandle
from core.logging_config import get_logger
from domain.common.exceptions import ConnectionClosedError, RoomNotFoundException
from domain.room.registry import CreateStatus, RoomRegistry
from infrastructure.realtime.connection_registry import ConnectionRegistry


logger = get_logger(__name__)


class ChatBox:
    def __init__(
        self,
        *,
        rooms: Optional[RoomRegistry] = None,
        connections: Optional[ConnectionRegistry] = None,
    ) -> None:
        self._rooms = rooms if rooms is not None else RoomRegistry()
        self._conn = connections if connections is not None else ConnectionRegistry()

    @property
    def rooms(self) -> RoomRegistry:
        return self._rooms

    @property
    def connections(self) -> ConnectionRegistry:
        return self._conn

    # -------------------- Rooms --------------------
    async def create_room(self, name: str) -> CreateStatus:
        status = await self._rooms.create_room(name)
        if status is CreateStatus.CREATED:
            logger.info("room_created", room=name)
        return status

    async def list_rooms(self) -> List[RoomSummaryDTO]:
        return [RoomSummaryDTO.from_domain(s) async for s in self._rooms.list_rooms()]

    async def get_room_detail(self, name: str) -> RoomDetailDTO:
        room = await self._rooms.get_room(name)
        if room is None:
            raise RoomNotFoundException(name)
        return RoomDetailDTO.from_domain(await room.snapshot())

    async def get_comments(self, name: str) -> List[str]:
        room = await self._rooms.get_room(name)
        if room is None:
            raise RoomNotFoundException(name)
        return await room.snapshot_comments()

    # -------------------- Comments --------------------
    async def post_comment(self, room_name: str, text: str) -> int:
        """Append ``text`` to the room and push it to every connected member.

        Returns the room's comment count after the append. Raises
        RoomNotFoundException when the room does not exist. Delivery
        problems never fail the post.
        """
        room = await self._rooms.get_room(room_name)
        if room is None:
            raise RoomNotFoundException(room_name)

        count = await room.append_comment(text)
        members = await room.snapshot_members()
        delivered = await self._fan_out(room_name, text, members)

        logger.info(
            "comment_posted",
            room=room_name,
            comments=count,
            members=len(members),
            delivered=delivered,
        )
        return count

    async def _fan_out(self, room_name: str, text: str, members: Iterable[str]) -> int:
        members = list(members)
        if not members:
            return 0
        # members without a live connection are skipped
        handles = await self._conn.resolve_many(members)
        if not handles:
            return 0
        payload = CommentEvent(room=room_name, comment=text).to_wire()
        delivered = 0
        for client_id, handle in handles.items():
            try:
                handle.deliver(payload)
                delivered += 1
            except ConnectionClosedError:
                logger.info("comment_delivery_closed", room=room_name, client_id=client_id)
                await self._conn.unregister(client_id, handle)
            except Exception as exc:
                logger.warning(
                    "comment_delivery_failed",
                    room=room_name,
                    client_id=client_id,
                    error=str(exc),
                )
        return delivered

    # -------------------- Membership --------------------
    async def join_room(self, room_name: str, client_id: str) -> bool:
        room = await self._rooms.get_room(room_name)
        if room is None:
            raise RoomNotFoundException(room_name)
        joined = await room.add_member(client_id)
        if joined:
            logger.info("room_joined", room=room_name, client_id=client_id)
        return joined

    async def leave_room(self, room_name: str, client_id: str) -> bool:
        room = await self._rooms.get_room(room_name)
        if room is None:
            return False
        left = await room.remove_member(client_id)
        if left:
            logger.info("room_left", room=room_name, client_id=client_id)
        return left

    # -------------------- Connection lifecycle --------------------
    async def connect(
        self,
        client_id: str,
        handle: ConnectionHandle,
        *,
        room_name: Optional[str] = None,
    ) -> bool:
        """Register ``handle`` and join ``room_name`` when it exists.

        Returns whether the client is a member of the room afterwards.
        """
        await self._conn.register(client_id, handle)
        logger.info("ws_connected", client_id=client_id, room=room_name)
        if not room_name:
            return False
        room = await self._rooms.get_room(room_name)
        if room is None:
            logger.info("ws_room_missing", client_id=client_id, room=room_name)
            return False
        await room.add_member(client_id)
        return True

    async def disconnect(self, client_id: str, handle: ConnectionHandle) -> None:
        await self._conn.unregister(client_id, handle)
        left: List[str] = []
        # the handle may already have been pruned by a fan-out; only a newer
        # connection for the same client keeps its memberships
        if await self._conn.resolve(client_id) is None:
            for room in await self._rooms.rooms():
                if await room.remove_member(client_id):
                    left.append(room.name)
        await handle.close()
        logger.info("ws_disconnected", client_id=client_id, rooms_left=len(left))
