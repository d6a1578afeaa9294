"""In-process room registry.

The registry lock only guards the shape of the name -> Room mapping.
Callers take a Room reference under the registry lock, release it, and
only then acquire the room's own lock. The order (registry, then room)
is never reversed, so the two scopes cannot deadlock and posts to
different rooms never contend on anything but the short lookup.
"""
from __future__ import annotations

import asyncio
from enum import Enum
from typing import AsyncIterator, Dict, List, Optional

from .entity import Room, RoomSummary


class CreateStatus(str, Enum):
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"


class RoomRegistry:
    """Map room names to Room entities."""

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._lock = asyncio.Lock()

    async def create_room(self, name: str) -> CreateStatus:
        # check-then-insert under one critical section
        async with self._lock:
            if name in self._rooms:
                return CreateStatus.ALREADY_EXISTS
            self._rooms[name] = Room(name=name)
            return CreateStatus.CREATED

    async def get_room(self, name: str) -> Optional[Room]:
        async with self._lock:
            return self._rooms.get(name)

    async def list_rooms(self) -> AsyncIterator[RoomSummary]:
        """Yield a summary per room, each read under that room's own lock."""
        for room in await self.rooms():
            yield await room.summary()

    async def count(self) -> int:
        async with self._lock:
            return len(self._rooms)

    async def rooms(self) -> List[Room]:
        async with self._lock:
            return list(self._rooms.values())
