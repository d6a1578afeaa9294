"""
房间领域实体 - 名称、成员集合与只增不减的评论日志
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import FrozenSet, List, Set, Tuple


@dataclass(frozen=True)
class RoomSummary:
    """房间列表投影（名称 + 成员）"""
    name: str
    members: FrozenSet[str]


@dataclass(frozen=True)
class RoomSnapshot:
    """房间详情投影（名称 + 成员 + 评论）"""
    name: str
    members: FrozenSet[str]
    comments: Tuple[str, ...]


@dataclass(eq=False)
class Room:
    """房间实体

    所有可变字段（members / comments）只能在持有 ``lock`` 时修改；
    ``name`` 创建后不可变，``comments`` 只追加不删除。
    """

    name: str
    members: Set[str] = field(default_factory=set)
    comments: List[str] = field(default_factory=list)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    async def append_comment(self, text: str) -> int:
        """追加评论，返回追加后的评论数。不对内容做任何校验。"""
        async with self.lock:
            self.comments.append(text)
            return len(self.comments)

    async def snapshot_comments(self) -> List[str]:
        async with self.lock:
            return list(self.comments)

    async def snapshot_members(self) -> Set[str]:
        async with self.lock:
            return set(self.members)

    async def add_member(self, client_id: str) -> bool:
        """加入成员；已是成员时返回 False"""
        async with self.lock:
            if client_id in self.members:
                return False
            self.members.add(client_id)
            return True

    async def remove_member(self, client_id: str) -> bool:
        async with self.lock:
            if client_id not in self.members:
                return False
            self.members.discard(client_id)
            return True

    async def summary(self) -> RoomSummary:
        async with self.lock:
            return RoomSummary(name=self.name, members=frozenset(self.members))

    async def snapshot(self) -> RoomSnapshot:
        async with self.lock:
            return RoomSnapshot(
                name=self.name,
                members=frozenset(self.members),
                comments=tuple(self.comments),
            )
