"""In-process registry of live push connections.

Mutated by the transport on connect/disconnect, read on every comment
fan-out. The lock is held only for dictionary access; closing a
replaced handle happens outside of it.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional

from application.ports.realtime import ConnectionHandle
from core.logging_config import get_logger


logger = get_logger(__name__)


class ConnectionRegistry:
    """Map client identifiers to their current ConnectionHandle."""

    def __init__(self) -> None:
        self._by_client: Dict[str, ConnectionHandle] = {}
        self._lock = asyncio.Lock()

    async def register(self, client_id: str, handle: ConnectionHandle) -> None:
        async with self._lock:
            previous = self._by_client.get(client_id)
            self._by_client[client_id] = handle
        if previous is not None and previous is not handle:
            # a reconnect supersedes the old connection
            logger.info("ws_connection_replaced", client_id=client_id)
            await previous.close()

    async def unregister(self, client_id: str, handle: Optional[ConnectionHandle] = None) -> bool:
        """Remove ``client_id``; with ``handle`` given, only if it is still the current one."""
        async with self._lock:
            current = self._by_client.get(client_id)
            if current is None:
                return False
            if handle is not None and current is not handle:
                return False
            del self._by_client[client_id]
            return True

    async def resolve(self, client_id: str) -> Optional[ConnectionHandle]:
        async with self._lock:
            return self._by_client.get(client_id)

    async def resolve_many(self, client_ids: Iterable[str]) -> Dict[str, ConnectionHandle]:
        async with self._lock:
            return {
                cid: self._by_client[cid]
                for cid in client_ids
                if cid in self._by_client
            }

    async def count(self) -> int:
        async with self._lock:
            return len(self._by_client)

    async def clear(self) -> List[ConnectionHandle]:
        """Drop every entry and return the handles for the caller to close."""
        async with self._lock:
            handles = list(self._by_client.values())
            self._by_client.clear()
        return handles
