"""
Realtime port and push event DTOs (contracts-first).

The application layer only talks to live client connections through the
ConnectionHandle protocol, so the fan-out logic stays decoupled from the
concrete WebSocket transport (infrastructure).
"""
from __future__ import annotations

from typing import Literal, Protocol

from pydantic import BaseModel


class CommentEvent(BaseModel):
    """Event pushed to room members when a comment is posted.

    Wire format: ``{"topic":"comment","room":"<room>","comment":"<comment>"}``.
    Serialized through pydantic's JSON encoder so quotes and control
    characters in either field are escaped.
    """

    topic: Literal["comment"] = "comment"
    room: str
    comment: str

    def to_wire(self) -> str:
        return self.model_dump_json()


class ConnectionHandle(Protocol):
    """Capability to push text payloads to a single live client connection.

    ``deliver`` is fire-and-forget: it must not await network I/O and
    raises ``ConnectionClosedError`` once the connection is gone.
    """

    client_id: str

    def deliver(self, payload: str) -> None: ...

    async def close(self) -> None: ...


__all__ = ["CommentEvent", "ConnectionHandle"]
