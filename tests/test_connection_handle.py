import asyncio

import pytest

from domain.common.exceptions import ConnectionClosedError
from infrastructure.realtime.connection_handle import WebSocketConnectionHandle
from infrastructure.realtime.connection_registry import ConnectionRegistry
from tests.stubs import FakeWebSocket, RecordingHandle


@pytest.mark.asyncio
async def test_deliver_sends_in_order():
    ws = FakeWebSocket()
    handle = WebSocketConnectionHandle("alice", ws, queue_max=10, overflow_policy="drop_oldest")
    handle.start()
    for text in ["a", "b", "c"]:
        handle.deliver(text)
    await asyncio.wait_for(handle.flush(), timeout=1)
    assert ws.sent == ["a", "b", "c"]
    await handle.close()


@pytest.mark.asyncio
async def test_drop_oldest_keeps_newest_payloads():
    ws = FakeWebSocket()
    handle = WebSocketConnectionHandle("alice", ws, queue_max=2, overflow_policy="drop_oldest")
    for text in ["a", "b", "c"]:
        handle.deliver(text)
    handle.start()
    await asyncio.wait_for(handle.flush(), timeout=1)
    assert ws.sent == ["b", "c"]
    await handle.close()


@pytest.mark.asyncio
async def test_drop_new_discards_overflow():
    ws = FakeWebSocket()
    handle = WebSocketConnectionHandle("alice", ws, queue_max=2, overflow_policy="drop_new")
    for text in ["a", "b", "c"]:
        handle.deliver(text)
    handle.start()
    await asyncio.wait_for(handle.flush(), timeout=1)
    assert ws.sent == ["a", "b"]
    await handle.close()


@pytest.mark.asyncio
async def test_disconnect_policy_closes_socket():
    ws = FakeWebSocket()
    handle = WebSocketConnectionHandle("alice", ws, queue_max=1, overflow_policy="disconnect")
    handle.deliver("a")
    handle.deliver("b")
    assert handle.closed
    await asyncio.sleep(0)
    assert ws.close_code == 1013
    with pytest.raises(ConnectionClosedError):
        handle.deliver("c")
    await handle.close()


@pytest.mark.asyncio
async def test_send_failure_marks_handle_closed():
    ws = FakeWebSocket(fail_send=True)
    handle = WebSocketConnectionHandle("alice", ws, queue_max=5, overflow_policy="drop_oldest")
    handle.start()
    handle.deliver("a")
    await asyncio.wait_for(handle.flush(), timeout=1)
    assert handle.closed
    with pytest.raises(ConnectionClosedError):
        handle.deliver("b")
    await handle.close()


@pytest.mark.asyncio
async def test_close_releases_pending_flush():
    ws = FakeWebSocket()
    handle = WebSocketConnectionHandle("alice", ws, queue_max=5, overflow_policy="drop_oldest")
    handle.deliver("never sent")
    await handle.close()
    await asyncio.wait_for(handle.flush(), timeout=1)
    assert ws.sent == []


@pytest.mark.asyncio
async def test_registry_unregister_only_matching_handle():
    registry = ConnectionRegistry()
    first = RecordingHandle("alice")
    second = RecordingHandle("alice")
    await registry.register("alice", first)
    await registry.register("alice", second)

    assert first.closed
    assert await registry.unregister("alice", first) is False
    assert await registry.resolve("alice") is second
    assert await registry.unregister("alice", second) is True
    assert await registry.resolve("alice") is None
    assert await registry.unregister("alice") is False


@pytest.mark.asyncio
async def test_registry_resolve_many_skips_unknown():
    registry = ConnectionRegistry()
    alice = RecordingHandle("alice")
    await registry.register("alice", alice)
    assert await registry.resolve_many(["alice", "bob"]) == {"alice": alice}
    assert await registry.count() == 1

    handles = await registry.clear()
    assert handles == [alice]
    assert await registry.count() == 0


@pytest.mark.asyncio
async def test_close_closes_the_socket():
    ws = FakeWebSocket()
    handle = WebSocketConnectionHandle("alice", ws, queue_max=5, overflow_policy="drop_oldest")
    handle.start()
    await handle.close()
    assert ws.close_code == 1000


@pytest.mark.asyncio
async def test_replaced_connection_socket_is_closed():
    registry = ConnectionRegistry()
    old_ws, new_ws = FakeWebSocket(), FakeWebSocket()
    old = WebSocketConnectionHandle("alice", old_ws, queue_max=5, overflow_policy="drop_oldest")
    new = WebSocketConnectionHandle("alice", new_ws, queue_max=5, overflow_policy="drop_oldest")
    old.start()
    new.start()
    await registry.register("alice", old)
    await registry.register("alice", new)

    assert old.closed
    assert old_ws.close_code == 1000
    assert new_ws.close_code is None
    await new.close()
