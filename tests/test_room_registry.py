import asyncio

import pytest

from domain.room.entity import Room
from domain.room.registry import CreateStatus, RoomRegistry


@pytest.mark.asyncio
async def test_create_room_is_idempotent():
    registry = RoomRegistry()
    assert await registry.create_room("lobby") is CreateStatus.CREATED
    room = await registry.get_room("lobby")
    await room.append_comment("hi")
    await room.add_member("alice")

    assert await registry.create_room("lobby") is CreateStatus.ALREADY_EXISTS
    same = await registry.get_room("lobby")
    assert same is room
    assert await same.snapshot_comments() == ["hi"]
    assert await same.snapshot_members() == {"alice"}


@pytest.mark.asyncio
async def test_concurrent_create_inserts_one_room():
    registry = RoomRegistry()
    results = await asyncio.gather(*(registry.create_room("lobby") for _ in range(20)))
    assert results.count(CreateStatus.CREATED) == 1
    assert results.count(CreateStatus.ALREADY_EXISTS) == 19
    assert await registry.count() == 1


@pytest.mark.asyncio
async def test_get_missing_room_returns_none():
    registry = RoomRegistry()
    assert await registry.get_room("absent") is None


@pytest.mark.asyncio
async def test_list_rooms_empty_and_populated():
    registry = RoomRegistry()
    assert [s async for s in registry.list_rooms()] == []

    await registry.create_room("a")
    await registry.create_room("b")
    room_a = await registry.get_room("a")
    await room_a.add_member("m1")

    summaries = {s.name: s.members async for s in registry.list_rooms()}
    assert summaries == {"a": frozenset({"m1"}), "b": frozenset()}


@pytest.mark.asyncio
async def test_comment_log_is_append_only_and_ordered():
    room = Room(name="lobby")
    lengths = [await room.append_comment(text) for text in ["one", "", 'quo"te', "two"]]
    assert lengths == [1, 2, 3, 4]
    assert await room.snapshot_comments() == ["one", "", 'quo"te', "two"]


@pytest.mark.asyncio
async def test_snapshots_are_copies():
    room = Room(name="lobby")
    await room.append_comment("hi")
    await room.add_member("alice")

    comments = await room.snapshot_comments()
    members = await room.snapshot_members()
    comments.append("injected")
    members.add("mallory")

    assert await room.snapshot_comments() == ["hi"]
    assert await room.snapshot_members() == {"alice"}


@pytest.mark.asyncio
async def test_membership_add_and_remove():
    room = Room(name="lobby")
    assert await room.add_member("alice") is True
    assert await room.add_member("alice") is False
    assert await room.remove_member("alice") is True
    assert await room.remove_member("alice") is False


@pytest.mark.asyncio
async def test_room_snapshot_projection():
    room = Room(name="lobby")
    await room.add_member("alice")
    await room.append_comment("hi")
    snap = await room.snapshot()
    assert snap.name == "lobby"
    assert snap.members == frozenset({"alice"})
    assert snap.comments == ("hi",)
    assert not hasattr(snap, "lock")
