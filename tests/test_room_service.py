from __future__ import annotations

import asyncio
import os
import threading
from types import SimpleNamespace

import pytest
from conftest import OBVIOUS, FakeMessages, FixedRandom, StubClient, make_manager

from infinicraft.core.combo import make_key
from infinicraft.core.errors import GenerationFormatError, GenerationTimeout, NotFound
from infinicraft.core.models import STARTER_ITEMS, CraftResult, Item, RoomInfo
from infinicraft.core.settings import Settings
from infinicraft.features.session import GameContext, Room, RoomManager
from infinicraft.generation import AnthropicGenerationClient

WATER, FIRE, WIND, EARTH = STARTER_ITEMS


def test_new_room_starts_with_the_four_elements_in_order(manager: RoomManager):
    room_id = manager.create_room()
    items = manager.get_items(room_id)
    assert [(item.text, item.emoji) for item in items] == [
        ("Water", "💧"),
        ("Fire", "🔥"),
        ("Wind", "🌬️"),
        ("Earth", "🌍"),
    ]


def test_water_plus_fire_makes_steam_once(manager: RoomManager, stub_client: StubClient):
    room = manager.get_room(manager.create_room())

    first = room.craft(WATER, FIRE)
    assert isinstance(first, CraftResult)
    assert (first.item.text, first.item.emoji) == ("Steam", "💨")
    assert first.is_new is True
    assert first.existing_index is None
    calls_after_first = stub_client.calls

    second = room.craft(FIRE, WATER)
    assert (second.item.text, second.item.emoji) == ("Steam", "💨")
    assert second.is_new is False
    assert second.existing_index == 4
    assert stub_client.calls == calls_after_first

    texts = [item.text for item in room.items()]
    assert texts == ["Water", "Fire", "Wind", "Earth", "Steam"]


def test_cache_hit_never_calls_generator(manager: RoomManager, stub_client: StubClient):
    manager.context.cache.set(make_key(WATER, EARTH), Item("Mud", "🟤"))
    result = manager.craft(manager.create_room(), EARTH, WATER)
    assert result.item.text == "Mud"
    assert result.is_new is True
    assert stub_client.calls == 0


def test_result_already_in_room_is_not_new(manager: RoomManager):
    manager.context.cache.set(make_key(FIRE, FIRE), Item("Fire", "🔥"))
    room_id = manager.create_room()
    result = manager.craft(room_id, FIRE, FIRE)
    assert result.is_new is False
    assert result.existing_index == 1
    assert len(manager.get_items(room_id)) == 4


def test_rooms_share_cache_but_not_items(manager: RoomManager, stub_client: StubClient):
    first_id = manager.create_room()
    second_id = manager.create_room()

    one = manager.craft(first_id, WATER, FIRE)
    calls = stub_client.calls
    two = manager.craft(second_id, FIRE, WATER)

    assert (one.item.text, one.item.emoji) == (two.item.text, two.item.emoji)
    assert one.is_new and two.is_new
    assert stub_client.calls == calls

    third_id = manager.create_room()
    assert [item.text for item in manager.get_items(third_id)] == ["Water", "Fire", "Wind", "Earth"]


def test_malformed_generation_leaves_cache_and_room_untouched():
    client = StubClient(emoji_error=GenerationFormatError("not json"))
    manager = make_manager(client)
    room_id = manager.create_room()

    with pytest.raises(GenerationFormatError):
        manager.craft(room_id, WATER, FIRE)

    assert not manager.context.cache.has(make_key(WATER, FIRE))
    assert len(manager.get_items(room_id)) == 4

    # Retrying re-attempts generation.
    client.emoji_error = None
    assert manager.craft(room_id, WATER, FIRE).is_new is True
    assert len(client.noun_calls) == 2


def test_unparseable_generation_reply_fails_craft_end_to_end():
    messages = FakeMessages(["I cannot help with that."])
    client = AnthropicGenerationClient(Settings(), sdk=SimpleNamespace(messages=messages))
    manager = RoomManager(GameContext.create(Settings(), client=client, rng=FixedRandom(OBVIOUS)))
    room_id = manager.create_room()

    with pytest.raises(GenerationFormatError):
        manager.craft(room_id, WATER, FIRE)

    assert len(messages.calls) == 1
    assert not manager.context.cache.has(make_key(WATER, FIRE))
    assert len(manager.context.cache) == 0
    assert [item.text for item in manager.get_items(room_id)] == ["Water", "Fire", "Wind", "Earth"]

def test_concurrent_same_room_crafts_append_once(manager: RoomManager):
    manager.context.cache.set(make_key(WATER, FIRE), Item("Steam", "💨"))
    for _ in range(20):
        room = manager.get_room(manager.create_room())
        barrier = threading.Barrier(8)
        results: list[CraftResult] = []

        def worker(room: Room = room, barrier: threading.Barrier = barrier) -> None:
            barrier.wait()
            results.append(room.craft(WATER, FIRE))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)

        assert sum(1 for result in results if result.is_new) == 1
        assert [item.text for item in room.items()].count("Steam") == 1


def test_concurrent_rooms_missing_same_key_generate_once():
    gate = threading.Event()
    client = StubClient(gate=gate)
    manager = make_manager(client)
    rooms = [manager.create_room() for _ in range(4)]
    results: dict[str, CraftResult] = {}

    def worker(room_id: str) -> None:
        results[room_id] = manager.craft(room_id, WATER, FIRE)

    threads = [threading.Thread(target=worker, args=(rid,)) for rid in rooms]
    threads[0].start()
    assert client.started.wait(timeout=5)
    for thread in threads[1:]:
        thread.start()
    gate.set()
    for thread in threads:
        thread.join(timeout=5)

    assert len(client.noun_calls) == 1
    assert len(client.emoji_calls) == 1
    assert {r.item.text for r in results.values()} == {"Steam"}
    assert all(r.is_new for r in results.values())


def test_waiting_room_reports_timeout_when_generation_hangs():
    gate = threading.Event()
    client = StubClient(gate=gate)
    context = GameContext.create(Settings(generation_timeout=0.025), client=client)
    manager = RoomManager(context)
    first, second = manager.create_room(), manager.create_room()

    owner = threading.Thread(target=manager.craft, args=(first, WATER, FIRE))
    owner.start()
    assert client.started.wait(timeout=5)
    try:
        with pytest.raises(GenerationTimeout):
            manager.craft(second, WATER, FIRE)
    finally:
        gate.set()
        owner.join(timeout=5)
    assert len(manager.get_items(second)) == 4


def test_registry_lookup_and_metadata(manager: RoomManager):
    room_id = manager.create_room("Lab")
    assert manager.room_exists(room_id)
    assert not manager.room_exists("nope")
    assert manager.get_room_info(room_id) == RoomInfo(id=room_id, name="Lab")

    assert manager.set_room_name(room_id, "Kitchen").name == "Kitchen"
    assert manager.get_room(room_id).name == "Kitchen"

    other = manager.create_room()
    assert other != room_id
    assert manager.cache_stats() == {"rooms": 2, "combinations": 0}


def test_unknown_room_raises_not_found(manager: RoomManager):
    with pytest.raises(NotFound):
        manager.get_room_info("missing")
    with pytest.raises(KeyError):
        manager.craft("missing", WATER, FIRE)


def test_items_snapshot_is_read_only(manager: RoomManager):
    room = manager.get_room(manager.create_room())
    snapshot = room.items()
    assert isinstance(snapshot, tuple)
    room.craft(WATER, FIRE)
    assert len(snapshot) == 4
    assert len(room.items()) == 5


def test_craft_async_matches_sync_semantics(manager: RoomManager):
    room_id = manager.create_room()
    result = asyncio.run(manager.craft_async(room_id, WATER, FIRE))
    assert result.item.text == "Steam"
    again = asyncio.run(manager.get_room(room_id).craft_async(FIRE, WATER))
    assert again.is_new is False


def test_registry_async_wrappers_run_off_the_event_loop(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    manager = make_manager(StubClient(), roll=OBVIOUS)
    worker_threads: list[int] = []
    create_room = manager.create_room

    def recording_create_room(name: str = "") -> str:
        worker_threads.append(threading.get_ident())
        return create_room(name)

    monkeypatch.setattr(manager, "create_room", recording_create_room)

    async def scenario():
        loop_thread = threading.get_ident()
        room_id = await manager.create_room_async("Lab")
        renamed = await manager.set_room_name_async(room_id, "Workshop")
        info = await manager.get_room_info_async(room_id)
        items = await manager.get_items_async(room_id)
        await manager.set_api_key_async("sk-async")
        stats = await manager.cache_stats_async()
        with pytest.raises(NotFound):
            await manager.get_items_async("missing")
        return loop_thread, renamed, info, items, stats

    loop_thread, renamed, info, items, stats = asyncio.run(scenario())
    assert worker_threads and worker_threads[0] != loop_thread
    assert renamed == info == RoomInfo(id=info.id, name="Workshop")
    assert items == STARTER_ITEMS
    assert manager.context.settings.api_key == "sk-async"
    assert stats == {"rooms": 1, "combinations": 0}


def test_set_api_key_swaps_client_without_touching_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    manager = make_manager(StubClient(), roll=OBVIOUS)
    manager.set_api_key("sk-test-123")
    assert manager.context.settings.api_key == "sk-test-123"
    assert manager.context.engine.client.configured
    assert "ANTHROPIC_API_KEY" not in os.environ
