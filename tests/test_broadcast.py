"""Tests for viewer fan-out and bootstrap delivery."""

from __future__ import annotations

import asyncio

from services.broadcast import BroadcastChannel
from storage.history import HistoryStore


def _channel(history: HistoryStore | None = None) -> BroadcastChannel:
    return BroadcastChannel(
        history or HistoryStore(capacity=100),
        bootstrap_size=20,
        fallback_current=lambda: 28.5,
    )


def test_attach_sends_single_bootstrap_with_last_twenty(make_viewer, make_reading) -> None:
    history = HistoryStore()
    for reading_id in range(1, 26):
        history.append(make_reading(reading_id, temperature=20.0 + reading_id / 10))
    channel = _channel(history)
    viewer = make_viewer("v1")

    attached = asyncio.run(channel.attach(viewer))

    assert attached is True
    assert viewer.types == ["initial"]
    data = viewer.messages[0]["data"]
    assert data["current"] == 22.5
    assert [item["id"] for item in data["history"]] == list(range(6, 26))
    assert channel.viewer_count == 1


def test_bootstrap_on_empty_history_uses_fallback(make_viewer) -> None:
    channel = _channel()
    viewer = make_viewer("v1")

    asyncio.run(channel.attach(viewer))

    assert viewer.messages == [{"type": "initial", "data": {"current": 28.5, "history": []}}]


def test_publish_serializes_reading(make_viewer, make_reading) -> None:
    channel = _channel()
    viewer = make_viewer("v1")

    async def scenario() -> int:
        await channel.attach(viewer)
        return await channel.publish(make_reading(7, temperature=31.4))

    delivered = asyncio.run(scenario())

    assert delivered == 1
    assert viewer.messages[1] == {
        "type": "temperature",
        "data": {"temperature": 31.4, "timestamp": "2024-01-01T00:00:07Z", "id": 7},
    }


def test_publish_preserves_call_order(make_viewer, make_reading) -> None:
    channel = _channel()
    viewer = make_viewer("v1")

    async def scenario() -> None:
        await channel.attach(viewer)
        await asyncio.gather(*(channel.publish(make_reading(i)) for i in range(1, 6)))

    asyncio.run(scenario())

    assert [m["data"]["id"] for m in viewer.messages[1:]] == [1, 2, 3, 4, 5]


def test_detached_viewer_receives_nothing_further(make_viewer, make_reading) -> None:
    channel = _channel()
    viewer = make_viewer("v1")

    async def scenario() -> None:
        await channel.attach(viewer)
        await channel.publish(make_reading(1))
        assert channel.detach(viewer) is True
        await channel.publish(make_reading(2))
        await channel.publish(make_reading(3))

    asyncio.run(scenario())

    assert viewer.types == ["initial", "temperature"]
    assert channel.viewer_count == 0


def test_detach_is_idempotent(make_viewer) -> None:
    channel = _channel()
    attached = make_viewer("v1")
    stranger = make_viewer("v2")

    asyncio.run(channel.attach(attached))

    assert channel.detach(attached) is True
    assert channel.detach(attached) is False
    assert channel.detach(stranger) is False


def test_failed_delivery_drops_only_that_viewer(make_viewer, make_reading) -> None:
    channel = _channel()
    healthy_a = make_viewer("a")
    broken = make_viewer("broken")
    healthy_b = make_viewer("b")

    async def scenario() -> tuple[int, int]:
        for viewer in (healthy_a, broken, healthy_b):
            await channel.attach(viewer)
        broken.fail = True
        first = await channel.publish(make_reading(1))
        second = await channel.publish(make_reading(2))
        return first, second

    first, second = asyncio.run(scenario())

    assert first == 2
    assert second == 2
    assert healthy_a.types == ["initial", "temperature", "temperature"]
    assert healthy_b.types == ["initial", "temperature", "temperature"]
    assert broken.types == ["initial"]
    assert not channel.is_attached(broken)
    assert channel.viewer_count == 2


def test_failed_bootstrap_detaches_viewer(make_viewer) -> None:
    channel = _channel()
    viewer = make_viewer("v1", fail=True)

    attached = asyncio.run(channel.attach(viewer))

    assert attached is False
    assert channel.viewer_count == 0


def test_attach_during_inflight_publish_gets_bootstrap_first(make_viewer, make_reading) -> None:
    channel = _channel()

    async def scenario():
        gate = asyncio.Event()
        slow = make_viewer("slow", gate=gate)
        gate.set()
        await channel.attach(slow)
        gate.clear()

        late = make_viewer("late")
        in_flight = asyncio.create_task(channel.publish(make_reading(1)))
        await asyncio.sleep(0)
        attaching = asyncio.create_task(channel.attach(late))
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(in_flight, attaching)
        await channel.publish(make_reading(2))
        return slow, late

    slow, late = asyncio.run(scenario())

    assert slow.types == ["initial", "temperature", "temperature"]
    assert late.types == ["initial", "temperature"]
    assert late.messages[1]["data"]["id"] == 2


def test_close_all_closes_transports(make_viewer) -> None:
    channel = _channel()
    viewers = [make_viewer(f"v{i}") for i in range(3)]

    async def scenario() -> None:
        for viewer in viewers:
            await channel.attach(viewer)
        await channel.close_all()

    asyncio.run(scenario())

    assert all(viewer.closed for viewer in viewers)
    assert channel.viewer_count == 0
