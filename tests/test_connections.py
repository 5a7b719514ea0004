import asyncio
import json

import pytest

from mcp_gateway.connections import (
    HEARTBEAT_FRAME,
    ChannelClosed,
    ConnectionManager,
    QueueChannel,
    format_event,
)
from mcp_gateway.protocol import JSONRPCResponse


def payload(frame):
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


@pytest.mark.asyncio
async def test_open_sends_acknowledgment_first(channel_factory):
    manager = ConnectionManager()
    channel = channel_factory()
    connection = await manager.open(channel)
    assert manager.count == 1
    assert connection in manager
    assert payload(channel.frames[0]) == {"connectionId": connection.id}
    await manager.shutdown()


@pytest.mark.asyncio
async def test_acknowledgment_builder_is_used(channel_factory):
    manager = ConnectionManager(acknowledgment=lambda c: {"hello": c.id})
    channel = channel_factory()
    connection = await manager.open(channel)
    assert payload(channel.frames[0]) == {"hello": connection.id}
    await manager.shutdown()


@pytest.mark.asyncio
async def test_close_is_idempotent(channel_factory):
    manager = ConnectionManager()
    first = await manager.open(channel_factory())
    await manager.open(channel_factory())
    assert await manager.close(first) is True
    assert await manager.close(first) is False
    assert manager.count == 1
    assert first.channel.close_calls == 1
    assert first.heartbeat is None
    await manager.shutdown()
    assert manager.count == 0


@pytest.mark.asyncio
async def test_broadcast_reaches_every_stream(channel_factory):
    manager = ConnectionManager()
    first, second = channel_factory(), channel_factory()
    await manager.open(first)
    await manager.open(second)
    response = JSONRPCResponse.success({"ok": True}, request_id=1)
    assert await manager.broadcast(response) == 2
    assert first.frames[-1] == second.frames[-1] == format_event(response.to_json())
    await manager.shutdown()


@pytest.mark.asyncio
async def test_failed_write_closes_only_that_stream(channel_factory):
    manager = ConnectionManager()
    broken = channel_factory(fail_after=1)
    healthy = channel_factory()
    await manager.open(broken)
    await manager.open(healthy)

    delivered = await manager.broadcast({"jsonrpc": "2.0", "id": 1, "result": {}})

    assert delivered == 1
    assert manager.count == 1
    assert broken.closed
    assert payload(healthy.frames[-1]) == {"jsonrpc": "2.0", "id": 1, "result": {}}
    await manager.shutdown()


@pytest.mark.asyncio
async def test_stream_closed_during_broadcast_does_not_stop_delivery(channel_factory):
    manager = ConnectionManager()

    class HangUpChannel(channel_factory):
        async def send(self, frame):
            await super().send(frame)
            if len(self.frames) > 1:
                await manager.close(leaving)

    leaving = await manager.open(HangUpChannel())
    staying_channel = channel_factory()
    await manager.open(staying_channel)

    await manager.broadcast({"n": 1})

    assert leaving not in manager
    assert payload(staying_channel.frames[-1]) == {"n": 1}
    await manager.shutdown()


@pytest.mark.asyncio
async def test_heartbeat_frames_are_sent(channel_factory):
    manager = ConnectionManager(heartbeat_interval=0.01)
    channel = channel_factory()
    await manager.open(channel)
    await asyncio.sleep(0.05)
    assert HEARTBEAT_FRAME in channel.frames
    assert all(frame == HEARTBEAT_FRAME for frame in channel.frames[1:])
    await manager.shutdown()


@pytest.mark.asyncio
async def test_heartbeat_failure_closes_stream(channel_factory):
    manager = ConnectionManager(heartbeat_interval=0.01)
    channel = channel_factory(fail_after=1)
    await manager.open(channel)
    await asyncio.sleep(0.05)
    assert manager.count == 0
    assert channel.closed


@pytest.mark.asyncio
async def test_failed_acknowledgment_leaves_no_connection(channel_factory):
    manager = ConnectionManager()
    connection = await manager.open(channel_factory(fail_after=0))
    assert connection not in manager
    assert manager.count == 0


@pytest.mark.asyncio
async def test_queue_channel_ends_with_none_after_close():
    channel = QueueChannel(maxsize=2)
    await channel.send("a")
    channel.close()
    assert await channel.receive() == "a"
    assert await channel.receive() is None
    with pytest.raises(ChannelClosed):
        await channel.send("b")


@pytest.mark.asyncio
async def test_full_queue_channel_is_a_write_failure():
    manager = ConnectionManager()
    channel = QueueChannel(maxsize=1)
    await manager.open(channel)
    # acknowledgment occupies the only slot
    assert await manager.broadcast({"n": 1}) == 0
    assert manager.count == 0
    assert (await channel.receive()).startswith("data: ")
    assert await channel.receive() is None
