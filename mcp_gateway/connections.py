"""Persistent stream (SSE) connection tracking, heartbeats and broadcast."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union
import asyncio
import json
import logging
import time
import uuid

from .protocol import JSONRPCResponse

logger = logging.getLogger(__name__)

# SSE comment line, ignored by conforming clients
HEARTBEAT_FRAME = ":ping\n\n"


def format_event(payload: Union[str, Dict[str, Any]]) -> str:
    """Wrap a JSON payload in an SSE ``data`` frame."""
    if not isinstance(payload, str):
        payload = json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
    return f"data: {payload}\n\n"


class ChannelClosed(Exception):
    """Write to a channel that is closed or cannot accept more frames."""


class OutputChannel(ABC):
    """Write-only sink bound to one persistent stream."""

    @abstractmethod
    async def send(self, frame: str) -> None:
        """
        Write a frame.

        Raises:
            ChannelClosed: If the frame cannot be delivered
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Stop accepting frames."""
        pass


class QueueChannel(OutputChannel):
    """
    Channel backed by a bounded asyncio queue.

    The HTTP layer drains it with :meth:`receive`; ``None`` marks the end of
    the stream. A full queue means the client is not reading and counts as a
    write failure.
    """

    def __init__(self, maxsize: int = 100):
        self._queue: "asyncio.Queue[Optional[str]]" = asyncio.Queue(
            maxsize=maxsize + 1 if maxsize > 0 else 0
        )
        self._maxsize = maxsize
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, frame: str) -> None:
        if self._closed:
            raise ChannelClosed("Channel is closed")
        # one slot stays free for the end-of-stream marker
        if 0 < self._maxsize <= self._queue.qsize():
            raise ChannelClosed("Outbound queue is full")
        self._queue.put_nowait(frame)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)

    async def receive(self) -> Optional[str]:
        """Next frame, or ``None`` once the channel is closed and drained."""
        return await self._queue.get()


@dataclass
class Connection:
    """One open persistent stream."""
    channel: OutputChannel
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    last_activity: float = field(default_factory=time.time)
    heartbeat: Optional["asyncio.Task[None]"] = field(default=None, repr=False)

    def touch(self) -> None:
        self.last_activity = time.time()


class ConnectionManager:
    """
    Owns the set of open streams.

    All membership changes go through :meth:`open` and :meth:`close`;
    :meth:`broadcast` iterates a snapshot so a connection closing during
    delivery does not disturb the others.
    """

    def __init__(
        self,
        heartbeat_interval: float = 30.0,
        acknowledgment: Optional[Callable[[Connection], Dict[str, Any]]] = None
    ):
        """
        Initialize connection manager.

        Args:
            heartbeat_interval: Seconds between heartbeat frames
            acknowledgment: Builds the payload of the frame sent on open
        """
        self.heartbeat_interval = heartbeat_interval
        self._acknowledgment = acknowledgment
        self._connections: Dict[str, Connection] = {}

    @property
    def count(self) -> int:
        return len(self._connections)

    def __len__(self) -> int:
        return len(self._connections)

    def __contains__(self, connection: object) -> bool:
        return isinstance(connection, Connection) and connection.id in self._connections

    def snapshot(self) -> List[Connection]:
        return list(self._connections.values())

    async def open(self, channel: OutputChannel) -> Connection:
        """Register a stream, acknowledge it and start its heartbeat."""
        connection = Connection(channel=channel)
        self._connections[connection.id] = connection
        logger.info(f"Stream {connection.id} opened ({self.count} active)")

        ack = {"connectionId": connection.id}
        if self._acknowledgment is not None:
            ack = self._acknowledgment(connection)
        try:
            await channel.send(format_event(ack))
            connection.touch()
        except Exception as e:
            logger.warning(f"Stream {connection.id} failed on acknowledgment: {e}")
            await self.close(connection)
            return connection

        connection.heartbeat = asyncio.create_task(self._heartbeat(connection))
        return connection

    async def close(self, connection: Connection) -> bool:
        """
        Remove a stream and stop its heartbeat.

        Returns:
            False if the connection was already closed
        """
        if self._connections.pop(connection.id, None) is None:
            return False

        task = connection.heartbeat
        if task is not None and task is not asyncio.current_task():
            task.cancel()
        connection.heartbeat = None
        connection.channel.close()
        logger.info(f"Stream {connection.id} closed ({self.count} active)")
        return True

    async def broadcast(self, response: Union[JSONRPCResponse, Dict[str, Any]]) -> int:
        """
        Send one response frame to every open stream.

        Returns:
            Number of streams the frame was delivered to
        """
        if isinstance(response, JSONRPCResponse):
            frame = format_event(response.to_json())
        else:
            frame = format_event(response)

        delivered = 0
        for connection in self.snapshot():
            if connection.id not in self._connections:
                continue
            try:
                await connection.channel.send(frame)
            except Exception as e:
                logger.warning(f"Broadcast to stream {connection.id} failed: {e}")
                await self.close(connection)
                continue
            connection.touch()
            delivered += 1
        return delivered

    async def shutdown(self) -> None:
        """Close every open stream."""
        for connection in self.snapshot():
            await self.close(connection)

    async def _heartbeat(self, connection: Connection) -> None:
        while True:
            await asyncio.sleep(self.heartbeat_interval)
            try:
                await connection.channel.send(HEARTBEAT_FRAME)
            except Exception as e:
                logger.warning(f"Heartbeat to stream {connection.id} failed: {e}")
                await self.close(connection)
                return
            connection.touch()
