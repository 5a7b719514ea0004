import sys
import pathlib
from typing import List

import pytest

# Ensure project root is importable in tests
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from builtin_tools import build_registry
from mcp_gateway.config import Settings
from mcp_gateway.connections import ChannelClosed, OutputChannel


class RecordingChannel(OutputChannel):
    """Output channel that keeps every frame it is sent."""

    def __init__(self, fail_after: int = -1):
        self.frames: List[str] = []
        self.fail_after = fail_after
        self.closed = False
        self.close_calls = 0

    async def send(self, frame: str) -> None:
        if self.closed:
            raise ChannelClosed("closed")
        if 0 <= self.fail_after <= len(self.frames):
            raise ChannelClosed("client went away")
        self.frames.append(frame)

    def close(self) -> None:
        self.closed = True
        self.close_calls += 1


@pytest.fixture
def registry():
    return build_registry()


@pytest.fixture
def app_settings():
    return Settings(_env_file=None, heartbeat_interval=30.0, broadcast_responses=True)


@pytest.fixture
def channel_factory():
    return RecordingChannel
