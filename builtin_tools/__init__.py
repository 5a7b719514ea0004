"""Built-in tool set served when no other tool module is configured."""
import logging
from typing import List

from mcp_gateway.registry import ToolRegistry
from .base import BaseTool
from .arithmetic import AddTool, MultiplyTool
from .weather import WeatherTool
from .clock import TimeTool
from .system import SystemInfoTool

logger = logging.getLogger(__name__)

__all__ = [
    "BaseTool",
    "AddTool",
    "MultiplyTool",
    "WeatherTool",
    "TimeTool",
    "SystemInfoTool",
    "default_tools",
    "build_registry",
]


def default_tools() -> List[BaseTool]:
    return [AddTool(), MultiplyTool(), WeatherTool(), TimeTool(), SystemInfoTool()]


def build_registry() -> ToolRegistry:
    """Registry holding the built-in tools in their listing order."""
    registry = ToolRegistry()
    for tool in default_tools():
        registry.register(tool.descriptor(), tool)
    logger.debug(f"Built-in registry: {registry.names()}")
    return registry
