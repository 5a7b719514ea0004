"""MCP (Model Context Protocol) gateway."""
from .connections import ConnectionManager, QueueChannel
from .dispatcher import MCPDispatcher
from .protocol import JSONRPCRequest, JSONRPCResponse, JSONRPCError
from .registry import ToolDescriptor, ToolRegistry, UnknownTool, InvalidArguments
from .server import create_app, build_app

__all__ = [
    "ConnectionManager",
    "QueueChannel",
    "MCPDispatcher",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "ToolDescriptor",
    "ToolRegistry",
    "UnknownTool",
    "InvalidArguments",
    "create_app",
    "build_app",
]
