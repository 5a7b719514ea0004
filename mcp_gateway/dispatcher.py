"""Method dispatch for the MCP gateway."""
from typing import Any, Awaitable, Callable, Dict, Optional, Union
import inspect
import json
import logging

from .protocol import JSONRPCRequest, JSONRPCResponse, JSONRPCError, JSONRPCErrorCode
from .registry import ToolRegistry

logger = logging.getLogger(__name__)

MethodResult = Union[Dict[str, Any], Awaitable[Dict[str, Any]]]
MethodHandler = Callable[[Dict[str, Any]], MethodResult]


class MCPDispatcher:
    """
    Routes validated requests to protocol methods and registered tools.

    Each method handler takes the request ``params`` mapping and returns the
    ``result`` object (or an awaitable of it). Handler failures never escape
    :meth:`dispatch`; they become ``-32603`` error responses.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        server_name: str = "vps-mcp-server",
        server_version: str = "1.0.0",
        protocol_version: str = "2024-11-05"
    ):
        """
        Initialize dispatcher.

        Args:
            registry: Tool registry consulted by ``tools/list`` and ``tools/call``
            server_name: Name reported in ``serverInfo``
            server_version: Version reported in ``serverInfo``
            protocol_version: MCP protocol version reported by ``initialize``
        """
        self.registry = registry
        self.server_name = server_name
        self.server_version = server_version
        self.protocol_version = protocol_version
        self.methods: Dict[str, MethodHandler] = {}
        self._register_methods()

    def _register_methods(self) -> None:
        self.register_method("initialize", self._initialize)
        self.register_method("notifications/initialized", self._initialized)
        self.register_method("tools/list", self._list_tools)
        self.register_method("tools/call", self._call_tool)
        self.register_method("prompts/list", self._list_prompts)
        self.register_method("resources/list", self._list_resources)

    def register_method(self, method_name: str, handler: MethodHandler) -> None:
        """Register a method handler."""
        self.methods[method_name] = handler
        logger.debug(f"Registered method {method_name} on server {self.server_name}")

    def server_info(self) -> Dict[str, Any]:
        return {"name": self.server_name, "version": self.server_version}

    def initialize_result(self) -> Dict[str, Any]:
        """Capability document returned by ``initialize``."""
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {
                "tools": {"listChanged": True},
                "prompts": {},
                "resources": {}
            },
            "serverInfo": self.server_info()
        }

    async def dispatch(self, request: JSONRPCRequest) -> JSONRPCResponse:
        """
        Handle a validated request.

        Args:
            request: Request produced by the envelope validator

        Returns:
            Success or error response carrying the request id
        """
        method_name = request.method
        handler = self.methods.get(method_name)

        if handler is None:
            return JSONRPCResponse.failure(
                JSONRPCError(
                    JSONRPCErrorCode.METHOD_NOT_FOUND.value,
                    f"Method not found: {method_name}"
                ),
                request_id=request.id
            )

        try:
            result = handler(request.params)
            if inspect.isawaitable(result):
                result = await result
            return JSONRPCResponse.success(result, request_id=request.id)

        except JSONRPCError as e:
            return JSONRPCResponse.failure(e, request_id=request.id)
        except Exception as e:
            logger.error(f"Error handling method {method_name}: {e}", exc_info=True)
            return JSONRPCResponse.failure(
                JSONRPCError(JSONRPCErrorCode.INTERNAL_ERROR.value, str(e) or type(e).__name__),
                request_id=request.id
            )

    def _initialize(self, params: Dict[str, Any]) -> Dict[str, Any]:
        client_info = params.get("clientInfo")
        if client_info:
            logger.info(f"Initialize from client {client_info}")
        return self.initialize_result()

    def _initialized(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Client acknowledgment that the handshake finished."""
        return {}

    def _list_tools(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"tools": [descriptor.to_dict() for descriptor in self.registry.list()]}

    def _list_prompts(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"prompts": []}

    def _list_resources(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return {"resources": []}

    async def _call_tool(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Handle tools/call request.

        Args:
            params: ``{"name": <tool>, "arguments": {...}}``; ``arguments``
                defaults to an empty object
        """
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise JSONRPCError(
                JSONRPCErrorCode.INVALID_PARAMS.value,
                "Invalid params: missing tool name"
            )

        arguments: Optional[Any] = params.get("arguments")
        if arguments is None:
            arguments = {}

        result = self.registry.invoke(name, arguments)
        if inspect.isawaitable(result):
            result = await result

        logger.info(f"Tool {name} completed")
        return {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(result, indent=2, default=str)
                }
            ],
            "isError": False
        }
