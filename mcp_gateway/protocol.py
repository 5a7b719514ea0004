"""JSON-RPC 2.0 protocol types for the MCP gateway."""
from typing import Any, Dict, Optional, Union
from enum import Enum
import json

JSONRPC_VERSION = "2.0"

RequestId = Optional[Union[int, float]]


class JSONRPCErrorCode(Enum):
    """JSON-RPC 2.0 error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    # Parameter and tool failures share the internal code on this server
    INVALID_PARAMS = -32603
    INTERNAL_ERROR = -32603


class JSONRPCError(Exception):
    """JSON-RPC 2.0 error."""

    def __init__(
        self,
        code: int,
        message: str,
        data: Optional[Any] = None
    ):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to JSON-RPC error object."""
        error = {
            "code": self.code,
            "message": self.message
        }
        if self.data is not None:
            error["data"] = self.data
        return error


class JSONRPCRequest:
    """Validated JSON-RPC 2.0 request.

    Instances are produced by :func:`mcp_gateway.validator.validate_envelope`;
    ``id`` is already normalized to a number or ``None``.
    """

    def __init__(
        self,
        method: str,
        params: Optional[Dict[str, Any]] = None,
        request_id: RequestId = None,
        is_notification: bool = False
    ):
        self.jsonrpc = JSONRPC_VERSION
        self.method = method
        self.params = params or {}
        self.id = request_id
        self.is_notification = is_notification

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "jsonrpc": self.jsonrpc,
            "method": self.method
        }
        if self.params:
            result["params"] = self.params
        if not self.is_notification:
            result["id"] = self.id
        return result


class JSONRPCResponse:
    """JSON-RPC 2.0 response.

    Exactly one of ``result`` and ``error`` is set. The serialized form always
    carries ``id`` (``null`` when the request id was unset or unreadable).
    """

    def __init__(
        self,
        result: Optional[Dict[str, Any]] = None,
        error: Optional[JSONRPCError] = None,
        request_id: RequestId = None
    ):
        if result is not None and error is not None:
            raise ValueError("Response cannot have both result and error")
        if result is None and error is None:
            raise ValueError("Response needs either a result or an error")

        self.jsonrpc = JSONRPC_VERSION
        self.result = result
        self.error = error
        self.id = request_id

    @classmethod
    def success(cls, result: Dict[str, Any], request_id: RequestId = None) -> "JSONRPCResponse":
        """Create success response."""
        return cls(result=result, request_id=request_id)

    @classmethod
    def failure(cls, error: JSONRPCError, request_id: RequestId = None) -> "JSONRPCResponse":
        """Create error response."""
        return cls(error=error, request_id=request_id)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire envelope, keys in jsonrpc/id/payload order."""
        response = {
            "jsonrpc": self.jsonrpc,
            "id": self.id
        }
        if self.error is not None:
            response["error"] = self.error.to_dict()
        else:
            response["result"] = self.result
        return response

    def to_json(self) -> str:
        """Convert to compact JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))
