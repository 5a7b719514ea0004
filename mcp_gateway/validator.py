"""Envelope validation for inbound JSON-RPC messages."""
import math
import re
from typing import Any, Dict

from .protocol import (
    JSONRPC_VERSION,
    JSONRPCError,
    JSONRPCErrorCode,
    JSONRPCRequest,
    RequestId,
)

# ASCII decimal literal, no digit separators
_NUMERIC_ID = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?")


class EnvelopeError(JSONRPCError):
    """Inbound message violates the JSON-RPC 2.0 envelope.

    ``request_id`` is the id to echo in the error reply, ``None`` when the
    request carried no usable id.
    """

    def __init__(self, message: str, request_id: RequestId = None):
        super().__init__(JSONRPCErrorCode.INVALID_REQUEST.value, message)
        self.request_id = request_id


def normalize_id(raw_id: Any) -> RequestId:
    """
    Coerce a request id to a number.

    Numbers pass through, strings must parse completely as a finite number
    ("7" -> 7, "2.5" -> 2.5). ``None`` stays ``None``.

    Raises:
        ValueError: If the id is neither a number nor a numeric string
    """
    if raw_id is None:
        return None
    # bool is a subclass of int but true/false are not ids
    if isinstance(raw_id, bool):
        raise ValueError(f"Invalid id: {raw_id!r}")
    if isinstance(raw_id, (int, float)):
        if isinstance(raw_id, float) and not math.isfinite(raw_id):
            raise ValueError(f"Invalid id: {raw_id!r}")
        return raw_id
    if isinstance(raw_id, str):
        text = raw_id
        if not _NUMERIC_ID.fullmatch(text):
            raise ValueError(f"Invalid id: {raw_id!r}")
        try:
            return int(text)
        except ValueError:
            pass
        value = float(text)
        if not math.isfinite(value):
            raise ValueError(f"Invalid id: {raw_id!r}")
        return value
    raise ValueError(f"Invalid id: {raw_id!r}")


def _readable_id(message: Dict[str, Any]) -> RequestId:
    try:
        return normalize_id(message.get("id"))
    except ValueError:
        return None


def validate_envelope(message: Any) -> JSONRPCRequest:
    """
    Validate a decoded message and build a normalized request.

    Rules are applied in order: ``jsonrpc`` version, ``method``, ``id``.
    A message without an ``id`` key is a notification.

    Raises:
        EnvelopeError: If any rule is violated
    """
    if not isinstance(message, dict):
        raise EnvelopeError("Invalid Request: message must be a JSON object")

    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise EnvelopeError(
            "Invalid Request: jsonrpc must be exactly \"2.0\"",
            request_id=_readable_id(message)
        )

    method = message.get("method")
    if not isinstance(method, str) or not method:
        raise EnvelopeError(
            "Invalid Request: method must be a non-empty string",
            request_id=_readable_id(message)
        )

    is_notification = "id" not in message
    try:
        request_id = normalize_id(message.get("id"))
    except ValueError:
        raise EnvelopeError("Invalid Request: id must be a number or numeric string") from None

    params = message.get("params")
    if params is not None and not isinstance(params, dict):
        raise EnvelopeError(
            "Invalid Request: params must be an object",
            request_id=request_id
        )

    return JSONRPCRequest(
        method=method,
        params=params,
        request_id=request_id,
        is_notification=is_notification
    )
