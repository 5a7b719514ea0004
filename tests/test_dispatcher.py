import asyncio
import json

import pytest

from mcp_gateway.dispatcher import MCPDispatcher
from mcp_gateway.protocol import JSONRPCRequest
from mcp_gateway.registry import ToolDescriptor, ToolRegistry


def run(dispatcher, method, params=None, request_id=1):
    request = JSONRPCRequest(method=method, params=params, request_id=request_id)
    return asyncio.run(dispatcher.dispatch(request))


@pytest.fixture
def dispatcher(registry):
    return MCPDispatcher(registry, server_name="test-server", server_version="9.9.9")


def test_initialize_returns_identity(dispatcher):
    response = run(dispatcher, "initialize", {"clientInfo": {"name": "client"}})
    result = response.result
    assert result["protocolVersion"] == "2024-11-05"
    assert result["serverInfo"] == {"name": "test-server", "version": "9.9.9"}
    assert "tools" in result["capabilities"]


def test_tools_list_is_registry_listing(dispatcher, registry):
    response = run(dispatcher, "tools/list")
    assert response.result["tools"] == [descriptor.to_dict() for descriptor in registry.list()]


@pytest.mark.parametrize("method, key", [("prompts/list", "prompts"), ("resources/list", "resources")])
def test_capability_stubs_are_empty(dispatcher, method, key):
    assert run(dispatcher, method).result == {key: []}


def test_initialized_notification_has_empty_result(dispatcher):
    assert run(dispatcher, "notifications/initialized", request_id=None).result == {}


def test_tools_call_wraps_result_as_text(dispatcher):
    response = run(dispatcher, "tools/call", {"name": "add", "arguments": {"a": 2, "b": 3}}, 5)
    assert response.id == 5
    content = response.result["content"]
    assert len(content) == 1
    assert content[0]["type"] == "text"
    assert json.loads(content[0]["text"]) == {"result": 5}
    assert response.result["isError"] is False


def test_tools_call_defaults_arguments(dispatcher):
    response = run(dispatcher, "tools/call", {"name": "get_time"})
    assert json.loads(response.result["content"][0]["text"])["timezone"] == "UTC"


def test_tools_call_missing_name(dispatcher):
    response = run(dispatcher, "tools/call", {"arguments": {}})
    assert response.error.code == -32603
    assert "missing tool name" in response.error.message


def test_tools_call_type_violation(dispatcher):
    response = run(dispatcher, "tools/call", {"name": "add", "arguments": {"a": "x", "b": 3}}, 6)
    assert response.id == 6
    assert response.error.code == -32603
    assert "must be a number" in response.error.message


def test_tools_call_unknown_tool(dispatcher):
    response = run(dispatcher, "tools/call", {"name": "nope"})
    assert response.error.code == -32603
    assert "nope" in response.error.message


def test_unknown_method(dispatcher):
    response = run(dispatcher, "nope", request_id=7)
    assert response.id == 7
    assert response.error.code == -32601
    assert "nope" in response.error.message


def test_handler_failures_become_internal_errors():
    registry = ToolRegistry()

    def explode(arguments):
        raise RuntimeError("disk on fire")

    registry.register(ToolDescriptor(name="explode", description="Always fails"), explode)
    response = run(MCPDispatcher(registry), "tools/call", {"name": "explode"})
    assert response.error.code == -32603
    assert response.error.message == "disk on fire"


def test_async_tool_handlers_are_awaited():
    registry = ToolRegistry()

    async def slow_echo(arguments):
        await asyncio.sleep(0)
        return {"echo": arguments.get("text")}

    registry.register(ToolDescriptor(name="echo", description="Echo"), slow_echo)
    response = run(MCPDispatcher(registry), "tools/call", {"name": "echo", "arguments": {"text": "hi"}})
    assert json.loads(response.result["content"][0]["text"]) == {"echo": "hi"}


def test_registered_methods_are_routed(dispatcher):
    dispatcher.register_method("ping", lambda params: {})
    assert run(dispatcher, "ping").result == {}
