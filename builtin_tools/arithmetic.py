"""Arithmetic tools."""
from typing import Any, Dict

from .base import BaseTool

_OPERANDS = {
    "type": "object",
    "properties": {
        "a": {"type": "number", "description": "First number"},
        "b": {"type": "number", "description": "Second number"}
    },
    "required": ["a", "b"]
}


class AddTool(BaseTool):
    name = "add"
    description = "Add two numbers"
    input_schema = _OPERANDS

    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        return {"result": arguments["a"] + arguments["b"]}


class MultiplyTool(BaseTool):
    name = "multiply"
    description = "Multiply two numbers"
    input_schema = _OPERANDS

    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        return {"result": arguments["a"] * arguments["b"]}
