"""Base class for built-in tools."""
from abc import ABC, abstractmethod
from typing import Any, Dict

from mcp_gateway.registry import ToolDescriptor, check_arguments


class BaseTool(ABC):
    """Common interface for tools served by the gateway."""

    name: str = ""
    description: str = ""
    input_schema: Dict[str, Any] = {"type": "object", "properties": {}}

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema
        )

    def __call__(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        check_arguments(self.input_schema, arguments)
        return self.execute(arguments)

    @abstractmethod
    def execute(self, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run the tool on already validated arguments.

        Args:
            arguments: Tool arguments matching ``input_schema``

        Returns:
            JSON-serializable result mapping
        """
        pass
