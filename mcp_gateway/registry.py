"""Tool registry: name to handler binding for ``tools/list`` and ``tools/call``."""
import logging
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Dict[str, Any]], Any]

_JSON_TYPES = {
    "number": "a number",
    "integer": "an integer",
    "string": "a string",
    "boolean": "a boolean",
    "object": "an object",
    "array": "an array",
}


class ToolError(Exception):
    """Base class for tool failures."""


class UnknownTool(ToolError):
    """Requested tool name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class InvalidArguments(ToolError):
    """Tool arguments were rejected by the tool's own validation."""


class RegistryError(Exception):
    """Registry misuse (duplicate names, registration after freeze)."""


class ToolDescriptor(BaseModel):
    """Public description of a tool, as returned by ``tools/list``."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema"
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def _matches_type(value: Any, json_type: str) -> bool:
    if json_type == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if json_type == "integer":
        return isinstance(value, int) and not isinstance(value, bool)
    if json_type == "string":
        return isinstance(value, str)
    if json_type == "boolean":
        return isinstance(value, bool)
    if json_type == "object":
        return isinstance(value, dict)
    if json_type == "array":
        return isinstance(value, list)
    return True


def check_arguments(schema: Mapping[str, Any], arguments: Any) -> None:
    """
    Enforce the required fields and primitive types declared by a schema.

    Only ``required``, per-property ``type`` and ``additionalProperties: false``
    are checked; that is all the tool schemas here use.

    Raises:
        InvalidArguments: On the first violation found
    """
    if not isinstance(arguments, dict):
        raise InvalidArguments("Invalid arguments: expected an object")

    properties = schema.get("properties", {})
    for field in schema.get("required", []):
        if field not in arguments:
            raise InvalidArguments(f"Missing required argument: '{field}'")

    for field, value in arguments.items():
        declared = properties.get(field)
        if declared is None:
            if schema.get("additionalProperties") is False:
                raise InvalidArguments(f"Unexpected argument: '{field}'")
            continue
        json_type = declared.get("type")
        if json_type and not _matches_type(value, json_type):
            expected = _JSON_TYPES.get(json_type, json_type)
            raise InvalidArguments(
                f"Invalid argument type: '{field}' must be {expected}, "
                f"got {type(value).__name__}"
            )


class ToolRegistry:
    """
    Ordered, append-only collection of tools.

    Tools are registered while the process starts; :meth:`freeze` makes the
    registry read-only once the server begins accepting requests.
    """

    def __init__(self):
        self._descriptors: Dict[str, ToolDescriptor] = {}
        self._handlers: Dict[str, ToolHandler] = {}
        self._frozen = False

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """Bind a descriptor to its handler."""
        if self._frozen:
            raise RegistryError(f"Registry is frozen, cannot register '{descriptor.name}'")
        if descriptor.name in self._descriptors:
            raise RegistryError(f"Tool '{descriptor.name}' is already registered")
        if not callable(handler):
            raise RegistryError(f"Handler for tool '{descriptor.name}' is not callable")

        self._descriptors[descriptor.name] = descriptor
        self._handlers[descriptor.name] = handler
        logger.debug(f"Registered tool {descriptor.name}")

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def list(self) -> List[ToolDescriptor]:
        """Descriptors in registration order."""
        return list(self._descriptors.values())

    def get(self, name: str) -> Optional[ToolDescriptor]:
        return self._descriptors.get(name)

    def names(self) -> List[str]:
        return list(self._descriptors)

    def invoke(self, name: str, arguments: Dict[str, Any]) -> Any:
        """
        Run a tool.

        The handler may return a value or an awaitable; awaiting is left to
        the caller.

        Raises:
            UnknownTool: If ``name`` is not registered
            InvalidArguments: If the handler rejects ``arguments``
        """
        handler = self._handlers.get(name)
        if handler is None:
            raise UnknownTool(name)
        return handler(arguments)

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[ToolDescriptor]:
        return iter(self.list())
