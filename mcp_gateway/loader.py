"""Resolve the tool collaborator module named in configuration."""
from dataclasses import dataclass
from typing import Any, Optional
import importlib
import inspect
import logging

from .registry import ToolRegistry

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """The gateway cannot start with the given configuration."""


@dataclass
class Collaborator:
    """
    Everything the gateway needs from a tool module.

    ``resource`` is an optional handle (database session, client pool)
    closed on shutdown; it must offer a sync or async ``close()``. It may
    still be an awaitable when ``open_resource`` is a coroutine function; the
    server awaits it on startup.
    """
    registry: ToolRegistry
    resource: Optional[Any] = None


def load_collaborator(module_path: str) -> Collaborator:
    """
    Import a tool module and build its registry.

    The module must define ``build_registry() -> ToolRegistry`` and may
    define ``open_resource()`` returning a closable handle.

    Raises:
        ConfigurationError: If the module or its registry cannot be loaded
    """
    try:
        module = importlib.import_module(module_path)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import tool module '{module_path}': {e}") from e

    build_registry = getattr(module, "build_registry", None)
    if not callable(build_registry):
        raise ConfigurationError(f"Tool module '{module_path}' has no build_registry()")

    registry = build_registry()
    if not isinstance(registry, ToolRegistry):
        raise ConfigurationError(
            f"build_registry() in '{module_path}' returned {type(registry).__name__}, "
            "expected ToolRegistry"
        )

    resource = None
    open_resource = getattr(module, "open_resource", None)
    if callable(open_resource):
        resource = open_resource()

    logger.info(f"Loaded {len(registry)} tools from {module_path}")
    return Collaborator(registry=registry, resource=resource)


async def acquire_resource(resource: Optional[Any]) -> Optional[Any]:
    """Finish opening a collaborator resource whose open_resource() is async."""
    if inspect.isawaitable(resource):
        resource = await resource
        logger.info("Collaborator resource opened")
    return resource


async def release_resource(resource: Optional[Any]) -> None:
    """Close a collaborator resource handle, awaiting it when needed."""
    if resource is None:
        return
    close = getattr(resource, "close", None)
    if not callable(close):
        return
    result = close()
    if inspect.isawaitable(result):
        await result
    logger.info("Collaborator resource closed")
