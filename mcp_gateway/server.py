"""MCP HTTP Server - SSE stream plus synchronous JSON-RPC endpoints."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import json
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse

from .config import Settings, settings
from .connections import Connection, ConnectionManager, QueueChannel
from .dispatcher import MCPDispatcher
from .loader import (
    ConfigurationError,
    acquire_resource,
    load_collaborator,
    release_resource,
)
from .protocol import JSONRPCError, JSONRPCErrorCode, JSONRPCResponse
from .registry import ToolRegistry
from .validator import EnvelopeError, validate_envelope

logger = logging.getLogger(__name__)

_STARTED = time.monotonic()


def create_app(
    registry: ToolRegistry,
    resource: Optional[Any] = None,
    connections: Optional[ConnectionManager] = None,
    app_settings: Optional[Settings] = None
) -> FastAPI:
    """
    Build the gateway application.

    Args:
        registry: Fully populated tool registry; frozen here
        resource: Collaborator handle closed on shutdown
        connections: Stream manager; a new one is created when omitted
        app_settings: Settings, defaults to the module-level ``settings``

    Raises:
        ConfigurationError: If no registry is given
    """
    if registry is None:
        raise ConfigurationError("A tool registry is required to start the gateway")

    app_settings = app_settings or settings
    registry.freeze()

    dispatcher = MCPDispatcher(
        registry,
        server_name=app_settings.server_name,
        server_version=app_settings.server_version,
        protocol_version=app_settings.protocol_version
    )

    def acknowledgment(connection: Connection) -> Dict[str, Any]:
        result = dispatcher.initialize_result()
        result["connectionId"] = connection.id
        return JSONRPCResponse.success(result).to_dict()

    if connections is None:
        connections = ConnectionManager(
            heartbeat_interval=app_settings.heartbeat_interval,
            acknowledgment=acknowledgment
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"{app_settings.server_name} ready with {len(registry)} tools: "
            f"{', '.join(registry.names())}"
        )
        app.state.resource = await acquire_resource(resource)
        try:
            yield
        finally:
            logger.info("Shutting down, closing streams")
            await connections.shutdown()
            await release_resource(app.state.resource)

    app = FastAPI(
        title=app_settings.server_name,
        description="Model Context Protocol gateway - SSE and JSON-RPC transports",
        version=app_settings.server_version,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept"],
    )

    app.state.registry = registry
    app.state.dispatcher = dispatcher
    app.state.connections = connections
    app.state.resource = resource

    async def handle_call(request: Request) -> Response:
        """Validate, dispatch and answer one JSON-RPC request."""
        try:
            message = json.loads(await request.body())
        except (ValueError, RecursionError) as e:
            logger.warning(f"Unparseable request body: {e}")
            error = JSONRPCError(JSONRPCErrorCode.PARSE_ERROR.value, "Parse error")
            return JSONResponse(JSONRPCResponse.failure(error).to_dict(), status_code=400)

        try:
            rpc_request = validate_envelope(message)
        except EnvelopeError as e:
            logger.warning(f"Rejected envelope: {e.message}")
            return JSONResponse(
                JSONRPCResponse.failure(e, request_id=e.request_id).to_dict(),
                status_code=400
            )

        logger.info(f"MCP request: {rpc_request.method}")
        response = await dispatcher.dispatch(rpc_request)

        if rpc_request.is_notification:
            if response.is_error:
                logger.warning(
                    f"Notification {rpc_request.method} failed: {response.error.message}"
                )
            return Response(status_code=202)

        if app_settings.broadcast_responses:
            await connections.broadcast(response)
        return JSONResponse(response.to_dict())

    @app.post("/sse")
    async def post_sse(request: Request):
        """Synchronous JSON-RPC call on the stream path."""
        return await handle_call(request)

    @app.post("/message")
    async def post_message(request: Request):
        """Synchronous JSON-RPC call."""
        return await handle_call(request)

    @app.get("/sse")
    async def open_stream(request: Request):
        """Open a server-push stream: acknowledgment, then heartbeats and broadcasts."""
        client = request.client.host if request.client else "unknown"
        channel = QueueChannel(maxsize=app_settings.stream_queue_size)
        connection = await connections.open(channel)
        logger.info(f"Stream {connection.id} for client {client}")

        async def event_stream():
            try:
                while True:
                    frame = await channel.receive()
                    if frame is None:
                        break
                    yield frame
            finally:
                await connections.close(connection)

        return StreamingResponse(
            event_stream(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",
            },
        )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "server": app_settings.server_name,
            "activeConnections": connections.count,
            "tools": len(registry),
            "uptime": round(time.monotonic() - _STARTED, 3),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/")
    async def root():
        """Server identity and endpoint map."""
        return {
            "name": app_settings.server_name,
            "version": app_settings.server_version,
            "protocol": f"MCP {app_settings.protocol_version}",
            "tools": [
                {"name": descriptor.name, "description": descriptor.description}
                for descriptor in registry.list()
            ],
            "endpoints": {
                "sse": "/sse",
                "message": "/message",
                "health": "/health"
            }
        }

    return app


def build_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Load the configured tool collaborator and build the application."""
    app_settings = app_settings or settings
    collaborator = load_collaborator(app_settings.tool_module)
    return create_app(
        collaborator.registry,
        resource=collaborator.resource,
        app_settings=app_settings
    )


def __getattr__(name):
    """Build the module-level ``app`` on first access (``uvicorn mcp_gateway.server:app``)."""
    if name == "app":
        app = build_app()
        globals()["app"] = app
        return app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
