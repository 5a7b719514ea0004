#!/usr/bin/env python3
"""Run the MCP gateway standalone."""
import uvicorn
import logging

from mcp_gateway.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

if __name__ == "__main__":
    from mcp_gateway.server import build_app
    app = build_app()
    print("=" * 60)
    print(f"Starting {settings.server_name} {settings.server_version}")
    print("=" * 60)
    print(f"SSE stream: http://{settings.host}:{settings.port}/sse")
    print(f"Messages:   http://{settings.host}:{settings.port}/message")
    print(f"Health:     http://{settings.host}:{settings.port}/health")
    print(f"Tools:      {', '.join(app.state.registry.names())}")
    print("=" * 60)
    uvicorn.run(app, host=settings.host, port=settings.port)
