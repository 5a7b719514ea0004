"""Entry point for running the gateway standalone."""
import uvicorn
import logging

from .config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

if __name__ == "__main__":
    from .server import build_app
    uvicorn.run(build_app(), host=settings.host, port=settings.port)
