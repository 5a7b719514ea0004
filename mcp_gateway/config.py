"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Gateway settings from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # ============================================
    # Listener
    # ============================================
    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    # Origins allowed by the CORS middleware
    cors_origins: List[str] = ["*"]

    # ============================================
    # Server identity (reported by initialize, / and /health)
    # ============================================
    server_name: str = "vps-mcp-server"
    server_version: str = "1.0.0"
    protocol_version: str = "2024-11-05"

    # ============================================
    # Persistent streams
    # ============================================
    # Seconds between ":ping" heartbeat frames
    heartbeat_interval: float = 30.0

    # Frames buffered per stream before the stream is dropped as unresponsive
    stream_queue_size: int = 100

    # Mirror every synchronous reply to all open streams
    broadcast_responses: bool = True

    # ============================================
    # Tool collaborator
    # ============================================
    # Dotted module path exposing build_registry() and optionally open_resource()
    tool_module: str = "builtin_tools"


settings = Settings()
