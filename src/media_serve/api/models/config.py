"""Configuration models for the server."""

import os

from pydantic import BaseModel, Field

DEFAULT_PORT = 3000


class ServerConfig(BaseModel):
    """Server configuration settings."""

    host: str = Field(default="0.0.0.0", description="Host to bind to")
    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535, description="Port to bind to")
    log_level: str = Field(default="info", description="uvicorn log level")
    show_error_details: bool = Field(
        default=True, description="Include exception text in error responses"
    )

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Create config from environment variables."""
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
            log_level=os.getenv("LOG_LEVEL", "info").lower(),
            show_error_details=os.getenv("SHOW_ERROR_DETAILS", "1").lower() not in ("0", "false", "no"),
        )
