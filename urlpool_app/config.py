from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Loading priority (highest to lowest):
    1. Environment variables
    2. .env file
    3. Default values below
    """

    # Environment
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # Application
    app_name: str = "URL Pool"
    app_version: str = "1.0.0"

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Access control
    secret: Optional[str] = None  # Shared secret for POST / and GET /stats (unset = open)
    allowed_origin: str = "*"  # Echoed in Access-Control-Allow-Origin on GET /

    # Key-value store settings
    kv_backend: str = "memory"  # Options: "redis", "memory"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 2.0

    # Pydantic v2 configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Create settings instance
settings = Settings()
