"""Application configuration loaded from environment variables."""

import os
from pathlib import Path
from pydantic_settings import BaseSettings

# Check if .env file exists and is readable
_env_file = None
try:
    env_path = Path(".env")
    if env_path.exists() and os.access(env_path, os.R_OK):
        _env_file = ".env"
except (OSError, PermissionError):
    pass


class Settings(BaseSettings):
    """All configuration for the merchant insights pipeline.

    Values are loaded from environment variables or a .env file.
    """

    # Application
    app_name: str = "merchant-insights"
    debug: bool = False

    # Analytics API
    analytics_base_url: str = "http://localhost:5000"
    analytics_query_path: str = "/api/ANALYTICS/QUERY"
    analytics_provider_id: str = "56f9cf99-3727-4f2f-bf1c-58dc532ebaf5"
    application_id: str = "76A9FF99-64F9-4F72-9629-305CBE047902"

    # Transport
    request_timeout: float = 180.0  # analytics queries are slow
    retry_max_attempts: int = 3
    retry_initial_delay: float = 1.0

    # Request coordinator
    cache_ttl_seconds: float = 30.0

    # Request defaults (normally supplied by the session layer)
    default_user_id: str = ""
    default_merchant_id: str = ""

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False

    model_config = {
        "env_file": _env_file,
        "env_file_encoding": "utf-8",
        "env_file_ignore_empty": True,
    }
