"""
Application settings and configuration management
Uses pydantic-settings for type-safe environment variable handling
"""

import os
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, computed_field
from dotenv import load_dotenv

# Path resolution: app/config/settings.py -> app/config/ -> app/ -> project_root/
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
ENV_PATH = PROJECT_ROOT / ".env"

if ENV_PATH.exists():
    load_dotenv(dotenv_path=ENV_PATH, override=True)
else:
    load_dotenv(override=True)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables
    """

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH) if ENV_PATH.exists() else str(Path.cwd() / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # OpenAI Configuration (feedback generation)
    openai_api_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o-mini")

    # Supabase Configuration (auth + feedback storage)
    supabase_url: str = Field(default="")
    supabase_key: str = Field(default="")  # Anon key
    supabase_service_key: str = Field(default="")

    # Voice platform (Vapi)
    vapi_api_key: str = Field(default="")
    vapi_base_url: str = Field(default="https://api.vapi.ai")
    vapi_workflow_id: Optional[str] = Field(default=None)
    vapi_timeout_seconds: float = Field(default=15.0)
    vapi_webhook_secret: Optional[str] = Field(default=None)

    # Resume upload
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)

    # In-memory resume analyses and call sessions
    session_ttl_seconds: int = Field(default=2 * 60 * 60)
    max_cached_sessions: int = Field(default=500)

    # Backend Configuration
    backend_port: int = Field(default=8000)
    environment: str = Field(default="development")
    frontend_url: Optional[str] = Field(default=None)

    # Logging Configuration
    log_level: str = Field(default="INFO")

    # CORS Configuration - computed field to avoid pydantic-settings JSON parsing
    @computed_field
    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as a list, parsing from environment variable"""
        cors_val = os.getenv("CORS_ORIGINS")

        if cors_val:
            cors_val = cors_val.rstrip("`").strip()
            if cors_val:
                parsed = [origin.strip() for origin in cors_val.split(",") if origin.strip()]
                if parsed:
                    return parsed

        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8000",
            "http://127.0.0.1:8000",
        ]


# Create global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance"""
    return settings


def get_cors_origins() -> list[str]:
    """
    Get CORS allowed origins
    Adds FRONTEND_URL and removes duplicates while preserving order
    """
    origins = list(settings.cors_origins) if settings.cors_origins else []

    if settings.frontend_url:
        origins.append(settings.frontend_url)

    seen = set()
    unique_origins = []
    for origin in origins:
        if origin not in seen:
            seen.add(origin)
            unique_origins.append(origin)

    if not unique_origins and settings.environment == "development":
        return ["*"]

    return unique_origins
