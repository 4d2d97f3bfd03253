"""
Supabase database client management
Singleton pattern to reuse the connection
"""

from supabase import create_client, Client
from typing import Optional
from app.config.settings import settings
from app.utils.exceptions import ConfigurationError
import logging

logger = logging.getLogger(__name__)

# Singleton pattern for database client
_supabase_client: Optional[Client] = None


def validate_supabase_config(raise_on_missing: bool = False) -> bool:
    """
    Validate Supabase configuration at startup
    Logs presence/absence of required environment variables

    Args:
        raise_on_missing: If True, raise ConfigurationError when required keys are missing.
                         If False (default), only log warnings

    Returns:
        bool: True if all required keys are present, False otherwise
    """
    missing_keys = []
    if not settings.supabase_url:
        missing_keys.append("SUPABASE_URL")
    if not settings.supabase_service_key:
        missing_keys.append("SUPABASE_SERVICE_KEY")

    if missing_keys:
        error_msg = f"Missing required Supabase configuration: {', '.join(missing_keys)}"
        logger.warning(f"[SUPABASE CONFIG] {error_msg}")
        if raise_on_missing:
            raise ConfigurationError(error_msg, details={"missing_keys": missing_keys})
        return False

    logger.info("[SUPABASE CONFIG] All required Supabase configuration present")
    return True


def get_supabase_client() -> Client:
    """
    Get or create Supabase client instance (service role)

    Raises:
        ConfigurationError: when credentials are missing or the client cannot be created
    """
    global _supabase_client

    if _supabase_client is None:
        validate_supabase_config(raise_on_missing=True)

        if not settings.supabase_url.startswith("http"):
            raise ConfigurationError(
                f"Invalid SUPABASE_URL format: {settings.supabase_url}. "
                "URL should start with https://"
            )

        try:
            _supabase_client = create_client(
                settings.supabase_url,
                settings.supabase_service_key
            )
        except Exception as e:
            raise ConfigurationError(
                f"Failed to create Supabase client: {str(e)}. "
                "Please verify your SUPABASE_URL and SUPABASE_SERVICE_KEY are correct."
            ) from e

    return _supabase_client
