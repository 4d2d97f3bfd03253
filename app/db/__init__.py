"""
Database client and connection management
"""

from .client import get_supabase_client, validate_supabase_config

__all__ = ["get_supabase_client", "validate_supabase_config"]
