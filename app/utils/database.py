"""
Database utility functions for feedback storage
"""

import logging
from typing import Any, Dict, Optional
from supabase import Client
from app.utils.exceptions import DatabaseError

logger = logging.getLogger(__name__)

FEEDBACK_TABLE = "feedback"


def _check_supabase_response_for_html_error(response: Any) -> Optional[str]:
    """
    Check if Supabase response contains HTML error content.
    PostgREST sometimes returns HTML error pages instead of JSON.

    Returns:
        Error message if HTML detected, None otherwise
    """
    data = getattr(response, "data", None)
    if isinstance(data, str) and data.strip().startswith("<"):
        return "Supabase returned HTML error response"
    return None


async def save_feedback(supabase: Client, record: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert or update a feedback row (upsert on id)
    Time Complexity: O(1) - Single write
    """
    try:
        response = supabase.table(FEEDBACK_TABLE).upsert(record).execute()

        html_error = _check_supabase_response_for_html_error(response)
        if html_error:
            logger.error(f"[SAVE-FEEDBACK] HTML error detected: {html_error}")
            raise DatabaseError(f"Database returned HTML error instead of JSON. Original error: {html_error}")

        if not response.data:
            raise DatabaseError("Feedback write returned no data")
        return response.data[0]
    except DatabaseError:
        raise
    except Exception as e:
        raise DatabaseError(f"Error saving feedback: {str(e)}")


async def get_feedback_by_interview(
    supabase: Client,
    interview_id: str,
    user_id: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Get the latest feedback for an interview, optionally scoped to a user
    """
    try:
        query = supabase.table(FEEDBACK_TABLE).select("*").eq("interview_id", interview_id)
        if user_id:
            query = query.eq("user_id", user_id)
        response = query.order("created_at", desc=True).limit(1).execute()

        html_error = _check_supabase_response_for_html_error(response)
        if html_error:
            logger.error(f"[GET-FEEDBACK] HTML error detected: {html_error}")
            raise DatabaseError(f"Database returned HTML error instead of JSON. Original error: {html_error}")

        if response.data:
            return response.data[0]
        return None
    except DatabaseError:
        raise
    except Exception as e:
        raise DatabaseError(f"Error fetching feedback: {str(e)}")
