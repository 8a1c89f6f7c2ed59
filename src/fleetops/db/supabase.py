"""Shared Supabase client used by the database-backed stores."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Return the process-wide Supabase client, or None when credentials are missing.

    Creating the client does not contact the server, so a misconfigured URL
    only shows up on the first query.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.info("Supabase credentials not configured, using in-memory stores")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client, falling back to in-memory stores: {e}")
        return None
