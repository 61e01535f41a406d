import os
import logging
from functools import lru_cache

from dotenv import load_dotenv
from supabase import create_client, Client


load_dotenv()
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Return the shared Supabase client, creating it on first use."""
    supabase_url = os.getenv("PUBLIC_SUPABASE_URL")
    supabase_key = os.getenv("SECRET_API_KEY")

    if not supabase_url or not supabase_key:
        raise RuntimeError(
            "PUBLIC_SUPABASE_URL and SECRET_API_KEY must be set to reach the database."
        )

    logger.info(f"supabase_client_created url={supabase_url}")
    return create_client(supabase_url, supabase_key)
