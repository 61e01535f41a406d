from typing import Iterable, Optional

from supabase import Client


def get_profile(db: Client, user_id: str) -> Optional[dict]:
    """Get a user row by its id, or None."""
    response = db.table("users").select("*").eq("id", str(user_id)).limit(1).execute()
    return response.data[0] if response.data else None


def get_profiles(db: Client, user_ids: Iterable[str]) -> dict[str, dict]:
    """Get user rows keyed by id. Unknown ids are simply absent."""
    ids = list(dict.fromkeys(str(user_id) for user_id in user_ids))
    if not ids:
        return {}

    response = db.table("users").select("*").in_("id", ids).execute()
    return {str(row["id"]): row for row in response.data or []}
