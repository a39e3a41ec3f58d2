from supabase import Client
from daily_ideas.modules.users.schemas import UserResponse
from typing import Dict, Iterable


class UserService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_users_by_ids(self, user_ids: Iterable[str]) -> Dict[str, UserResponse]:
        """Fetch user profiles keyed by id; unknown ids are simply absent"""
        ids = sorted({uid for uid in user_ids if uid})
        if not ids:
            return {}
        result = self.supabase.table("users")\
            .select("*")\
            .in_("id", ids)\
            .execute()
        return {row["id"]: UserResponse(**row) for row in (result.data or [])}
