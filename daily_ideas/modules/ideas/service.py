import logging
from datetime import datetime, timezone
from supabase import Client
from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.modules.ideas.import_parser import parse_import_text, assign_sort_orders
from daily_ideas.modules.ideas.schemas import IdeaCreate, IdeaUpdate, IdeaResponse
from daily_ideas.modules.users.service import UserService
from typing import List, Optional, Dict, Any

logger = logging.getLogger(__name__)


def _serialize(patch: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v.isoformat() if isinstance(v, datetime) else v for k, v in patch.items()}


class IdeaService:
    def __init__(self, supabase: Client, clock: OrderKeyClock):
        self.supabase = supabase
        self.clock = clock
        self.users = UserService(supabase)

    def get_group_ideas(self, group_id: str) -> List[IdeaResponse]:
        """Ideas of a group with their creators, ordered by sort_order"""
        result = self.supabase.table("ideas")\
            .select("*")\
            .eq("group_id", group_id)\
            .execute()
        rows = result.data or []
        users = self.users.get_users_by_ids(row["created_by"] for row in rows)
        ideas = sorted(
            (IdeaResponse(**row, created_by_user=users.get(row["created_by"])) for row in rows),
            key=lambda i: i.sort_order,
        )
        if ideas:
            self.clock.observe(group_id, ideas[-1].sort_order)
        return ideas

    def get_pending_ideas(self, group_id: str) -> List[IdeaResponse]:
        return [idea for idea in self.get_group_ideas(group_id) if not idea.completed]

    def create_idea(self, idea_data: IdeaCreate, user_id: str) -> IdeaResponse:
        result = self.supabase.table("ideas").insert({
            "text": idea_data.text,
            "description": idea_data.description or None,
            "category_id": idea_data.category_id or None,
            "priority": idea_data.priority,
            "completed": False,
            "completed_at": None,
            "sort_order": self.clock.next_key(idea_data.group_id),
            "group_id": idea_data.group_id,
            "created_by": user_id,
        }).execute()
        if not result.data:
            raise RuntimeError("Failed to create idea")
        return IdeaResponse(**result.data[0])

    def update_idea(self, idea_id: str, idea_data: IdeaUpdate) -> Optional[IdeaResponse]:
        now = datetime.now(timezone.utc)
        patch = idea_data.to_patch(now)
        patch["updated_at"] = now
        result = self.supabase.table("ideas")\
            .update(_serialize(patch))\
            .eq("id", idea_id)\
            .execute()
        if not result.data:
            return None
        return IdeaResponse(**result.data[0])

    def delete_idea(self, idea_id: str) -> bool:
        result = self.supabase.table("ideas")\
            .delete()\
            .eq("id", idea_id)\
            .execute()
        return len(result.data or []) > 0

    def complete_idea(self, user_id: str, idea_id: str, date: str) -> Optional[IdeaResponse]:
        """Mark the idea completed and append a completion record for `date`"""
        now = datetime.now(timezone.utc).isoformat()
        result = self.supabase.table("ideas")\
            .update({"completed": True, "completed_at": now, "updated_at": now})\
            .eq("id", idea_id)\
            .execute()
        if not result.data:
            return None
        idea = IdeaResponse(**result.data[0])

        # The idea is already completed remotely; a failed ledger insert must not
        # send the call to the fallback dataset
        try:
            self.supabase.table("completions").insert({
                "idea_id": idea_id,
                "date": date,
                "group_id": idea.group_id,
                "completed_by": user_id,
                "completed_at": now,
            }).execute()
        except Exception as e:
            logger.error(f"Idea {idea_id} completed but its completion for {date} was not recorded: {str(e)}")
        return idea

    def import_ideas(self, user_id: str, group_id: str, text: str, category_id: Optional[str] = None) -> int:
        """Bulk-insert ideas parsed from free text; returns how many were created"""
        parsed = parse_import_text(text)
        if not parsed:
            return 0
        base = self.clock.next_key(group_id, span=len(parsed))
        rows = [
            {
                "text": idea.title,
                "description": idea.description,
                "category_id": category_id or None,
                "priority": False,
                "completed": False,
                "completed_at": None,
                "sort_order": sort_order,
                "group_id": group_id,
                "created_by": user_id,
            }
            for sort_order, idea in assign_sort_orders(base, parsed)
        ]
        # One insert call keeps the batch all-or-nothing
        self.supabase.table("ideas").insert(rows).execute()
        logger.info(f"Imported {len(rows)} ideas into group {group_id}")
        return len(rows)
