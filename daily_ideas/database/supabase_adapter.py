from supabase import Client
from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.database.supabase_client import get_supabase
from daily_ideas.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from daily_ideas.modules.categories.service import CategoryService
from daily_ideas.modules.completions.schemas import DailyCompletionResponse
from daily_ideas.modules.completions.service import CompletionService
from daily_ideas.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse, GroupWithMembersResponse, GroupRole
)
from daily_ideas.modules.groups.service import GroupService
from daily_ideas.modules.ideas.schemas import IdeaCreate, IdeaUpdate, IdeaResponse
from daily_ideas.modules.ideas.service import IdeaService
from typing import Callable, Dict, List, Optional


class SupabaseDataAdapter:
    """
    Remote backend. Every call goes straight to Supabase and any failure is
    raised unchanged; deciding what to do about it is the caller's job.
    """

    def __init__(self, client_provider: Callable[[], Client] = get_supabase, clock: Optional[OrderKeyClock] = None):
        self._client_provider = client_provider
        self._client: Optional[Client] = None
        self.clock = clock or OrderKeyClock()

    @property
    def supabase(self) -> Client:
        # Created on first use so a missing configuration surfaces as a call failure
        if self._client is None:
            self._client = self._client_provider()
        return self._client

    def _groups(self) -> GroupService:
        return GroupService(self.supabase)

    def _categories(self) -> CategoryService:
        return CategoryService(self.supabase, self.clock)

    def _ideas(self) -> IdeaService:
        return IdeaService(self.supabase, self.clock)

    def _completions(self) -> CompletionService:
        return CompletionService(self.supabase)

    # Ideas
    def get_group_ideas(self, group_id: str) -> List[IdeaResponse]:
        return self._ideas().get_group_ideas(group_id)

    def get_pending_ideas(self, group_id: str) -> List[IdeaResponse]:
        return self._ideas().get_pending_ideas(group_id)

    def create_idea(self, idea_data: IdeaCreate, user_id: str) -> IdeaResponse:
        return self._ideas().create_idea(idea_data, user_id)

    def update_idea(self, idea_id: str, idea_data: IdeaUpdate) -> Optional[IdeaResponse]:
        return self._ideas().update_idea(idea_id, idea_data)

    def delete_idea(self, idea_id: str) -> bool:
        return self._ideas().delete_idea(idea_id)

    def complete_idea(self, user_id: str, idea_id: str, date: str) -> Optional[IdeaResponse]:
        return self._ideas().complete_idea(user_id, idea_id, date)

    def import_ideas(self, user_id: str, group_id: str, text: str, category_id: Optional[str] = None) -> int:
        return self._ideas().import_ideas(user_id, group_id, text, category_id)

    # Categories
    def get_group_categories(self, group_id: str) -> List[CategoryResponse]:
        return self._categories().get_group_categories(group_id)

    def create_category(self, category_data: CategoryCreate, user_id: str) -> CategoryResponse:
        return self._categories().create_category(category_data, user_id)

    def update_category(self, category_id: str, category_data: CategoryUpdate) -> Optional[CategoryResponse]:
        return self._categories().update_category(category_id, category_data)

    def delete_category(self, category_id: str) -> bool:
        return self._categories().delete_category(category_id)

    # Groups
    def get_user_groups(self, user_id: str) -> List[GroupWithMembersResponse]:
        return self._groups().get_user_groups(user_id)

    def create_group(self, group_data: GroupCreate, user_id: str) -> GroupResponse:
        return self._groups().create_group(group_data, user_id)

    def update_group(self, group_id: str, group_data: GroupUpdate) -> Optional[GroupResponse]:
        return self._groups().update_group(group_id, group_data)

    def join_group(self, user_id: str, invite_code: str) -> GroupResponse:
        return self._groups().join_group(user_id, invite_code)

    def remove_group_member(self, group_id: str, user_id: str) -> bool:
        return self._groups().remove_member(group_id, user_id)

    def update_member_role(self, group_id: str, user_id: str, role: GroupRole) -> bool:
        return self._groups().update_member_role(group_id, user_id, role)

    # Completions
    def get_daily_completions(self, group_id: str, date: str) -> List[DailyCompletionResponse]:
        return self._completions().get_daily_completions(group_id, date)

    def get_calendar_data(self, group_id: str, month: Optional[str] = None) -> Dict[str, List[DailyCompletionResponse]]:
        return self._completions().get_calendar_data(group_id, month)
