import logging
from supabase import Client
from daily_ideas.core.errors import DefaultCategoryDeletionError
from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_NAME = "General Ideas"
DEFAULT_CATEGORY_COLOR = "#3B82F6"
DEFAULT_CATEGORY_ICON = "📁"


def category_key_space(group_id: str) -> str:
    """Categories are ordered independently of the ideas in the same group"""
    return f"categories:{group_id}"


class CategoryService:
    def __init__(self, supabase: Client, clock: OrderKeyClock):
        self.supabase = supabase
        self.clock = clock

    def get_group_categories(self, group_id: str) -> List[CategoryResponse]:
        """Categories of a group, ordered by sort_order"""
        result = self.supabase.table("categories")\
            .select("*")\
            .eq("group_id", group_id)\
            .execute()
        categories = sorted(
            (CategoryResponse(**row) for row in (result.data or [])),
            key=lambda c: c.sort_order,
        )
        if categories:
            self.clock.observe(category_key_space(group_id), categories[-1].sort_order)
        return categories

    def create_category(self, category_data: CategoryCreate, user_id: str) -> CategoryResponse:
        result = self.supabase.table("categories").insert({
            "name": category_data.name,
            "color": category_data.color,
            "icon": category_data.icon or DEFAULT_CATEGORY_ICON,
            "sort_order": self.clock.next_key(category_key_space(category_data.group_id)),
            "is_default": False,
            "group_id": category_data.group_id,
            "created_by": user_id,
        }).execute()
        if not result.data:
            raise RuntimeError("Failed to create category")
        return CategoryResponse(**result.data[0])

    def update_category(self, category_id: str, category_data: CategoryUpdate) -> Optional[CategoryResponse]:
        update_data = category_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            result = self.supabase.table("categories").select("*").eq("id", category_id).execute()
        else:
            result = self.supabase.table("categories")\
                .update(update_data)\
                .eq("id", category_id)\
                .execute()
        if not result.data:
            return None
        return CategoryResponse(**result.data[0])

    def delete_category(self, category_id: str) -> bool:
        """Delete a category; its ideas are left without a category"""
        existing = self.supabase.table("categories")\
            .select("id, is_default")\
            .eq("id", category_id)\
            .limit(1)\
            .execute()
        if not existing.data:
            return False
        if existing.data[0].get("is_default"):
            raise DefaultCategoryDeletionError()

        self.supabase.table("ideas")\
            .update({"category_id": None})\
            .eq("category_id", category_id)\
            .execute()
        result = self.supabase.table("categories")\
            .delete()\
            .eq("id", category_id)\
            .execute()
        logger.info(f"Deleted category {category_id}")
        return len(result.data or []) > 0
