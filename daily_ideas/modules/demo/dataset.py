"""
In-memory stand-in for the remote backend.

Implements the same operations as `SupabaseDataAdapter` over a seeded,
mutable, process-wide dataset. Mutations happen synchronously on the event
loop thread, so no locking is needed.
"""
import uuid
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from daily_ideas.core.errors import (
    InvalidInviteCodeError, AlreadyMemberError, OwnerMembershipError, DefaultCategoryDeletionError
)
from daily_ideas.core.ordering import OrderKeyClock
from daily_ideas.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryResponse
from daily_ideas.modules.categories.service import (
    DEFAULT_CATEGORY_NAME, DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON, category_key_space
)
from daily_ideas.modules.completions.schemas import DailyCompletionResponse
from daily_ideas.modules.completions.service import group_by_date, month_bounds
from daily_ideas.modules.demo.seed import build_seed, DEMO_GROUP_ID, DEMO_USER_ID
from daily_ideas.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse, GroupWithMembersResponse, GroupMemberResponse, GroupRole
)
from daily_ideas.modules.groups.service import normalize_invite_code, unique_invite_code, check_role_change
from daily_ideas.modules.ideas.import_parser import parse_import_text, assign_sort_orders
from daily_ideas.modules.ideas.schemas import IdeaCreate, IdeaUpdate, IdeaResponse
from daily_ideas.modules.users.schemas import UserResponse

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class FallbackDataset:
    def __init__(self, clock: Optional[OrderKeyClock] = None, now: Callable[[], datetime] = utcnow):
        self.clock = clock or OrderKeyClock()
        self._now = now
        seed = build_seed(now())
        self.users: Dict[str, UserResponse] = {u.id: u for u in seed.users}
        self.groups: List[GroupResponse] = seed.groups
        self.members: List[GroupMemberResponse] = seed.members
        self.categories: List[CategoryResponse] = seed.categories
        self.ideas: List[IdeaResponse] = seed.ideas
        for idea in self.ideas:
            self.clock.observe(idea.group_id, idea.sort_order)
        for category in self.categories:
            self.clock.observe(category_key_space(category.group_id), category.sort_order)

    # Lookups
    def _find_group(self, group_id: str) -> Optional[GroupResponse]:
        return next((g for g in self.groups if g.id == group_id), None)

    def _resolve_group_id(self, group_id: str) -> str:
        """Groups only the remote knows about are served from the demo group"""
        if self._find_group(group_id) is not None:
            return group_id
        logger.debug(f"Group {group_id} unknown to fallback data, using {DEMO_GROUP_ID}")
        return DEMO_GROUP_ID

    def _find_idea(self, idea_id: str) -> Optional[IdeaResponse]:
        return next((i for i in self.ideas if i.id == idea_id), None)

    def _find_category(self, category_id: str) -> Optional[CategoryResponse]:
        return next((c for c in self.categories if c.id == category_id), None)

    def _find_membership(self, group_id: str, user_id: str) -> Optional[GroupMemberResponse]:
        return next((m for m in self.members if m.group_id == group_id and m.user_id == user_id), None)

    def _refresh_member_count(self, group: GroupResponse) -> None:
        group.member_count = sum(1 for m in self.members if m.group_id == group.id)

    def _idea_copy(self, idea: IdeaResponse) -> IdeaResponse:
        copy = idea.model_copy(deep=True)
        user = self.users.get(idea.created_by)
        copy.created_by_user = user.model_copy() if user else None
        return copy

    def canonical_group(self) -> GroupResponse:
        return self._find_group(DEMO_GROUP_ID).model_copy(deep=True)

    # Ideas
    def get_group_ideas(self, group_id: str) -> List[IdeaResponse]:
        group_id = self._resolve_group_id(group_id)
        ideas = [self._idea_copy(i) for i in self.ideas if i.group_id == group_id]
        return sorted(ideas, key=lambda i: i.sort_order)

    def get_pending_ideas(self, group_id: str) -> List[IdeaResponse]:
        return [idea for idea in self.get_group_ideas(group_id) if not idea.completed]

    def create_idea(self, idea_data: IdeaCreate, user_id: str) -> IdeaResponse:
        group_id = self._resolve_group_id(idea_data.group_id)
        idea = IdeaResponse(
            id=_new_id("demo-idea"),
            text=idea_data.text,
            description=idea_data.description or None,
            category_id=idea_data.category_id or None,
            priority=idea_data.priority,
            completed=False,
            created_at=self._now(),
            sort_order=self.clock.next_key(group_id),
            group_id=group_id,
            created_by=user_id,
        )
        self.ideas.append(idea)
        return self._idea_copy(idea)

    def update_idea(self, idea_id: str, idea_data: IdeaUpdate) -> Optional[IdeaResponse]:
        idea = self._find_idea(idea_id)
        if idea is None:
            return None
        for key, value in idea_data.to_patch(self._now()).items():
            setattr(idea, key, value)
        return self._idea_copy(idea)

    def delete_idea(self, idea_id: str) -> bool:
        idea = self._find_idea(idea_id)
        if idea is None:
            return False
        self.ideas.remove(idea)
        return True

    def complete_idea(self, user_id: str, idea_id: str, date: str) -> Optional[IdeaResponse]:
        # No completion ledger here: the idea's own fields are the record
        idea = self._find_idea(idea_id)
        if idea is None:
            return None
        idea.completed = True
        idea.completed_at = self._now()
        return self._idea_copy(idea)

    def import_ideas(self, user_id: str, group_id: str, text: str, category_id: Optional[str] = None) -> int:
        parsed = parse_import_text(text)
        if not parsed:
            return 0
        group_id = self._resolve_group_id(group_id)
        base = self.clock.next_key(group_id, span=len(parsed))
        created_at = self._now()
        for sort_order, item in assign_sort_orders(base, parsed):
            self.ideas.append(IdeaResponse(
                id=_new_id("demo-idea"),
                text=item.title,
                description=item.description,
                category_id=category_id or None,
                created_at=created_at,
                sort_order=sort_order,
                group_id=group_id,
                created_by=user_id,
            ))
        return len(parsed)

    # Categories
    def get_group_categories(self, group_id: str) -> List[CategoryResponse]:
        group_id = self._resolve_group_id(group_id)
        categories = [c.model_copy(deep=True) for c in self.categories if c.group_id == group_id]
        return sorted(categories, key=lambda c: c.sort_order)

    def create_category(self, category_data: CategoryCreate, user_id: str) -> CategoryResponse:
        group_id = self._resolve_group_id(category_data.group_id)
        category = CategoryResponse(
            id=_new_id("demo-cat"),
            name=category_data.name,
            color=category_data.color,
            icon=category_data.icon or DEFAULT_CATEGORY_ICON,
            sort_order=self.clock.next_key(category_key_space(group_id)),
            group_id=group_id,
            created_by=user_id,
            created_at=self._now(),
        )
        self.categories.append(category)
        return category.model_copy(deep=True)

    def update_category(self, category_id: str, category_data: CategoryUpdate) -> Optional[CategoryResponse]:
        category = self._find_category(category_id)
        if category is None:
            return None
        for key, value in category_data.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(category, key, value)
        return category.model_copy(deep=True)

    def delete_category(self, category_id: str) -> bool:
        category = self._find_category(category_id)
        if category is None:
            return False
        if category.is_default:
            raise DefaultCategoryDeletionError()
        self.categories.remove(category)
        for idea in self.ideas:
            if idea.category_id == category_id:
                idea.category_id = None
        return True

    # Groups
    def get_user_groups(self, user_id: str) -> List[GroupWithMembersResponse]:
        memberships = [m for m in self.members if m.user_id == user_id]
        if not memberships:
            # Users the dataset has never seen act as the demo user
            memberships = [m for m in self.members if m.user_id == DEMO_USER_ID]
        groups = []
        for membership in memberships:
            group = self._find_group(membership.group_id)
            if group is None:
                continue
            members = [
                m.model_copy(update={"user": self.users.get(m.user_id)}, deep=True)
                for m in self.members if m.group_id == group.id
            ]
            groups.append(GroupWithMembersResponse(
                **group.model_dump(exclude={"member_count"}),
                member_count=len(members),
                members=members,
                is_owner=group.owner_id == membership.user_id,
                user_role=membership.role,
            ))
        return groups

    def create_group(self, group_data: GroupCreate, user_id: str) -> GroupResponse:
        now = self._now()
        taken = {g.invite_code for g in self.groups}
        group = GroupResponse(
            id=_new_id("demo-group"),
            name=group_data.name,
            description=group_data.description,
            owner_id=user_id,
            invite_code=unique_invite_code(lambda code: code in taken),
            color=group_data.color,
            member_count=1,
            created_at=now,
        )
        self.groups.append(group)
        self.members.append(GroupMemberResponse(
            id=_new_id("demo-member"), group_id=group.id, user_id=user_id, role="owner", joined_at=now,
        ))
        self.categories.append(CategoryResponse(
            id=_new_id("demo-cat"), name=DEFAULT_CATEGORY_NAME, color=DEFAULT_CATEGORY_COLOR,
            icon=DEFAULT_CATEGORY_ICON, sort_order=0, is_default=True,
            group_id=group.id, created_by=user_id, created_at=now,
        ))
        return group.model_copy(deep=True)

    def update_group(self, group_id: str, group_data: GroupUpdate) -> Optional[GroupResponse]:
        group = self._find_group(group_id)
        if group is None:
            return None
        update_data = group_data.model_dump(exclude_unset=True, exclude_none=True)
        for key, value in update_data.items():
            setattr(group, key, value)
        if update_data:
            group.updated_at = self._now()
        return group.model_copy(deep=True)

    def join_group(self, user_id: str, invite_code: str) -> GroupResponse:
        code = normalize_invite_code(invite_code)
        group = next((g for g in self.groups if g.invite_code == code), None)
        if group is None:
            raise InvalidInviteCodeError()
        if self._find_membership(group.id, user_id):
            raise AlreadyMemberError()
        self.members.append(GroupMemberResponse(
            id=_new_id("demo-member"), group_id=group.id, user_id=user_id, role="member", joined_at=self._now(),
        ))
        self._refresh_member_count(group)
        return group.model_copy(deep=True)

    def remove_group_member(self, group_id: str, user_id: str) -> bool:
        membership = self._find_membership(group_id, user_id)
        if membership is None:
            return False
        if membership.role == "owner":
            raise OwnerMembershipError("The group owner cannot be removed")
        self.members.remove(membership)
        self._refresh_member_count(self._find_group(group_id))
        return True

    def update_member_role(self, group_id: str, user_id: str, role: GroupRole) -> bool:
        membership = self._find_membership(group_id, user_id)
        if membership is None:
            return False
        check_role_change(membership.role, role)
        membership.role = role
        return True

    # Completions, derived from the ideas' completion fields
    def _completions(self, group_id: str) -> List[DailyCompletionResponse]:
        group_id = self._resolve_group_id(group_id)
        completions = []
        for idea in self.ideas:
            if idea.group_id != group_id or not idea.completed or idea.completed_at is None:
                continue
            completions.append(DailyCompletionResponse(
                id=f"{idea.id}-completion",
                idea_id=idea.id,
                date=idea.completed_at.date().isoformat(),
                group_id=group_id,
                completed_by=idea.created_by,
                completed_at=idea.completed_at,
                idea=self._idea_copy(idea),
            ))
        return sorted(completions, key=lambda c: c.completed_at)

    def get_daily_completions(self, group_id: str, date: str) -> List[DailyCompletionResponse]:
        return [c for c in self._completions(group_id) if c.date == date]

    def get_calendar_data(self, group_id: str, month: Optional[str] = None) -> Dict[str, List[DailyCompletionResponse]]:
        completions = self._completions(group_id)
        if month:
            start, end = month_bounds(month)
            completions = [c for c in completions if start <= c.date <= end]
        return group_by_date(sorted(completions, key=lambda c: c.date))
