"""
Data the fallback dataset starts with: one demo user owning one demo group
with three categories and four ideas.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List

from daily_ideas.modules.categories.schemas import CategoryResponse
from daily_ideas.modules.categories.service import DEFAULT_CATEGORY_NAME, DEFAULT_CATEGORY_COLOR, DEFAULT_CATEGORY_ICON
from daily_ideas.modules.groups.schemas import GroupResponse, GroupMemberResponse
from daily_ideas.modules.ideas.schemas import IdeaResponse
from daily_ideas.modules.users.schemas import UserResponse

DEMO_USER_ID = "demo-user"
DEMO_GROUP_ID = "demo-group"
DEMO_INVITE_CODE = "DEMO123"
DEFAULT_DEMO_CATEGORY_ID = "demo-cat-1"


@dataclass
class SeedData:
    users: List[UserResponse] = field(default_factory=list)
    groups: List[GroupResponse] = field(default_factory=list)
    members: List[GroupMemberResponse] = field(default_factory=list)
    categories: List[CategoryResponse] = field(default_factory=list)
    ideas: List[IdeaResponse] = field(default_factory=list)


def _ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def build_seed(now: datetime) -> SeedData:
    user = UserResponse(id=DEMO_USER_ID, email="demo@ideas.app", name="Demo User", created_at=now)
    group = GroupResponse(
        id=DEMO_GROUP_ID,
        name="Demo Group (offline)",
        description="Demo group used while the server is unreachable",
        owner_id=DEMO_USER_ID,
        invite_code=DEMO_INVITE_CODE,
        color="#3B82F6",
        member_count=1,
        created_at=now,
    )
    owner = GroupMemberResponse(
        id="demo-member-1", group_id=DEMO_GROUP_ID, user_id=DEMO_USER_ID, role="owner", joined_at=now,
    )

    categories = [
        CategoryResponse(
            id=DEFAULT_DEMO_CATEGORY_ID, name=DEFAULT_CATEGORY_NAME, color=DEFAULT_CATEGORY_COLOR,
            icon=DEFAULT_CATEGORY_ICON, sort_order=0, is_default=True,
            group_id=DEMO_GROUP_ID, created_by=DEMO_USER_ID, created_at=now,
        ),
        CategoryResponse(
            id="demo-cat-2", name="Work", color="#10B981", icon="💼", sort_order=1,
            group_id=DEMO_GROUP_ID, created_by=DEMO_USER_ID, created_at=now,
        ),
        CategoryResponse(
            id="demo-cat-3", name="Personal", color="#F59E0B", icon="🏠", sort_order=2,
            group_id=DEMO_GROUP_ID, created_by=DEMO_USER_ID, created_at=now,
        ),
    ]

    ideas = []
    for idea_id, text, description, category_id, priority, days_ago, completed in (
        ("demo-idea-1", "Exercise", "Go for a walk or do a workout at home", "demo-cat-3", False, 3, True),
        ("demo-idea-2", "Read a new book", "Pick an interesting book and read 30 minutes a day", "demo-cat-3", False, 2, False),
        ("demo-idea-3", "Tidy up the desk", "Clear and organise every paper on the desk", "demo-cat-2", True, 1, False),
        ("demo-idea-4", "Call a friend", "Reconnect with someone important", "demo-cat-3", False, 0, False),
    ):
        created_at = now - timedelta(days=days_ago)
        ideas.append(IdeaResponse(
            id=idea_id,
            text=text,
            description=description,
            category_id=category_id,
            priority=priority,
            completed=completed,
            created_at=created_at,
            completed_at=now if completed else None,
            sort_order=_ms(created_at),
            group_id=DEMO_GROUP_ID,
            created_by=DEMO_USER_ID,
        ))

    return SeedData(users=[user], groups=[group], members=[owner], categories=categories, ideas=ideas)
