from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List, Literal
from datetime import datetime

from daily_ideas.modules.users.schemas import UserResponse

GroupRole = Literal["owner", "admin", "member"]


class GroupCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    color: str = "#3B82F6"


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None


class GroupJoin(BaseModel):
    invite_code: str = Field(min_length=1)


class GroupResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    owner_id: str
    invite_code: str
    color: str
    member_count: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    role: GroupRole
    joined_at: datetime
    user: Optional[UserResponse] = None

    model_config = ConfigDict(from_attributes=True)


class GroupWithMembersResponse(GroupResponse):
    members: List[GroupMemberResponse] = []
    is_owner: bool = False
    user_role: Optional[GroupRole] = None


class GroupMemberRoleUpdate(BaseModel):
    role: Literal["admin", "member"]
