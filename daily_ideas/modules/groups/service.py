import secrets
import string
import logging
from datetime import datetime, timezone
from supabase import Client
from daily_ideas.core.errors import (
    InvalidInviteCodeError, AlreadyMemberError, OwnerMembershipError, DomainError
)
from daily_ideas.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse, GroupWithMembersResponse,
    GroupMemberResponse, GroupRole
)
from daily_ideas.modules.categories.service import DEFAULT_CATEGORY_NAME, DEFAULT_CATEGORY_COLOR
from daily_ideas.modules.users.service import UserService
from typing import List, Optional, Callable

logger = logging.getLogger(__name__)

INVITE_CODE_LENGTH = 6
INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_ATTEMPTS = 5


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def normalize_invite_code(invite_code: str) -> str:
    """Accept either the bare code or a full ".../join/<code>" link"""
    code = invite_code.strip()
    if "/join/" in code:
        code = code.split("/join/", 1)[1]
    return code.strip("/ ").upper()


def unique_invite_code(is_taken: Callable[[str], bool]) -> str:
    for _ in range(INVITE_CODE_ATTEMPTS):
        code = generate_invite_code()
        if not is_taken(code):
            return code
    raise DomainError("Could not allocate a unique invite code, try again")


def check_role_change(member_role: str, new_role: GroupRole) -> None:
    if member_role == "owner":
        raise OwnerMembershipError("The group owner's role cannot be changed")
    if new_role == "owner":
        raise OwnerMembershipError("Ownership cannot be assigned to another member")


class GroupService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.users = UserService(supabase)

    def _invite_code_taken(self, code: str) -> bool:
        result = self.supabase.table("groups")\
            .select("id")\
            .eq("invite_code", code)\
            .limit(1)\
            .execute()
        return bool(result.data)

    def _refresh_member_count(self, group_id: str) -> int:
        members_result = self.supabase.table("group_members")\
            .select("id")\
            .eq("group_id", group_id)\
            .execute()
        count = len(members_result.data or [])
        self.supabase.table("groups")\
            .update({"member_count": count})\
            .eq("id", group_id)\
            .execute()
        return count

    def _get_membership(self, group_id: str, user_id: str) -> Optional[dict]:
        result = self.supabase.table("group_members")\
            .select("*")\
            .eq("group_id", group_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _discard_group(self, group_id: str) -> None:
        try:
            self.supabase.table("groups")\
                .delete()\
                .eq("id", group_id)\
                .execute()
        except Exception as e:
            logger.error(f"Could not remove half-created group {group_id}: {str(e)}")

    def create_group(self, group_data: GroupCreate, user_id: str) -> GroupResponse:
        """Create a group with its owner membership and default category"""
        result = self.supabase.table("groups").insert({
            "name": group_data.name,
            "description": group_data.description,
            "owner_id": user_id,
            "invite_code": unique_invite_code(self._invite_code_taken),
            "color": group_data.color,
            "member_count": 1,
        }).execute()
        if not result.data:
            raise RuntimeError("Failed to create group")
        group = result.data[0]

        # Add creator as owner; without it the group is unreachable, so undo it
        try:
            self.supabase.table("group_members").insert({
                "group_id": group["id"],
                "user_id": user_id,
                "role": "owner",
            }).execute()
        except Exception:
            self._discard_group(group["id"])
            raise

        try:
            self.supabase.table("categories").insert({
                "name": DEFAULT_CATEGORY_NAME,
                "color": DEFAULT_CATEGORY_COLOR,
                "sort_order": 0,
                "is_default": True,
                "group_id": group["id"],
                "created_by": user_id,
            }).execute()
        except Exception as e:
            logger.error(f"Group {group['id']} created without its default category: {str(e)}")

        logger.info(f"Created group {group['id']} for user {user_id}")
        return GroupResponse(**group)

    def get_user_groups(self, user_id: str) -> List[GroupWithMembersResponse]:
        """Groups the user belongs to, each with its member list"""
        memberships_result = self.supabase.table("group_members")\
            .select("*")\
            .eq("user_id", user_id)\
            .execute()
        if not memberships_result.data:
            return []
        roles = {m["group_id"]: m["role"] for m in memberships_result.data}

        groups_result = self.supabase.table("groups")\
            .select("*")\
            .in_("id", list(roles))\
            .order("created_at")\
            .execute()
        if not groups_result.data:
            return []

        members_result = self.supabase.table("group_members")\
            .select("*")\
            .in_("group_id", [g["id"] for g in groups_result.data])\
            .execute()
        member_rows = members_result.data or []
        users = self.users.get_users_by_ids(m["user_id"] for m in member_rows)

        groups = []
        for group in groups_result.data:
            members = [
                GroupMemberResponse(**m, user=users.get(m["user_id"]))
                for m in member_rows if m["group_id"] == group["id"]
            ]
            groups.append(GroupWithMembersResponse(
                **{**group, "member_count": len(members)},
                members=members,
                is_owner=group["owner_id"] == user_id,
                user_role=roles.get(group["id"]),
            ))
        return groups

    def update_group(self, group_id: str, group_data: GroupUpdate) -> Optional[GroupResponse]:
        """Update group"""
        update_data = group_data.model_dump(exclude_unset=True, exclude_none=True)
        if not update_data:
            result = self.supabase.table("groups").select("*").eq("id", group_id).execute()
        else:
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table("groups")\
                .update(update_data)\
                .eq("id", group_id)\
                .execute()
        if not result.data:
            return None
        return GroupResponse(**result.data[0])

    def join_group(self, user_id: str, invite_code: str) -> GroupResponse:
        """Join the group that owns the invite code"""
        code = normalize_invite_code(invite_code)
        groups_result = self.supabase.table("groups")\
            .select("*")\
            .eq("invite_code", code)\
            .limit(1)\
            .execute()
        if not groups_result.data:
            raise InvalidInviteCodeError()
        group = groups_result.data[0]

        if self._get_membership(group["id"], user_id):
            raise AlreadyMemberError()

        self.supabase.table("group_members").insert({
            "group_id": group["id"],
            "user_id": user_id,
            "role": "member",
        }).execute()
        group["member_count"] = self._refresh_member_count(group["id"])
        logger.info(f"User {user_id} joined group {group['id']}")
        return GroupResponse(**group)

    def remove_member(self, group_id: str, user_id: str) -> bool:
        """Remove a member from the group; the owner cannot be removed"""
        membership = self._get_membership(group_id, user_id)
        if not membership:
            return False
        if membership["role"] == "owner":
            raise OwnerMembershipError("The group owner cannot be removed")
        self.supabase.table("group_members")\
            .delete()\
            .eq("id", membership["id"])\
            .execute()
        self._refresh_member_count(group_id)
        return True

    def update_member_role(self, group_id: str, user_id: str, role: GroupRole) -> bool:
        membership = self._get_membership(group_id, user_id)
        if not membership:
            return False
        check_role_change(membership["role"], role)
        self.supabase.table("group_members")\
            .update({"role": role})\
            .eq("id", membership["id"])\
            .execute()
        return True
