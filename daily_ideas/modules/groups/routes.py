from fastapi import APIRouter, Depends, HTTPException
from daily_ideas.core.dependencies import get_current_user, get_data_service
from daily_ideas.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupJoin, GroupResponse, GroupWithMembersResponse, GroupMemberRoleUpdate
)
from daily_ideas.resilience.facade import ResilientDataService
from typing import List, Dict

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("", response_model=List[GroupWithMembersResponse])
async def list_groups(
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """List groups the user is a member of"""
    return await service.get_user_groups(user_data["id"])


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Create a new group owned by the current user"""
    return await service.create_group(group_data, user_data["id"])


@router.post("/join", response_model=GroupResponse)
async def join_group(
    join_data: GroupJoin,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    """Join a group with an invite code or invite link"""
    return await service.join_group(user_data["id"], join_data.invite_code)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    user_data: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    group = await service.update_group(group_id, group_data)
    if group is None:
        raise HTTPException(status_code=404, detail="Group not found")
    return group


@router.delete("/{group_id}/members/{user_id}", status_code=204)
async def remove_member(
    group_id: str,
    user_id: str,
    current_user: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    if not await service.remove_group_member(group_id, user_id):
        raise HTTPException(status_code=404, detail="Member not found")
    return None


@router.put("/{group_id}/members/{user_id}/role", status_code=204)
async def update_member_role(
    group_id: str,
    user_id: str,
    role_data: GroupMemberRoleUpdate,
    current_user: Dict = Depends(get_current_user),
    service: ResilientDataService = Depends(get_data_service)
):
    if not await service.update_member_role(group_id, user_id, role_data.role):
        raise HTTPException(status_code=404, detail="Member not found")
    return None
