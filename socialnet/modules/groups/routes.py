from fastapi import APIRouter, Depends
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_gateway
from socialnet.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse,
    GroupMemberAdd, GroupMemberRoleUpdate, GroupMemberResponse
)
from socialnet.modules.groups.service import GroupService
from typing import List, Optional

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(gateway: PolicyGateway = Depends(get_gateway)) -> GroupService:
    return GroupService(gateway)


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    service: GroupService = Depends(get_group_service)
):
    """Create a new group; the caller becomes its first admin"""
    return service.create_group(group_data)


@router.get("", response_model=List[GroupResponse])
async def list_groups(service: GroupService = Depends(get_group_service)):
    """Groups the caller created or is a member of"""
    return service.list_my_groups()


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    return service.get_group(group_id)


@router.put("/{group_id}", response_model=GroupResponse)
async def update_group(
    group_id: str,
    group_data: GroupUpdate,
    service: GroupService = Depends(get_group_service)
):
    return service.update_group(group_id, group_data)


@router.delete("/{group_id}", status_code=204)
async def delete_group(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    service.delete_group(group_id)
    return None


@router.get("/{group_id}/membership", response_model=Optional[GroupMemberResponse])
async def get_my_membership(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    """The caller's own membership row (other rows are never visible)"""
    return service.my_membership(group_id)


@router.post("/{group_id}/members", response_model=GroupMemberResponse, status_code=201)
async def add_member(
    group_id: str,
    member_data: GroupMemberAdd,
    service: GroupService = Depends(get_group_service)
):
    return service.add_member(group_id, member_data)


@router.patch("/{group_id}/members/{user_id}", response_model=GroupMemberResponse)
async def set_member_role(
    group_id: str,
    user_id: str,
    role: GroupMemberRoleUpdate,
    service: GroupService = Depends(get_group_service)
):
    """Promote or demote a member; nobody can change their own row"""
    return service.set_member_role(group_id, user_id, role.is_admin)


@router.delete("/{group_id}/members/{user_id}", status_code=204)
async def remove_member(
    group_id: str,
    user_id: str,
    service: GroupService = Depends(get_group_service)
):
    service.remove_member(group_id, user_id)
    return None


@router.post("/{group_id}/leave", status_code=204)
async def leave_group(
    group_id: str,
    service: GroupService = Depends(get_group_service)
):
    service.leave_group(group_id)
    return None
