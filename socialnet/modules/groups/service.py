import logging
from socialnet.core.access import PolicyGateway
from socialnet.core.errors import NotFound, ValidationFailed
from socialnet.modules.groups.schemas import (
    GroupCreate, GroupUpdate, GroupResponse,
    GroupMemberAdd, GroupMemberResponse
)
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, gateway: PolicyGateway):
        self.gateway = gateway

    def create_group(self, group_data: GroupCreate) -> GroupResponse:
        """Create a group; the creator joins it as admin"""
        row = {"name": group_data.name, "creator_id": self.gateway.uid}
        if group_data.avatar_url:
            row["avatar_url"] = group_data.avatar_url
        if group_data.banner_url:
            row["banner_url"] = group_data.banner_url
        group = self.gateway.insert("groups", row)

        # Allowed by the creator branch of the member insert policy
        self.gateway.insert("group_members", {
            "group_id": group["id"],
            "user_id": self.gateway.uid,
            "is_admin": True
        })
        logger.info(f"Group {group['id']} created by {self.gateway.uid}")
        return GroupResponse(**group)

    def get_group(self, group_id: str) -> GroupResponse:
        """Visible to the creator and to members"""
        row = self.gateway.first("groups", id=group_id)
        if not row:
            raise NotFound("Group not found")
        return GroupResponse(**row)

    def list_my_groups(self) -> List[GroupResponse]:
        """Groups the caller created or belongs to, newest first"""
        memberships = self.gateway.select("group_members", user_id=self.gateway.uid)
        group_ids = [m["group_id"] for m in memberships]
        rows = self.gateway.select("groups", creator_id=self.gateway.uid)
        if group_ids:
            rows += self.gateway.select("groups", id=group_ids)
        unique: Dict[str, dict] = {row["id"]: row for row in rows}
        ordered = sorted(unique.values(), key=lambda r: str(r.get("created_at") or ""), reverse=True)
        return [GroupResponse(**row) for row in ordered]

    def update_group(self, group_id: str, group_data: GroupUpdate) -> GroupResponse:
        """Creator or admins only"""
        update_data = group_data.model_dump(exclude_none=True)
        if "name" in update_data and not update_data["name"].strip():
            raise ValidationFailed("Group name cannot be empty")
        if not update_data:
            return self.get_group(group_id)
        rows = self.gateway.update("groups", update_data, id=group_id)
        if not rows:
            raise NotFound("Group not found")
        return GroupResponse(**rows[0])

    def delete_group(self, group_id: str) -> None:
        """Creator or admins only; members and messages cascade"""
        self.gateway.delete("groups", id=group_id)
        logger.info(f"Group {group_id} deleted by {self.gateway.uid}")

    def add_member(self, group_id: str, member_data: GroupMemberAdd) -> GroupMemberResponse:
        """Creator or admins only"""
        if not self.gateway.first("profiles", id=member_data.user_id):
            raise NotFound("Profile not found")
        row = self.gateway.insert("group_members", {
            "group_id": group_id,
            "user_id": member_data.user_id,
            "is_admin": member_data.is_admin
        })
        return GroupMemberResponse(**row)

    def set_member_role(self, group_id: str, user_id: str, is_admin: bool) -> GroupMemberResponse:
        """Creator or admins only, and never on the caller's own row"""
        rows = self.gateway.update(
            "group_members", {"is_admin": is_admin},
            group_id=group_id, user_id=user_id
        )
        if not rows:
            raise NotFound("Member not found")
        return GroupMemberResponse(**rows[0])

    def remove_member(self, group_id: str, user_id: str) -> None:
        """Members may remove themselves; creator and admins may remove anyone"""
        self.gateway.delete("group_members", group_id=group_id, user_id=user_id)

    def leave_group(self, group_id: str) -> None:
        self.remove_member(group_id, self.gateway.uid)

    def my_membership(self, group_id: str) -> Optional[GroupMemberResponse]:
        row = self.gateway.first("group_members", group_id=group_id, user_id=self.gateway.uid)
        return GroupMemberResponse(**row) if row else None

