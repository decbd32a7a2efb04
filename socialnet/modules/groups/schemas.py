from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class GroupCreate(BaseModel):
    name: str = Field(min_length=1)
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None


class GroupResponse(BaseModel):
    id: str
    name: str
    creator_id: Optional[str] = None
    created_at: Optional[datetime] = None
    avatar_url: Optional[str] = ""
    banner_url: Optional[str] = ""

    class Config:
        from_attributes = True


class GroupMemberAdd(BaseModel):
    user_id: str
    is_admin: bool = False


class GroupMemberRoleUpdate(BaseModel):
    is_admin: bool


class GroupMemberResponse(BaseModel):
    group_id: str
    user_id: str
    joined_at: Optional[datetime] = None
    is_admin: bool = False

    class Config:
        from_attributes = True
