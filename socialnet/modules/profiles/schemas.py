from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    banner_url: Optional[str] = None


class ProfileResponse(BaseModel):
    id: str
    username: str
    display_name: str
    bio: Optional[str] = ""
    avatar_url: Optional[str] = ""
    banner_url: Optional[str] = ""
    verified: bool = False
    created_at: Optional[datetime] = None
    theme: Optional[str] = None
    verification_request: Optional[str] = ""
    last_seen: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsernameAvailability(BaseModel):
    username: str
    available: bool
