from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class FollowResponse(BaseModel):
    follower_id: str
    following_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FollowStatus(BaseModel):
    follower_id: str
    following_id: str
    following: bool
