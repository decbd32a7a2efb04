from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class PostCreate(BaseModel):
    content: str = Field(min_length=1)
    media_url: Optional[str] = None
    media_type: Optional[str] = None


class PostResponse(BaseModel):
    id: str
    user_id: str
    content: str
    media_url: Optional[str] = ""
    media_type: Optional[str] = "image"
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
