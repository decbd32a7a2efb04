from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class MessageBody(BaseModel):
    content: str = Field(min_length=1)
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    reply_to_id: Optional[str] = None


class DirectMessageCreate(MessageBody):
    recipient_id: str


class MessageResponse(BaseModel):
    id: str
    sender_id: str
    recipient_id: str
    content: str
    media_url: Optional[str] = ""
    media_type: Optional[str] = "image"
    read: bool = False
    created_at: Optional[datetime] = None
    reply_to_id: Optional[str] = None
    group_id: Optional[str] = None

    class Config:
        from_attributes = True
