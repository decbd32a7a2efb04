from pydantic import BaseModel


class MediaResponse(BaseModel):
    key: str
    url: str
    media_type: str
