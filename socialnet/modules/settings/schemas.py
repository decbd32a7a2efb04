from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from socialnet.modules.profiles.schemas import ProfileResponse


class ThemeUpdate(BaseModel):
    theme: str = Field(min_length=1)


class UsernameUpdate(BaseModel):
    username: str


class EmailUpdate(BaseModel):
    email: EmailStr


class PasswordUpdate(BaseModel):
    new_password: str
    confirm_password: str


class VerificationApply(BaseModel):
    reason: str


class StatusMessageOut(BaseModel):
    type: str
    text: str


class SettingsState(BaseModel):
    profile: Optional[ProfileResponse] = None
    email: Optional[str] = None
    verification_status: Optional[str] = None
    message: Optional[StatusMessageOut] = None
