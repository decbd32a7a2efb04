import logging
from datetime import datetime, timezone
from socialnet.core.access import PolicyGateway
from socialnet.core.errors import NotFound, ValidationFailed
from socialnet.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


def normalize_username(username: str) -> str:
    return username.strip().lower()


class ProfileService:
    def __init__(self, gateway: PolicyGateway):
        self.gateway = gateway

    def find_profile(self, profile_id: str) -> Optional[ProfileResponse]:
        row = self.gateway.first("profiles", id=profile_id)
        return ProfileResponse(**row) if row else None

    def get_profile(self, profile_id: str) -> ProfileResponse:
        """Get profile by ID"""
        profile = self.find_profile(profile_id)
        if profile is None:
            raise NotFound("Profile not found")
        return profile

    def get_by_username(self, username: str) -> ProfileResponse:
        """Usernames are stored lowercase, so lookups are case-insensitive"""
        row = self.gateway.first("profiles", username=normalize_username(username))
        if not row:
            raise NotFound("Profile not found")
        return ProfileResponse(**row)

    def is_username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        rows = self.gateway.select("profiles", username=normalize_username(username))
        return any(row["id"] != exclude_id for row in rows)

    def create_profile(self, user_id: str, username: str, display_name: str) -> ProfileResponse:
        row = self.gateway.insert("profiles", {
            "id": user_id,
            "username": normalize_username(username),
            "display_name": display_name,
        })
        return ProfileResponse(**row)

    def update_profile(self, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update the caller's display fields"""
        update_data = profile_data.model_dump(exclude_none=True)
        if "display_name" in update_data and not update_data["display_name"].strip():
            raise ValidationFailed("Display name cannot be empty")
        if not update_data:
            return self.get_profile(self.gateway.uid)
        return self._update_own(update_data)

    def set_theme(self, theme: str) -> ProfileResponse:
        return self._update_own({"theme": theme})

    def set_username(self, username: str) -> ProfileResponse:
        return self._update_own({"username": normalize_username(username)})

    def request_verification(self, reason: str) -> ProfileResponse:
        return self._update_own({"verification_request": reason})

    def touch_last_seen(self) -> ProfileResponse:
        return self._update_own({"last_seen": datetime.now(timezone.utc).isoformat()})

    def _update_own(self, values: Dict[str, Any]) -> ProfileResponse:
        rows = self.gateway.update("profiles", values, id=self.gateway.uid)
        if not rows:
            raise NotFound("Profile not found")
        logger.debug(f"Profile {self.gateway.uid} updated: {sorted(values)}")
        return ProfileResponse(**rows[0])
