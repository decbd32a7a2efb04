"""
Account settings workflow.

Mutates the signed-in user's profile and identity while keeping the
``ProfileSession`` cache in step with the backend. All operations share one
``loading`` flag and one transient ``StatusMessage`` that expires after
``settings.status_message_seconds``. A failure is terminal for that attempt:
it becomes the status message and is never retried or queued.

Cache strategy:

* theme / username: patched in place after a successful write
  (``profile_consistency = "optimistic"``) or re-read from the backend
  (``"confirm_read"``);
* verification request: always re-read.
* email / password: handled by Supabase Auth, the profile cache is untouched.
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Optional

from socialnet.config.settings import settings
from socialnet.core.errors import ConstraintViolation, SocialError, ValidationFailed
from socialnet.modules.auth.service import AuthService
from socialnet.modules.profiles.schemas import ProfileResponse
from socialnet.modules.profiles.service import ProfileService, normalize_username

logger = logging.getLogger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    kind: str
    text: str
    expires_at: float


class ProfileSession:
    """Cached profile of one signed-in user, changed only through replace/patch."""

    def __init__(
        self,
        user_id: str,
        email: Optional[str] = None,
        profile: Optional[ProfileResponse] = None,
        access_token: Optional[str] = None,
    ):
        self.user_id = user_id
        self.email = email
        self.access_token = access_token
        self.profile = profile
        self.revision = 0

    def replace_profile(self, profile: ProfileResponse) -> None:
        self.profile = profile
        self.revision += 1

    def patch_profile(self, **changes: Any) -> None:
        if self.profile is not None:
            self.replace_profile(self.profile.model_copy(update=changes))


class SettingsWorkflow:
    def __init__(
        self,
        session: ProfileSession,
        profiles: ProfileService,
        identity: AuthService,
        clock: Callable[[], float] = time.monotonic,
        message_ttl: Optional[float] = None,
        confirm_reads: Optional[bool] = None,
    ):
        self.session = session
        self.profiles = profiles
        self.identity = identity
        self.clock = clock
        self.message_ttl = settings.status_message_seconds if message_ttl is None else message_ttl
        self.confirm_reads = settings.confirm_reads if confirm_reads is None else confirm_reads
        self.loading = False
        self.last_error: Optional[SocialError] = None
        self._message: Optional[StatusMessage] = None

    # --- state ------------------------------------------------------------

    @property
    def message(self) -> Optional[StatusMessage]:
        if self._message is not None and self.clock() >= self._message.expires_at:
            self._message = None
        return self._message

    @property
    def verification_status(self) -> Optional[str]:
        profile = self.session.profile
        if profile is None:
            return None
        if profile.verified:
            return "Verified"
        if profile.verification_request:
            return f"Pending: {profile.verification_request}"
        return None

    def state(self) -> Dict[str, Any]:
        message = self.message
        return {
            "profile": self.session.profile,
            "email": self.session.email,
            "verification_status": self.verification_status,
            "message": {"type": message.kind, "text": message.text} if message else None,
        }

    # --- plumbing ---------------------------------------------------------

    @contextmanager
    def _busy(self) -> Iterator[None]:
        self.loading = True
        self.last_error = None
        try:
            yield
        finally:
            self.loading = False

    def _notify(self, kind: str, text: str) -> None:
        self._message = StatusMessage(kind, text, self.clock() + self.message_ttl)

    def _succeed(self, text: str) -> bool:
        self._notify(SUCCESS, text)
        return True

    def _fail(self, error: SocialError, text: str) -> bool:
        logger.info(f"Settings update for {self.session.user_id} failed: {error.message}")
        self.last_error = error
        self._notify(ERROR, text)
        return False

    def _has_profile(self) -> bool:
        return self.session.profile is not None and not self.loading

    def _reload(self) -> None:
        try:
            self.session.replace_profile(self.profiles.get_profile(self.session.user_id))
        except SocialError as e:
            # write already committed; cache stays stale until the next load
            logger.warning(f"Profile re-read for {self.session.user_id} failed: {e.message}")

    def _sync(self, **changes: Any) -> None:
        if self.confirm_reads:
            self._reload()
        else:
            self.session.patch_profile(**changes)

    # --- operations -------------------------------------------------------

    def change_theme(self, theme: str) -> bool:
        if not self._has_profile() or not theme:
            return False
        with self._busy():
            try:
                self.profiles.set_theme(theme)
            except SocialError as e:
                return self._fail(e, "Failed to update theme.")
            self._sync(theme=theme)
            return self._succeed("Theme updated!")

    def change_username(self, new_username: str) -> bool:
        """Check availability, then write the lowercased name"""
        if not self._has_profile():
            return False
        username = normalize_username(new_username)
        if not username or username == self.session.profile.username:
            return False
        with self._busy():
            try:
                taken = self.profiles.is_username_taken(username, exclude_id=self.session.user_id)
            except SocialError as e:
                return self._fail(e, "Failed to update username.")
            if taken:
                return self._fail(ConstraintViolation("Username already taken."), "Username already taken.")
            try:
                self.profiles.set_username(username)
            except ConstraintViolation as e:
                # taken between the check and the write
                return self._fail(e, "Username already taken.")
            except SocialError as e:
                return self._fail(e, "Failed to update username.")
            self._sync(username=username)
            return self._succeed("Username updated!")

    def change_email(self, new_email: str) -> bool:
        new_email = (new_email or "").strip()
        if self.loading or not new_email:
            return False
        with self._busy():
            try:
                self.identity.update_email(self.session.access_token, new_email)
            except SocialError as e:
                return self._fail(e, e.message)
            return self._succeed("Email updated! Check your inbox for confirmation.")

    def change_password(self, new_password: str, confirm_password: str) -> bool:
        if self.loading:
            return False
        if new_password != confirm_password:
            return self._fail(ValidationFailed("Passwords do not match."), "Passwords do not match.")
        if len(new_password) < settings.min_password_length:
            text = f"Password must be at least {settings.min_password_length} characters."
            return self._fail(ValidationFailed(text), text)
        with self._busy():
            try:
                self.identity.update_password(self.session.access_token, new_password)
            except SocialError as e:
                return self._fail(e, e.message)
            return self._succeed("Password updated!")

    def apply_for_verification(self, reason: str) -> bool:
        if not self._has_profile() or not (reason or "").strip():
            return False
        with self._busy():
            try:
                self.profiles.request_verification(reason)
            except SocialError as e:
                return self._fail(e, "Failed to submit request.")
            self._succeed("Verification request submitted!")
            self._reload()
            return True
