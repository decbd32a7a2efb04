import hashlib
import logging
import time
from supabase import Client
from socialnet.core.access import PolicyGateway
from socialnet.core.errors import ConstraintViolation, IdentityServiceError, SocialError
from socialnet.database.supabase_client import SupabaseClient, UserClientFactory
from socialnet.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from socialnet.modules.profiles.service import ProfileService
from socialnet.config.settings import settings
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}


def _error_text(e: Exception) -> str:
    return getattr(e, "message", None) or str(e)


class AuthService:
    def __init__(
        self,
        supabase: Client,
        admin: Optional[Client] = None,
        user_client: Optional[UserClientFactory] = None,
    ):
        self.supabase = supabase
        # service_role client: profile row creation and account removal
        self.admin = admin or supabase
        # token -> client acting as that user, for self-service identity changes
        self.user_client = user_client or SupabaseClient.get_user_client

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a new user and create their profile row"""
        username = register_data.username.strip().lower()
        if ProfileService(PolicyGateway(self.admin, None)).is_username_taken(username):
            raise ConstraintViolation("Username already taken.")
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": {"username": username}
                }
            })
        except Exception as e:
            error_message = _error_text(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConstraintViolation("User already exists") from e
            raise IdentityServiceError(error_message) from e

        if not auth_response.user:
            raise IdentityServiceError("Failed to register user")

        user_id = auth_response.user.id
        try:
            ProfileService(PolicyGateway(self.admin, user_id)).create_profile(
                user_id, username, register_data.display_name or username
            )
        except SocialError:
            # an auth user without a profile row blocks the email from registering again
            logger.warning(f"Profile creation for {user_id} failed; removing auth user")
            try:
                self.admin.auth.admin.delete_user(user_id)
            except Exception as cleanup_error:
                logger.error(f"Failed to remove orphaned auth user {user_id}: {cleanup_error}")
            raise
        logger.info(f"Registered user {user_id} as @{username}")
        return RegisterResponse(
            user_id=user_id,
            email=auth_response.user.email or register_data.email,
            username=username,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate user using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })
        except Exception as e:
            error_message = _error_text(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")

        return TokenResponse(
            access_token=auth_response.session.access_token,
            token_type="bearer",
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current user details from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        cache_key = hashlib.sha256(token.encode()).hexdigest()
        now = time.monotonic()
        if cache_key in _AUTH_USER_CACHE:
            user_data, expiry = _AUTH_USER_CACHE[cache_key]
            if now < expiry:
                return user_data
            del _AUTH_USER_CACHE[cache_key]
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            error_msg = _error_text(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")
        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user = user_response.user
        user_data = {
            "id": user.id,
            "email": user.email,
            "user_metadata": user.user_metadata or {},
            "created_at": user.created_at,
        }
        if len(_AUTH_USER_CACHE) < settings.auth_cache_max_size:
            _AUTH_USER_CACHE[cache_key] = (user_data, now + settings.auth_cache_ttl_seconds)
        return user_data

    def logout(self, token: str) -> bool:
        """Logout user using Supabase Auth"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # Supabase Auth tokens are stateless JWTs; they expire on their own
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            return False

    def update_email(self, token: str, email: str) -> None:
        """Request an email change as the signed-in user.

        The address only switches once the user follows the link Supabase mails
        out; until then it sits in the user's ``new_email``.
        """
        self._update_identity(token, {"email": email}, "Failed to update email.")

    def update_password(self, token: str, password: str) -> None:
        self._update_identity(token, {"password": password}, "Failed to update password.")

    def _update_identity(self, token: str, attributes: Dict[str, Any], failure_text: str) -> None:
        try:
            response = self.user_client(token).auth.update_user(attributes)
        except Exception as e:
            logger.warning(f"Identity update failed: {e}")
            raise IdentityServiceError(_error_text(e) or failure_text) from e
        if not response or not response.user:
            raise IdentityServiceError(failure_text)
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)

    def delete_account(self, user_id: str) -> None:
        """Delete the auth user; profile, posts, follows, messages and memberships cascade"""
        try:
            self.admin.auth.admin.delete_user(user_id)
        except Exception as e:
            logger.error(f"Failed to delete account {user_id}: {e}")
            raise IdentityServiceError(_error_text(e)) from e
        _AUTH_USER_CACHE.clear()
        logger.info(f"Deleted account {user_id}")
