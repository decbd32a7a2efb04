"""
Core dependencies for route protection and policy-gated data access
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from socialnet.core.access import PolicyGateway
from socialnet.database.supabase_client import (
    UserClientFactory, get_supabase, get_service_supabase, get_user_client_factory
)
from socialnet.modules.auth.service import AuthService
from supabase import Client
from typing import Dict, Optional

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin: Client = Depends(get_service_supabase),
    user_client: UserClientFactory = Depends(get_user_client_factory)
) -> AuthService:
    return AuthService(supabase, admin, user_client)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict:
    """Extract current user info from JWT token"""
    return auth_service.get_current_user(token)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(optional_security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Optional[Dict]:
    """Current user when a token is sent; None for anonymous (public) reads"""
    if credentials is None:
        return None
    return auth_service.get_current_user(credentials.credentials)


def get_gateway(
    user_data: Dict = Depends(get_current_user),
    supabase: Client = Depends(get_service_supabase)
) -> PolicyGateway:
    """Table access evaluated against the policy set as the authenticated caller"""
    return PolicyGateway(supabase, user_data["id"])


def get_public_gateway(
    user_data: Optional[Dict] = Depends(get_optional_user),
    supabase: Client = Depends(get_service_supabase)
) -> PolicyGateway:
    """Same as get_gateway but also serves anonymous callers (uid None)"""
    return PolicyGateway(supabase, user_data["id"] if user_data else None)
