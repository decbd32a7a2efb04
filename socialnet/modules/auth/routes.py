from fastapi import APIRouter, Depends
from socialnet.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from socialnet.modules.auth.service import AuthService
from socialnet.modules.profiles.service import ProfileService
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_auth_service, get_current_token, get_current_user, get_gateway
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user and their profile"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_me(
    current_user: Dict = Depends(get_current_user),
    gateway: PolicyGateway = Depends(get_gateway)
):
    """Get current authenticated user together with their profile"""
    profile = ProfileService(gateway).find_profile(current_user["id"])
    return {**current_user, "profile": profile.model_dump() if profile else None}


@router.delete("/account", status_code=204)
async def delete_account(
    current_user: Dict = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Delete the caller's account and everything that cascades from it"""
    service.delete_account(current_user["id"])
    return None
