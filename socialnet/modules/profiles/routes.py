from fastapi import APIRouter, Depends
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_gateway, get_public_gateway
from socialnet.modules.profiles.schemas import ProfileUpdate, ProfileResponse, UsernameAvailability
from socialnet.modules.profiles.service import ProfileService, normalize_username

router = APIRouter(prefix="/profiles", tags=["profiles"])


def get_profile_service(gateway: PolicyGateway = Depends(get_gateway)) -> ProfileService:
    return ProfileService(gateway)


def get_public_profile_service(gateway: PolicyGateway = Depends(get_public_gateway)) -> ProfileService:
    return ProfileService(gateway)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(service: ProfileService = Depends(get_profile_service)):
    """Get the caller's own profile"""
    return service.get_profile(service.gateway.uid)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    service: ProfileService = Depends(get_profile_service)
):
    """Update display name, bio, avatar or banner"""
    return service.update_profile(profile_data)


@router.post("/me/seen", response_model=ProfileResponse)
async def touch_last_seen(service: ProfileService = Depends(get_profile_service)):
    """Record activity (last_seen = now)"""
    return service.touch_last_seen()


@router.get("/username-available/{username}", response_model=UsernameAvailability)
async def username_available(
    username: str,
    service: ProfileService = Depends(get_public_profile_service)
):
    return UsernameAvailability(
        username=normalize_username(username),
        available=not service.is_username_taken(username, exclude_id=service.gateway.uid)
    )


@router.get("/by-username/{username}", response_model=ProfileResponse)
async def get_profile_by_username(
    username: str,
    service: ProfileService = Depends(get_public_profile_service)
):
    return service.get_by_username(username)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    service: ProfileService = Depends(get_public_profile_service)
):
    """Profiles are public"""
    return service.get_profile(profile_id)
