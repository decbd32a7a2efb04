from fastapi import APIRouter, Depends
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_gateway, get_public_gateway
from socialnet.modules.follows.schemas import FollowResponse, FollowStatus
from socialnet.modules.follows.service import FollowService
from typing import List

router = APIRouter(prefix="/follows", tags=["follows"])


def get_follow_service(gateway: PolicyGateway = Depends(get_gateway)) -> FollowService:
    return FollowService(gateway)


def get_public_follow_service(gateway: PolicyGateway = Depends(get_public_gateway)) -> FollowService:
    return FollowService(gateway)


@router.post("/{user_id}", response_model=FollowResponse, status_code=201)
async def follow(
    user_id: str,
    service: FollowService = Depends(get_follow_service)
):
    return service.follow(user_id)


@router.delete("/{user_id}", status_code=204)
async def unfollow(
    user_id: str,
    service: FollowService = Depends(get_follow_service)
):
    service.unfollow(user_id)
    return None


@router.get("/{user_id}/status", response_model=FollowStatus)
async def follow_status(
    user_id: str,
    service: FollowService = Depends(get_follow_service)
):
    """Whether the caller follows user_id"""
    return FollowStatus(
        follower_id=service.gateway.uid,
        following_id=user_id,
        following=service.is_following(service.gateway.uid, user_id)
    )


@router.get("/{user_id}/followers", response_model=List[FollowResponse])
async def list_followers(
    user_id: str,
    service: FollowService = Depends(get_public_follow_service)
):
    return service.followers(user_id)


@router.get("/{user_id}/following", response_model=List[FollowResponse])
async def list_following(
    user_id: str,
    service: FollowService = Depends(get_public_follow_service)
):
    return service.following(user_id)
