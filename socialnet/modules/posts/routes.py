from fastapi import APIRouter, Depends
from socialnet.core.access import PolicyGateway
from socialnet.core.dependencies import get_gateway, get_public_gateway
from socialnet.modules.posts.schemas import PostCreate, PostResponse
from socialnet.modules.posts.service import PostService
from typing import List, Optional

router = APIRouter(prefix="/posts", tags=["posts"])


def get_post_service(gateway: PolicyGateway = Depends(get_gateway)) -> PostService:
    return PostService(gateway)


def get_public_post_service(gateway: PolicyGateway = Depends(get_public_gateway)) -> PostService:
    return PostService(gateway)


@router.post("", response_model=PostResponse, status_code=201)
async def create_post(
    post_data: PostCreate,
    service: PostService = Depends(get_post_service)
):
    return service.create_post(post_data)


@router.get("", response_model=List[PostResponse])
async def list_posts(
    user_id: Optional[str] = None,
    limit: Optional[int] = None,
    service: PostService = Depends(get_public_post_service)
):
    """Public timeline, optionally for one author"""
    return service.list_posts(user_id=user_id, limit=limit)


@router.get("/feed", response_model=List[PostResponse])
async def get_feed(
    limit: Optional[int] = None,
    service: PostService = Depends(get_post_service)
):
    """Own posts plus posts of followed profiles"""
    return service.feed(limit=limit)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(
    post_id: str,
    service: PostService = Depends(get_public_post_service)
):
    return service.get_post(post_id)


@router.delete("/{post_id}", status_code=204)
async def delete_post(
    post_id: str,
    service: PostService = Depends(get_post_service)
):
    """Only the author may delete a post"""
    service.delete_post(post_id)
    return None
