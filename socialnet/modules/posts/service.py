from socialnet.config.settings import settings
from socialnet.core.access import PolicyGateway
from socialnet.core.errors import NotFound
from socialnet.modules.posts.schemas import PostCreate, PostResponse
from typing import List, Optional


class PostService:
    def __init__(self, gateway: PolicyGateway):
        self.gateway = gateway

    def create_post(self, post_data: PostCreate) -> PostResponse:
        """Create a post owned by the caller"""
        row = {"user_id": self.gateway.uid, "content": post_data.content}
        if post_data.media_url:
            row["media_url"] = post_data.media_url
            row["media_type"] = post_data.media_type or "image"
        return PostResponse(**self.gateway.insert("posts", row))

    def get_post(self, post_id: str) -> PostResponse:
        row = self.gateway.first("posts", id=post_id)
        if not row:
            raise NotFound("Post not found")
        return PostResponse(**row)

    def list_posts(self, user_id: Optional[str] = None, limit: Optional[int] = None) -> List[PostResponse]:
        """Newest first; all authors unless user_id is given"""
        match = {"user_id": user_id} if user_id else {}
        rows = self.gateway.select(
            "posts", order_by="created_at", desc=True,
            limit=limit or settings.default_page_size, **match
        )
        return [PostResponse(**row) for row in rows]

    def feed(self, limit: Optional[int] = None) -> List[PostResponse]:
        """Posts by the caller and everyone the caller follows, newest first"""
        follows = self.gateway.select("follows", follower_id=self.gateway.uid)
        authors = [self.gateway.uid] + [f["following_id"] for f in follows]
        rows = self.gateway.select(
            "posts", order_by="created_at", desc=True,
            limit=limit or settings.default_page_size, user_id=authors
        )
        return [PostResponse(**row) for row in rows]

    def delete_post(self, post_id: str) -> None:
        self.gateway.delete("posts", id=post_id)
