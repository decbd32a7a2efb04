from socialnet.core.access import PolicyGateway
from socialnet.core.errors import ConstraintViolation, NotFound
from socialnet.modules.follows.schemas import FollowResponse
from typing import List


class FollowService:
    def __init__(self, gateway: PolicyGateway):
        self.gateway = gateway

    def follow(self, user_id: str) -> FollowResponse:
        """Follow another profile as the caller"""
        if not self.gateway.first("profiles", id=user_id):
            raise NotFound("Profile not found")
        if self.is_following(self.gateway.uid, user_id):
            raise ConstraintViolation("Already following")
        row = self.gateway.insert("follows", {
            "follower_id": self.gateway.uid,
            "following_id": user_id
        })
        return FollowResponse(**row)

    def unfollow(self, user_id: str) -> None:
        self.gateway.delete("follows", follower_id=self.gateway.uid, following_id=user_id)

    def is_following(self, follower_id: str, following_id: str) -> bool:
        return self.gateway.first("follows", follower_id=follower_id, following_id=following_id) is not None

    def followers(self, user_id: str) -> List[FollowResponse]:
        rows = self.gateway.select("follows", order_by="created_at", desc=True, following_id=user_id)
        return [FollowResponse(**row) for row in rows]

    def following(self, user_id: str) -> List[FollowResponse]:
        rows = self.gateway.select("follows", order_by="created_at", desc=True, follower_id=user_id)
        return [FollowResponse(**row) for row in rows]
