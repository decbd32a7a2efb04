"""
Profiles, posts, follows and account lifecycle
"""
import pytest
from fastapi import HTTPException

from socialnet.core.errors import ConstraintViolation, IdentityServiceError, NotFound, PolicyDenied, ValidationFailed
from socialnet.modules.auth.schemas import LoginRequest, RegisterRequest
from socialnet.modules.auth.service import AuthService
from socialnet.modules.follows.service import FollowService
from socialnet.modules.posts.schemas import PostCreate
from socialnet.modules.posts.service import PostService
from socialnet.modules.profiles.schemas import ProfileUpdate
from socialnet.modules.profiles.service import ProfileService


# ===================================================================
# Profiles
# ===================================================================

def test_lookup_by_username_is_case_insensitive(gateway_for, alice):
    assert ProfileService(gateway_for(None)).get_by_username("ALICE").id == alice


def test_username_taken_ignores_own_profile(gateway_for, alice):
    profiles = ProfileService(gateway_for(alice))
    assert profiles.is_username_taken("Alice") is True
    assert profiles.is_username_taken("alice", exclude_id=alice) is False


def test_update_profile_fields(db, gateway_for, alice):
    updated = ProfileService(gateway_for(alice)).update_profile(ProfileUpdate(bio="Hello there"))
    assert updated.bio == "Hello there"
    assert db.find("profiles", id=alice)[0]["bio"] == "Hello there"


def test_blank_display_name_rejected(gateway_for, alice):
    with pytest.raises(ValidationFailed):
        ProfileService(gateway_for(alice)).update_profile(ProfileUpdate(display_name=" "))


def test_cannot_create_profile_for_someone_else(gateway_for, alice):
    with pytest.raises(PolicyDenied):
        ProfileService(gateway_for(alice)).create_profile("other-id", "mallory", "Mallory")


def test_touch_last_seen(gateway_for, alice):
    assert ProfileService(gateway_for(alice)).touch_last_seen().last_seen is not None


def test_missing_profile(gateway_for):
    with pytest.raises(NotFound):
        ProfileService(gateway_for(None)).get_profile("missing")


# ===================================================================
# Posts
# ===================================================================

def test_posts_listed_newest_first(gateway_for, alice, bob):
    PostService(gateway_for(alice)).create_post(PostCreate(content="first"))
    PostService(gateway_for(bob)).create_post(PostCreate(content="second"))

    public = PostService(gateway_for(None))
    assert [p.content for p in public.list_posts()] == ["second", "first"]
    assert [p.content for p in public.list_posts(user_id=alice)] == ["first"]
    assert [p.content for p in public.list_posts(limit=1)] == ["second"]


def test_only_author_deletes_post(db, gateway_for, alice, bob):
    post = PostService(gateway_for(alice)).create_post(PostCreate(content="mine", media_url="v.mp4", media_type="video"))
    assert post.media_type == "video"

    with pytest.raises(PolicyDenied):
        PostService(gateway_for(bob)).delete_post(post.id)
    PostService(gateway_for(alice)).delete_post(post.id)
    assert db.find("posts") == []


def test_feed_contains_self_and_followed(gateway_for, alice, bob, carol):
    for uid, text in ((alice, "from alice"), (bob, "from bob"), (carol, "from carol")):
        PostService(gateway_for(uid)).create_post(PostCreate(content=text))
    FollowService(gateway_for(alice)).follow(bob)

    assert [p.content for p in PostService(gateway_for(alice)).feed()] == ["from bob", "from alice"]


# ===================================================================
# Follows
# ===================================================================

def test_follow_and_unfollow(gateway_for, alice, bob):
    follows = FollowService(gateway_for(alice))
    follows.follow(bob)

    assert follows.is_following(alice, bob)
    assert [f.follower_id for f in FollowService(gateway_for(None)).followers(bob)] == [alice]
    assert [f.following_id for f in follows.following(alice)] == [bob]

    with pytest.raises(ConstraintViolation):
        follows.follow(bob)

    follows.unfollow(bob)
    assert not follows.is_following(alice, bob)
    with pytest.raises(NotFound):
        follows.unfollow(bob)


def test_follow_unknown_profile(gateway_for, alice):
    with pytest.raises(NotFound):
        FollowService(gateway_for(alice)).follow("missing")


# ===================================================================
# Accounts
# ===================================================================

def test_register_creates_lowercase_profile(db):
    response = AuthService(db, db).register(
        RegisterRequest(email="erin@example.com", password="secret-password", username=" Erin ")
    )
    assert response.username == "erin"
    profile = db.find("profiles", id=response.user_id)[0]
    assert profile["username"] == "erin"
    assert profile["display_name"] == "erin"
    assert profile["theme"] == "lt-classic"


def test_register_rejects_taken_username(db, alice):
    with pytest.raises(ConstraintViolation):
        AuthService(db, db).register(
            RegisterRequest(email="other@example.com", password="secret-password", username="ALICE")
        )
    assert len(db.users) == 1


def test_register_rolls_back_auth_user_when_profile_insert_fails(db, alice, monkeypatch):
    # username claimed between the availability check and the insert
    monkeypatch.setattr(ProfileService, "is_username_taken", lambda self, username, exclude_id=None: False)
    service = AuthService(db, db)

    with pytest.raises(ConstraintViolation):
        service.register(RegisterRequest(email="erin@example.com", password="secret-password", username="ALICE"))

    assert list(db.users) == [alice]
    assert len(db.find("profiles")) == 1

    response = service.register(RegisterRequest(email="erin@example.com", password="secret-password", username="erin"))
    assert db.find("profiles", id=response.user_id)[0]["username"] == "erin"


def test_register_duplicate_email(db, alice):
    with pytest.raises(ConstraintViolation):
        AuthService(db, db).register(
            RegisterRequest(email="alice@example.com", password="secret-password", username="alice2")
        )


def test_login_and_current_user(db, alice):
    service = AuthService(db, db)
    token = service.login(LoginRequest(email="alice@example.com", password="secret-password"))
    assert service.get_current_user(token.access_token)["id"] == alice

    with pytest.raises(HTTPException) as info:
        service.login(LoginRequest(email="alice@example.com", password="wrong"))
    assert info.value.status_code == 401


def test_invalid_token(db):
    with pytest.raises(HTTPException) as info:
        AuthService(db, db).get_current_user("garbage")
    assert info.value.status_code == 401


def test_delete_account_removes_profile(db, alice, bob):
    AuthService(db, db).delete_account(alice)
    assert db.find("profiles", id=alice) == []
    assert alice not in db.users

    with pytest.raises(IdentityServiceError):
        AuthService(db, db).delete_account(alice)
