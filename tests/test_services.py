from datetime import datetime, timedelta, timezone

import pytest

from app.dependencies import JWTAuthService
from app.security import token_codec
from app.security.identity import Identity
from app.services.auth_service import AuthService
from app.services.feed_service import FeedService
from app.services.post_service import PostService, validate_content
from app.services.user_service import UserService
from app.utils.exceptions import (
    ConflictError, ForbiddenError, InvalidCredentialsError, InvalidOperationError,
    NotFoundError, TokenExpiredError, UnauthenticatedError, ValidationError
)

SECRET = "testing_secret"


async def make_user(db, username):
    user = await AuthService(db).register(username, f"{username}@x.com", "pw12345678")
    return Identity.of(user)


# ─── AuthService ──────────────────────────────────────────────────────

async def test_register_hashes_password(db_session):
    user = await AuthService(db_session).register("alice", "alice@x.com", "pw12345678", "Alice")

    assert user.id
    assert user.display_name == "Alice"
    assert user.password != "pw12345678"
    assert user.password.startswith("$2b$")
    assert user.active is True


async def test_register_conflicts(db_session):
    service = AuthService(db_session)
    await service.register("alice", "alice@x.com", "pw12345678")

    with pytest.raises(ConflictError, match="Username already exists"):
        await service.register("alice", "new@x.com", "pw12345678")
    with pytest.raises(ConflictError, match="Email already exists"):
        await service.register("alice2", "alice@x.com", "pw12345678")


async def test_login_issues_token_for_username(db_session, settings):
    service = AuthService(db_session)
    await service.register("alice", "alice@x.com", "pw12345678")
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    result = await service.login("alice", "pw12345678", now=now)

    assert result.identity.username == "alice"
    assert result.expires_in == settings.JWT_ACCESS_TOKEN_EXPIRES_MINUTES * 60
    assert token_codec.verify(result.token, SECRET, now=now) == "alice"


async def test_login_rejects_inactive_user(db_session):
    service = AuthService(db_session)
    user = await service.register("alice", "alice@x.com", "pw12345678")
    user.active = False
    await db_session.commit()

    with pytest.raises(InvalidCredentialsError):
        await service.login("alice", "pw12345678")


async def test_login_unknown_user(db_session):
    with pytest.raises(InvalidCredentialsError, match="Invalid username or password"):
        await AuthService(db_session).login("nobody", "pw12345678")


# ─── JWTAuthService ───────────────────────────────────────────────────

async def test_authenticate_resolves_identity(db_session):
    alice = await make_user(db_session, "alice")
    token = (await AuthService(db_session).login("alice", "pw12345678")).token

    identity = await JWTAuthService(SECRET).authenticate(token, db_session)
    assert identity.user_id == alice.user_id


async def test_authenticate_rejects_inactive_user(db_session):
    alice = await make_user(db_session, "alice")
    token = (await AuthService(db_session).login("alice", "pw12345678")).token
    alice.user.active = False
    await db_session.commit()

    with pytest.raises(UnauthenticatedError):
        await JWTAuthService(SECRET).authenticate(token, db_session)


def test_validate_token_maps_codec_errors():
    service = JWTAuthService(SECRET)
    expired = token_codec.issue(
        "alice", SECRET, timedelta(seconds=1), now=datetime(2020, 1, 1, tzinfo=timezone.utc)
    )
    with pytest.raises(TokenExpiredError):
        service.validate_token(expired)

    with pytest.raises(UnauthenticatedError) as exc_info:
        service.validate_token("not.a.jwt")
    assert not isinstance(exc_info.value, TokenExpiredError)


# ─── UserService ──────────────────────────────────────────────────────

async def test_follow_and_unfollow(db_session):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = UserService(db_session)

    user = await service.follow_user(alice, bob.user_id)
    assert user.following == {bob.user_id}
    assert bob.user.followers == {alice.user_id}

    await service.follow_user(alice, bob.user_id)
    assert alice.user.following_count == 1

    status = await service.follow_status(bob, alice.user_id)
    assert status == {
        "is_following": False,
        "is_follower": True,
        "followers_count": 0,
        "following_count": 1,
    }

    await service.unfollow_user(alice, bob.user_id)
    assert alice.user.following == set()
    assert bob.user.followers == set()


async def test_follow_errors(db_session):
    alice = await make_user(db_session, "alice")
    service = UserService(db_session)

    with pytest.raises(InvalidOperationError, match="You cannot follow yourself"):
        await service.follow_user(alice, alice.user_id)
    with pytest.raises(InvalidOperationError):
        await service.unfollow_user(alice, alice.user_id)
    with pytest.raises(NotFoundError):
        await service.follow_user(alice, "missing")


async def test_followers_are_sorted_by_username(db_session):
    alice = await make_user(db_session, "alice")
    carol = await make_user(db_session, "carol")
    bob = await make_user(db_session, "bob")
    service = UserService(db_session)
    await service.follow_user(carol, alice.user_id)
    await service.follow_user(bob, alice.user_id)

    followers = await service.get_followers(alice.user)
    assert [u.username for u in followers] == ["bob", "carol"]

    page = await service.get_followers_page(alice.user, page=1, size=1)
    assert [u.username for u in page.items] == ["carol"]
    assert page.total == 2


async def test_update_user_only_for_self(db_session):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = UserService(db_session)

    with pytest.raises(ForbiddenError):
        await service.update_user(alice, bob.user_id, bio="nope")
    with pytest.raises(ConflictError):
        await service.update_user(alice, alice.user_id, email="bob@x.com")

    user = await service.update_user(alice, alice.user_id, bio="hello")
    assert user.bio == "hello"


async def test_delete_user_removes_posts(db_session):
    alice = await make_user(db_session, "alice")
    await PostService(db_session).create_post(alice, "hello")
    bob = await make_user(db_session, "bob")
    service = UserService(db_session)

    with pytest.raises(ForbiddenError):
        await service.delete_user(bob, alice.user_id)

    await service.delete_user(alice, alice.user_id)
    assert await service.count_posts(alice.user_id) == 0
    with pytest.raises(NotFoundError):
        await service.get_user_by_username("alice")


# ─── PostService ──────────────────────────────────────────────────────

@pytest.mark.parametrize("content", ["", "   ", "x" * 281])
def test_validate_content_rejects(content):
    with pytest.raises(ValidationError):
        validate_content(content)


def test_validate_content_accepts_max_length():
    assert validate_content("x" * 280) == "x" * 280


async def test_post_ownership(db_session):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = PostService(db_session)
    post = await service.create_post(alice, "hello")

    with pytest.raises(ForbiddenError, match="You can only update your own posts"):
        await service.update_post(bob, post.id, "hacked")
    with pytest.raises(ForbiddenError, match="You can only delete your own posts"):
        await service.delete_post(bob, post.id)

    updated = await service.update_post(alice, post.id, "edited")
    assert updated.content == "edited"
    assert updated.updated_at >= updated.created_at


async def test_likes_and_comments(db_session):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    service = PostService(db_session)
    post = await service.create_post(alice, "hello")

    await service.like_post(bob, post.id)
    await service.like_post(bob, post.id)
    assert post.like_user_ids == {bob.user_id}

    users = await service.get_liking_users(post.id)
    assert [u.username for u in users] == ["bob"]

    await service.unlike_post(bob, post.id)
    assert post.like_count == 0

    await service.add_comment(bob, post.id, "first")
    await service.add_comment(alice, post.id, "second")
    comments = await service.get_comments(post.id)
    assert [c.content for c in comments] == ["first", "second"]
    assert [c.position for c in comments] == [0, 1]

    with pytest.raises(ValidationError):
        await service.add_comment(bob, post.id, " ")
    with pytest.raises(NotFoundError):
        await service.like_post(bob, "missing")


# ─── FeedService ──────────────────────────────────────────────────────

async def test_personal_feed(db_session):
    alice = await make_user(db_session, "alice")
    bob = await make_user(db_session, "bob")
    carol = await make_user(db_session, "carol")
    posts = PostService(db_session)
    await posts.create_post(bob, "bob")
    await posts.create_post(carol, "carol")
    await posts.create_post(alice, "alice")
    await UserService(db_session).follow_user(alice, bob.user_id)

    feed = await FeedService(db_session).personal_feed(alice, page=0, size=10)
    assert [p.content for p in feed.items] == ["alice", "bob"]
    assert feed.total == 2

    feed = await FeedService(db_session).user_feed("carol", page=0, size=10)
    assert [p.content for p in feed.items] == ["carol"]

    with pytest.raises(NotFoundError):
        await FeedService(db_session).user_feed("nobody", page=0, size=10)
