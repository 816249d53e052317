import pytest

from app.models.user import User
from app.security.identity import Identity
from app.security.ownership import ensure_acting_as, ensure_not_self, ensure_owner
from app.utils.exceptions import ForbiddenError, InvalidOperationError


@pytest.fixture
def identity():
    return Identity.of(User(id="u-1", username="alice"))


def test_owner_passes():
    ensure_owner("u-1", "u-1", "nope")


def test_non_owner_is_forbidden():
    with pytest.raises(ForbiddenError) as exc_info:
        ensure_owner("u-1", "u-2", "You can only update your own posts")
    assert exc_info.value.message == "You can only update your own posts"
    assert exc_info.value.code == "FORBIDDEN"


def test_acting_as_self(identity):
    ensure_acting_as(identity, "u-1")
    with pytest.raises(ForbiddenError):
        ensure_acting_as(identity, "u-2")


def test_not_self():
    ensure_not_self("u-1", "u-2", "You cannot follow yourself")
    with pytest.raises(InvalidOperationError) as exc_info:
        ensure_not_self("u-1", "u-1", "You cannot follow yourself")
    assert exc_info.value.code == "INVALID_OPERATION"


def test_identity_of_user(identity):
    assert identity.user_id == "u-1"
    assert identity.username == "alice"
    assert identity.user.username == "alice"
