"""
Authentication tests.

Verifies:
- Passwords are stored salted ("salt:hash") and verify correctly
- Legacy unsalted hashes log in once and are upgraded in place
- Wrong credentials and inactive users are a negative result, not an error
- Password rotation requires the current password
"""

import pytest

from stockpos.models import User
from stockpos.services.auth_service import (
    AuthGateway,
    hash_password,
    is_legacy_hash,
    legacy_hash,
    verify_password,
)
from stockpos.validation import ConflictError, ValidationError


@pytest.fixture
def auth(store):
    return AuthGateway(store)


def test_hash_format_is_salted():
    stored = hash_password("secret1")
    salt, _, digest = stored.partition(":")
    assert len(salt) == 64
    assert len(digest) == 128
    assert hash_password("secret1") != stored
    assert verify_password("secret1", stored)
    assert not verify_password("secret2", stored)


def test_legacy_hash_verifies():
    stored = legacy_hash("secret1")
    assert is_legacy_hash(stored)
    assert verify_password("secret1", stored)
    assert not verify_password("nope", stored)


class TestVerify:
    def test_success_returns_user_without_hash(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        user = auth.verify("admin@test.local", "secret1")
        assert user["username"] == "admin"
        assert "password_hash" not in user

    def test_wrong_password_and_unknown_email(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        assert auth.verify("admin@test.local", "wrong") is None
        assert auth.verify("other@test.local", "secret1") is None
        assert auth.verify("", "secret1") is None

    def test_inactive_user_cannot_log_in(self, auth, db_session):
        user = auth.create_user("admin", "admin@test.local", "secret1")
        user.is_active = False
        db_session.commit()
        assert auth.verify("admin@test.local", "secret1") is None

    def test_legacy_hash_is_migrated_on_login(self, auth, db_session):
        db_session.add(User(username="old", email="old@test.local", password_hash=legacy_hash("secret1")))
        db_session.commit()

        assert auth.verify("old@test.local", "secret1") is not None

        stored = db_session.query(User).filter_by(email="old@test.local").one().password_hash
        assert not is_legacy_hash(stored)
        assert verify_password("secret1", stored)

        assert auth.verify("old@test.local", "secret1") is not None

    def test_failed_legacy_login_does_not_migrate(self, auth, db_session):
        original = legacy_hash("secret1")
        db_session.add(User(username="old", email="old@test.local", password_hash=original))
        db_session.commit()

        assert auth.verify("old@test.local", "wrong") is None
        assert db_session.query(User).filter_by(email="old@test.local").one().password_hash == original


class TestPasswordChanges:
    def test_update_password(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        assert auth.update_password("admin@test.local", "secret1", "secret2") is True
        assert auth.verify("admin@test.local", "secret1") is None
        assert auth.verify("admin@test.local", "secret2") is not None

    def test_update_password_wrong_current(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        assert auth.update_password("admin@test.local", "nope", "secret2") is False
        assert auth.verify("admin@test.local", "secret1") is not None

    def test_update_password_too_short(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        with pytest.raises(ValidationError):
            auth.update_password("admin@test.local", "secret1", "abc")

    def test_reset_password(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        assert auth.reset_password("admin@test.local", "secret9") is True
        assert auth.verify("admin@test.local", "secret9") is not None
        assert auth.reset_password("ghost@test.local", "secret9") is False


class TestDefaultUser:
    def test_initialize_default_user_once(self, auth, db_session):
        assert auth.initialize_default_user("admin", "admin@test.local", "secret1") is True
        assert auth.initialize_default_user("admin", "admin@test.local", "secret1") is False
        assert db_session.query(User).count() == 1

    def test_duplicate_username_conflicts(self, auth):
        auth.create_user("admin", "admin@test.local", "secret1")
        with pytest.raises(ConflictError):
            auth.create_user("admin", "second@test.local", "secret1")
