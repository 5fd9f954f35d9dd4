# Overview: Service-layer operations for auth; encapsulates credential checks and rotation.

"""
Local Authentication Service

WHY: The application is gated behind one local administrator account. All
credential handling lives here so that no other module ever sees a password
hash or has to know which storage format it uses.

SECURITY NOTES:
- Passwords hashed with PBKDF2-HMAC-SHA512, 100,000 iterations, 32-byte
  random salt, stored as "<salt hex>:<hash hex>"
- Legacy accounts stored an unsalted SHA-256 hex digest. These are accepted
  once and re-hashed to the salted format on that successful login.
- Failed verification returns None/False and never says whether the email
  or the password was wrong
- Digests are compared with hmac.compare_digest
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import secrets

from ..models import User
from ..store import PersistentStore
from ..time_utils import utcnow
from ..validation import ValidationError

logger = logging.getLogger(__name__)

PBKDF2_ALGORITHM = "sha512"
PBKDF2_ITERATIONS = 100_000
PBKDF2_KEY_LENGTH = 64
SALT_BYTES = 32

MIN_PASSWORD_LENGTH = 6


def validate_password_strength(password: str) -> None:
    """Raises ValidationError if the password is too short to accept."""
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")


def _pbkdf2(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        PBKDF2_ALGORITHM,
        password.encode("utf-8"),
        salt.encode("utf-8"),
        PBKDF2_ITERATIONS,
        dklen=PBKDF2_KEY_LENGTH,
    ).hex()


def hash_password(password: str) -> str:
    salt = secrets.token_hex(SALT_BYTES)
    return f"{salt}:{_pbkdf2(password, salt)}"


def legacy_hash(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def is_legacy_hash(password_hash: str) -> bool:
    return ":" not in password_hash


def verify_password(password: str, password_hash: str) -> bool:
    """True if password matches either stored format."""
    if not isinstance(password, str) or not password_hash:
        return False

    if is_legacy_hash(password_hash):
        return hmac.compare_digest(legacy_hash(password), password_hash)

    salt, _, expected = password_hash.partition(":")
    return hmac.compare_digest(_pbkdf2(password, salt), expected)


class AuthGateway:
    def __init__(self, store: PersistentStore):
        self.store = store

    def _active_user(self, email: str | None) -> User | None:
        if not email or not str(email).strip():
            return None
        return (
            self.store.query(User)
            .filter(User.email == str(email).strip(), User.is_active.is_(True))
            .first()
        )

    def verify(self, email: str, password: str) -> dict | None:
        """
        Check credentials for the active user with this email.

        Returns the user dict on success and None on any mismatch. A legacy
        unsalted hash that matches is upgraded to the salted format before
        returning.
        """
        user = self._active_user(email)
        if user is None:
            return None

        if not verify_password(password, user.password_hash):
            return None

        if is_legacy_hash(user.password_hash):
            with self.store.transaction():
                user.password_hash = hash_password(password)
                user.updated_at = utcnow()
            logger.info("Migrated legacy password hash for user id=%s", user.id)

        return user.to_dict()

    def update_password(self, email: str, current_password: str, new_password: str) -> bool:
        """
        Rotate the password. False when the user is unknown or the current
        password does not verify; nothing is written in that case.
        """
        validate_password_strength(new_password)

        user = self._active_user(email)
        if user is None:
            return False

        if not verify_password(current_password, user.password_hash):
            return False

        with self.store.transaction():
            user.password_hash = hash_password(new_password)
            user.updated_at = utcnow()
        return True

    def create_user(self, username: str, email: str, password: str) -> User:
        username = (username or "").strip()
        email = (email or "").strip()
        if not username:
            raise ValidationError("username is required")
        if not email:
            raise ValidationError("email is required")
        validate_password_strength(password)

        with self.store.transaction() as tx:
            user = User(username=username, email=email, password_hash=hash_password(password))
            tx.add(user)
            tx.flush()
        return user

    def initialize_default_user(self, username: str, email: str, password: str) -> bool:
        """Create the administrator if no user has this email. Returns True if created."""
        existing = self.store.query(User).filter(User.email == email).first()
        if existing is not None:
            return False

        self.create_user(username, email, password)
        logger.info("Created default user %s", username)
        return True

    def reset_password(self, email: str, new_password: str) -> bool:
        """Administrative reset without the current password (CLI only)."""
        validate_password_strength(new_password)
        user = self.store.query(User).filter(User.email == email).first()
        if user is None:
            return False
        with self.store.transaction():
            user.password_hash = hash_password(new_password)
            user.updated_at = utcnow()
        return True
