# Overview: Service-layer operations for credentials; registration, login and password lifecycle.

"""
Authentication Service

Uses bcrypt for password hashing and validates password strength on every
path that sets a password (registration, change, reset, CLI).

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor BCRYPT_ROUNDS, default 12)
- Minimum 8 characters; uppercase, lowercase, digit and special char required
- Login returns the same error for unknown email and wrong password
- Reset tokens: 32 random bytes, stored as SHA-256 digest, valid 1 hour, single use
"""

import bcrypt
import hashlib
import re
import secrets
from functools import lru_cache

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import AuthenticationError, ConflictError, InternalError, NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from ..roles import Role
from ..time_utils import utcnow
from ..validation import normalize_email
from . import mail_service
from . import token_service

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"
_SPECIAL_RE = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character from SPECIAL_CHARACTERS

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise PasswordValidationError("Password is required")

    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not _SPECIAL_RE.search(password):
        raise PasswordValidationError("Password must contain at least one special character")


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    bcrypt.checkpw() is timing-safe.
    """
    if not isinstance(password, str) or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed stored hash
        return False


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    # Same cost factor as real hashes so both login failures take equal time
    return bcrypt.hashpw(b"not-a-real-password", bcrypt.gensalt(rounds=rounds)).decode('utf-8')


def hash_reset_token(token: str) -> str:
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def _require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def create_user(username: str, email: str, password: str, role: Role = Role.USER) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        PasswordValidationError: If password doesn't meet requirements
        ConflictError: If username or email already exists
    """
    username = _require_text(username, "username")
    email = normalize_email(_require_text(email, "email"))
    if "@" not in email:
        raise ValidationError("email must be a valid email address")
    if len(username) > 64:
        raise ValidationError("username exceeds max length 64")

    # Hash password with bcrypt (validates strength automatically)
    password_hash = hash_password(password)

    existing = db.session.query(User).filter(
        db.or_(User.username == username, User.email == email)
    ).first()
    if existing:
        raise ConflictError("User already exists")

    user = User(username=username, email=email, password_hash=password_hash, role=role)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        db.session.rollback()
        raise ConflictError("User already exists")
    return user


def register(username: str, email: str, password: str) -> tuple[User, str]:
    """Self-registration: always the User role. Returns (user, identity token)."""
    user = create_user(username, email, password, role=Role.USER)
    current_app.logger.info("Registered user id=%s username=%s", user.id, user.username)
    return user, token_service.issue_token(user.id)


def authenticate(email: str, password: str) -> tuple[User, str]:
    """
    Authenticate by email and password. Returns (user, identity token).

    Unknown email and wrong password raise the same AuthenticationError.
    """
    if not isinstance(email, str) or not isinstance(password, str):
        raise AuthenticationError("Invalid credentials")

    user = db.session.query(User).filter(User.email == normalize_email(email)).first()

    if not user:
        # Spend the same bcrypt work as a real comparison
        verify_password(password, _dummy_hash(current_app.config.get("BCRYPT_ROUNDS", 12)))
        current_app.logger.warning("Failed login attempt")
        raise AuthenticationError("Invalid credentials")

    if not verify_password(password, user.password_hash):
        current_app.logger.warning("Failed login attempt for user id=%s", user.id)
        raise AuthenticationError("Invalid credentials")

    current_app.logger.info("User id=%s logged in", user.id)
    return user, token_service.issue_token(user.id)


def change_password(user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    user.reset_token_hash = None
    user.reset_token_expires_at = None
    db.session.commit()
    current_app.logger.info("User id=%s changed password", user.id)


def request_password_reset(email: str) -> None:
    """
    Issue a single-use reset token and email it to the account owner.

    Only the SHA-256 digest of the token is stored; the plaintext exists
    solely in the email link.
    """
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("email is required")

    user = db.session.query(User).filter(User.email == normalize_email(email)).first()
    if not user:
        raise NotFoundError("No user exists with that email")

    token = secrets.token_hex(32)
    user.reset_token_hash = hash_reset_token(token)
    user.reset_token_expires_at = utcnow() + current_app.config["PASSWORD_RESET_TTL"]
    db.session.commit()
    current_app.logger.info("Password reset requested for user id=%s", user.id)

    if not mail_service.send_password_reset_email(user.email, token):
        raise InternalError("Password reset email could not be sent")


def reset_password(token: str, new_password: str) -> User:
    """
    Consume a reset token and set a new password.

    The token is invalidated by the same conditional UPDATE that writes the
    new hash, so it can succeed at most once.
    """
    validate_password_strength(new_password)

    if not isinstance(token, str) or not token:
        raise ValidationError("Invalid or expired token")

    token_hash = hash_reset_token(token)
    user = db.session.query(User).filter(
        User.reset_token_hash == token_hash,
        User.reset_token_expires_at > utcnow(),
    ).first()
    if not user:
        raise ValidationError("Invalid or expired token")

    result = db.session.execute(
        update(User)
        .where(User.id == user.id, User.reset_token_hash == token_hash)
        .values(
            password_hash=hash_password(new_password),
            reset_token_hash=None,
            reset_token_expires_at=None,
        )
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount != 1:
        db.session.rollback()
        raise ValidationError("Invalid or expired token")

    db.session.commit()
    current_app.logger.info("Password reset completed for user id=%s", user.id)
    return user
