# Overview: Issues and verifies the signed identity tokens carried in the Authorization header.

"""
Identity Token Service

Tokens are HS256 JWTs (flask-jwt-extended) whose subject is the user id.
Expiry is JWT_ACCESS_TOKEN_EXPIRES (24 hours) and the signing key is the
server-held JWT_SECRET_KEY; nothing about the token is stored server-side.

A token that verifies is not enough on its own: resolve_user() re-reads
the account so a deleted user's still-valid token is rejected.
"""
from __future__ import annotations

from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from ..errors import AuthenticationError
from ..extensions import db
from ..models import User


def issue_token(user_id: int, expires_delta: timedelta | None = None) -> str:
    """Sign a token for user_id. expires_delta overrides the configured lifetime."""
    return create_access_token(identity=str(user_id), expires_delta=expires_delta)


def verify_token(token: str) -> int:
    """
    Validate signature and expiry; return the embedded user id.

    Raises AuthenticationError for malformed, tampered or expired tokens.
    """
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException) as exc:
        current_app.logger.warning("Rejected identity token: %s", type(exc).__name__)
        raise AuthenticationError("Invalid or expired token")

    subject = claims.get(current_app.config.get("JWT_IDENTITY_CLAIM", "sub"))
    try:
        return int(subject)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid or expired token")


def resolve_user(token: str) -> User:
    """Verify the token, then confirm the account still exists."""
    user_id = verify_token(token)
    user = db.session.get(User, user_id)
    if user is None:
        current_app.logger.warning("Token presented for deleted user id=%s", user_id)
        raise AuthenticationError("Invalid or expired token")
    return user
