# Overview: User administration (list, read, patch, delete); SuperUser-only at the route layer.

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import User
from ..validation import ModelValidationPolicy, enforce_rules_user, validate_payload

USER_POLICY = ModelValidationPolicy(
    writable_fields={"username", "email", "role"},
)


def list_users() -> list[User]:
    return db.session.query(User).order_by(User.username.asc(), User.id.asc()).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


def update_user(user_id: int, payload: dict) -> User:
    """
    Patch username, email and/or role.

    Only keys present in the payload are touched; uniqueness is re-checked
    for the fields that change.
    """
    user = get_user(user_id)

    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=True)
    enforce_rules_user(patch)
    if not patch:
        raise ValidationError("No fields to update")

    if "username" in patch and patch["username"] != user.username:
        taken = db.session.query(User).filter(User.username == patch["username"], User.id != user.id).first()
        if taken:
            raise ConflictError("Username already exists")

    if "email" in patch and patch["email"] != user.email:
        taken = db.session.query(User).filter(User.email == patch["email"], User.id != user.id).first()
        if taken:
            raise ConflictError("Email already exists")

    for key, value in patch.items():
        setattr(user, key, value)

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("Username or email already exists")

    current_app.logger.info("Updated user id=%s fields=%s", user.id, ",".join(sorted(patch)))
    return user


def delete_user(user_id: int) -> None:
    """Delete the account and its cart. Sales keep user_id as history."""
    user = get_user(user_id)
    db.session.delete(user)
    db.session.commit()
    current_app.logger.info("Deleted user id=%s", user_id)
