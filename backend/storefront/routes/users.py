# Overview: Flask API routes for user administration; SuperUser only.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_roles
from ..roles import Role
from ..services import users_service
from . import json_body

users_bp = Blueprint("users", __name__, url_prefix="/users")


@users_bp.get("")
@require_auth
@require_roles(Role.SUPERUSER)
def list_users():
    return jsonify([u.to_dict() for u in users_service.list_users()])


@users_bp.get("/<int:user_id>")
@require_auth
@require_roles(Role.SUPERUSER)
def get_user(user_id: int):
    return jsonify(users_service.get_user(user_id).to_dict())


@users_bp.put("/<int:user_id>")
@require_auth
@require_roles(Role.SUPERUSER)
def update_user(user_id: int):
    """Request body: any of {"username", "email", "role"}"""
    user = users_service.update_user(user_id, json_body())
    return jsonify({"message": "User updated successfully", "user": user.to_dict()})


@users_bp.delete("/<int:user_id>")
@require_auth
@require_roles(Role.SUPERUSER)
def delete_user(user_id: int):
    users_service.delete_user(user_id)
    return jsonify({"message": "User deleted successfully"})
