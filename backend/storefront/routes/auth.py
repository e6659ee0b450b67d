# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/storefront/routes/auth.py
"""
Authentication API routes

- Password strength validation on registration, change and reset
- Stateless bearer tokens (24h) returned by register and login
- Password reset via emailed single-use token
"""

from flask import Blueprint, g, jsonify

from ..decorators import require_auth
from ..services import auth_service
from . import json_body


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


@auth_bp.post("/register")
def register_route():
    """
    Create a User-role account and return its token.

    Request body: {"username", "email", "password"}
    """
    data = json_body()
    user, token = auth_service.register(
        data.get("username"),
        data.get("email"),
        data.get("password"),
    )
    return jsonify({"token": token, "user": user.to_dict()}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate by email and password.

    Unknown email and wrong password both return 401 "Invalid credentials".
    """
    data = json_body()
    user, token = auth_service.authenticate(data.get("email"), data.get("password"))
    return jsonify({"token": token, "user": user.to_dict()}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify(g.current_user.to_dict()), 200


@auth_bp.put("/change-password")
@require_auth
def change_password_route():
    """Request body: {"current_password", "new_password"}"""
    data = json_body()
    auth_service.change_password(
        g.current_user,
        data.get("current_password"),
        data.get("new_password"),
    )
    return jsonify({"message": "Password changed successfully"}), 200


@auth_bp.post("/forgot-password")
def forgot_password_route():
    data = json_body()
    auth_service.request_password_reset(data.get("email"))
    return jsonify({"message": "Password reset email sent"}), 200


@auth_bp.post("/reset-password/<token>")
def reset_password_route(token: str):
    data = json_body()
    auth_service.reset_password(token, data.get("password"))
    return jsonify({"message": "Password reset successfully"}), 200
