# backend/storefront/config.py
from __future__ import annotations
import os
from datetime import timedelta


def _split_origins(raw: str) -> list[str]:
    return [o.strip() for o in raw.split(",") if o.strip()]


DEV_SECRET_KEY = "dev-secret-key-change-me"

# Environments allowed to run with the built-in dev signing key
INSECURE_KEY_ENVS = ("development", "test")


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", DEV_SECRET_KEY)

    # "development" exposes internal error details in 500 responses
    APP_ENV = os.environ.get("APP_ENV", "production")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///storefront.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Identity tokens (signed JWT carrying the user id).
    # Required outside development/test; create_app refuses the dev default.
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    PASSWORD_RESET_TTL = timedelta(hours=1)

    # bcrypt cost factor
    BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", "12"))

    # Explicit allow-list; unknown origins get no CORS headers at all
    CORS_ALLOWED_ORIGINS = _split_origins(
        os.environ.get(
            "CORS_ALLOWED_ORIGINS",
            "http://localhost:3000,http://localhost:5173,http://127.0.0.1:5173",
        )
    )

    # Outbound email (password reset links)
    RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")
    MAIL_SENDER = os.environ.get("MAIL_SENDER", "Storefront <no-reply@storefront.local>")
    FRONTEND_URL = os.environ.get("FRONTEND_URL", "http://localhost:3000")
