# backend/storefront/routes/system.py
"""
API index and health endpoints.
"""

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db
from ..models import Product, User
from ..time_utils import to_utc_z, utcnow

API_NAME = "Storefront API"
API_VERSION = "1.0.0"

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        user_count = db.session.query(User).count()
        product_count = db.session.query(Product).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "dialect": db.engine.dialect.name,
                "users": user_count,
                "products": product_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/")
def index():
    return {
        "message": API_NAME,
        "version": API_VERSION,
        "status": "online",
        "timestamp": to_utc_z(utcnow()),
        "endpoints": {
            "health": "/health",
            "auth": "/auth",
            "products": "/products",
            "cart": "/cart",
            "sales": "/sales",
            "users": "/users",
        },
    }


@system_bp.get("/health")
def health():
    """
    Health check endpoint.

    Returns:
    - 200: database reachable
    - 500: database unreachable
    """
    database_health = check_database_health()
    healthy = database_health["status"] == "healthy"

    response = {
        "status": "OK" if healthy else "ERROR",
        "timestamp": to_utc_z(utcnow()),
        "database": database_health,
    }
    return response, 200 if healthy else 500
