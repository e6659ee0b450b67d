# Overview: Error taxonomy and the JSON error boundary for every blueprint.

"""
API error taxonomy.

Every service raises one of these; routes never build error responses by hand.
register_error_handlers() maps them to an HTTP status and a {"message": ...}
body so no error crosses the request boundary unhandled.
"""

from flask import current_app, jsonify, request
from werkzeug.exceptions import HTTPException, NotFound


class ApiError(Exception):
    """Base class for errors that map directly to an HTTP response."""

    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ApiError):
    """400-level input problem (malformed payload, weak password)."""
    status_code = 400


class ConflictError(ApiError):
    """409-level duplicate of a unique field (username, email)."""
    status_code = 409


class AuthenticationError(ApiError):
    """Bad credentials or a missing/invalid/expired identity token."""
    status_code = 401


class PermissionDeniedError(ApiError):
    """Role mismatch or ownership mismatch."""
    status_code = 403


class NotFoundError(ApiError):
    status_code = 404


class InsufficientStockError(ApiError):
    """Requested quantity exceeds the product's current stock."""
    status_code = 400

    def __init__(self, product_name: str, requested: int, available: int, product_id: int | None = None):
        super().__init__(
            f"Insufficient stock for {product_name}",
            details={
                "product_id": product_id,
                "requested_quantity": requested,
                "available": available,
            },
        )


class InternalError(ApiError):
    status_code = 500


def _expose_details() -> bool:
    return current_app.config.get("APP_ENV") == "development"


def register_error_handlers(app) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        if exc.status_code >= 500:
            current_app.logger.error("%s %s failed: %s", request.method, request.path, exc.message)
        body = exc.to_dict()
        if isinstance(exc, InternalError) and not _expose_details():
            body.pop("details", None)
        return jsonify(body), exc.status_code

    @app.errorhandler(NotFound)
    def handle_unmatched_route(exc: NotFound):
        return jsonify({
            "error": "Route not found",
            "path": request.path,
            "method": request.method,
        }), 404

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        return jsonify({"message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        body = {"message": "Internal server error"}
        if _expose_details():
            body["error"] = str(exc)
        return jsonify(body), 500
