# Overview: Request authentication and role decorators for API routes.

from functools import wraps

from flask import current_app, g, request

from .errors import AuthenticationError, PermissionDeniedError
from .roles import Role, is_allowed
from .services import token_service


def _bearer_token() -> str:
    auth_header = request.headers.get("Authorization")

    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationError("Authentication required")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationError("Authentication required")
    return token


def require_auth(f):
    """
    Require a valid identity token.

    Sets g.current_user to the User the token resolves to. Raises
    AuthenticationError (401) if:
    - No Authorization header / not a Bearer token
    - Token malformed, tampered with or expired
    - The account no longer exists
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        g.current_user = token_service.resolve_user(_bearer_token())
        return f(*args, **kwargs)

    return decorated_function


def require_roles(*roles: Role):
    """
    Require the authenticated user's role to be one of `roles`.

    Must be stacked under @require_auth.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = getattr(g, "current_user", None)
            if user is None:
                raise AuthenticationError("Authentication required")

            if not is_allowed(user.role, roles):
                current_app.logger.warning(
                    "Permission denied: user id=%s role=%s on %s %s",
                    user.id, user.role.value, request.method, request.path,
                )
                raise PermissionDeniedError("Not authorized")

            return f(*args, **kwargs)

        return decorated_function
    return decorator
