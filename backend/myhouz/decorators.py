# Overview: Request authentication decorators for API routes.

from functools import wraps
from flask import request, g

from .responses import error_response
from .services import session_service


def bearer_token() -> str | None:
    """Token from an `Authorization: Bearer <token>` header, if any."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid session token.

    Sets g.current_user to the authenticated User.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return error_response("Authentication required", 401)

        context = session_service.validate_session(token)
        if not context:
            return error_response("Invalid or expired token", 401)

        g.current_user = context.user

        return f(*args, **kwargs)

    return decorated_function


def require_professional(f):
    """Back-office routes: the authenticated user must be a professional."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not hasattr(g, "current_user"):
            return error_response("Authentication required", 401)
        if not g.current_user.is_professional:
            return error_response("Professional account required", 403)
        return f(*args, **kwargs)
    return decorated_function
