# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

SECURITY FEATURES:
- Password strength validation on registration
- Session management with token-based auth (only the token hash is stored)
- Logout revokes the presented token
"""

from flask import Blueprint, request, current_app, g

from ..errors import DomainError
from ..services import auth_service
from ..services import session_service
from ..decorators import bearer_token, require_auth
from ..responses import domain_error_response, error_response, server_error_response, success_response


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/register")
def register_route():
    """
    Create an account.

    Request body:
    {
        "email": "jane@example.com",
        "password": "Str0ng!pass",
        "first_name": "Jane",
        "last_name": "Doe",
        "user_type": "professional"   (optional, default "individual")
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        user = auth_service.create_user(
            email=data.get("email"),
            password=data.get("password"),
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
            user_type=data.get("user_type") or "individual",
        )

        return success_response(user.to_dict(), message="Account created", status=201)

    except DomainError as e:
        return domain_error_response(e)
    except Exception:
        current_app.logger.exception("Failed to register user")
        return server_error_response()


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not email or not password:
            return error_response("email and password required", 400)

        user = auth_service.authenticate(email, password)
        if not user:
            return error_response("Invalid credentials", 401)

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return success_response({
            "user": user.to_dict(),
            "token": token,
            "session": session.to_dict(),
        }, message="Login successful")

    except Exception:
        current_app.logger.exception("Failed to login user")
        return server_error_response()


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    WHY: Explicit logout prevents token reuse.
    """
    try:
        token = bearer_token()
        if not token:
            return error_response("Authorization header required", 401)

        if not session_service.revoke_session(token, reason="User logout"):
            return error_response("Invalid or expired token", 401)

        return success_response(None, message="Logout successful")

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return server_error_response()


@auth_bp.get("/me")
@require_auth
def me_route():
    return success_response(g.current_user.to_dict())
