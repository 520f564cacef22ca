# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/puantaj/routes/auth.py
"""
Authentication API routes

SECURITY FEATURES:
- Password strength validation on registration
- Login throttling to prevent brute-force attacks
- Account lockout after repeated failed attempts
- Session management with opaque DB-backed tokens (header or cookie)
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..services.auth_service import AccountSuspendedError, PasswordValidationError
from ..services.login_throttle_service import get_throttle
from ..validation import ConflictError, ValidationError
from ..decorators import require_auth, extract_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(user, status_code: int):
    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    response = jsonify({
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
    })
    response.set_cookie(
        current_app.config.get("AUTH_COOKIE_NAME", "auth_token"),
        token,
        max_age=current_app.config.get("SESSION_TTL_DAYS", 30) * 24 * 3600,
        httponly=True,
        samesite="Lax",
    )
    return response, status_code


@auth_bp.post("/register")
def register_route():
    """
    Create an account and log it in.

    Request body: {email, password, first_name?, last_name?}
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.create_user(
            email=email,
            password=password,
            first_name=data.get("first_name"),
            last_name=data.get("last_name"),
        )
        return _session_response(user, 201)

    except (PasswordValidationError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to register user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    The token is returned in the body and set as the auth cookie.

    SECURITY:
    - Checks for lockout before attempting authentication
    - Records failed attempts for throttling
    - Suspended accounts get 403 even with the right password
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        throttle = get_throttle()

        is_locked, seconds_remaining = throttle.is_account_locked(email)
        if is_locked:
            minutes_remaining = (seconds_remaining // 60) + 1 if seconds_remaining else 15
            return jsonify({
                "error": "Account temporarily locked due to too many failed login attempts",
                "locked": True,
                "retry_after_seconds": seconds_remaining,
                "retry_after_minutes": minutes_remaining,
            }), 429  # Too Many Requests

        try:
            user = auth_service.authenticate(email, password)
        except AccountSuspendedError as e:
            return jsonify({"error": str(e)}), 403

        if not user:
            failed_count = throttle.record_failed_attempt(email)
            remaining = throttle.max_failed_attempts - failed_count

            if remaining <= 0:
                return jsonify({
                    "error": "Account locked due to too many failed login attempts",
                    "locked": True,
                    "retry_after_minutes": int(throttle.lockout_duration.total_seconds() // 60),
                }), 429
            elif remaining <= 3:
                return jsonify({
                    "error": "Invalid credentials",
                    "warning": f"{remaining} attempts remaining before account lockout"
                }), 401
            else:
                return jsonify({"error": "Invalid credentials"}), 401

        throttle.record_successful_login(email)
        return _session_response(user, 200)

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Delete the session (logout).

    Accepts the token from the Authorization header or the auth cookie.
    """
    try:
        token = extract_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        deleted = session_service.delete_session(token)

        response = jsonify({"message": "Logout successful"} if deleted else {"error": "Invalid or expired token"})
        response.delete_cookie(current_app.config.get("AUTH_COOKIE_NAME", "auth_token"))
        return response, (200 if deleted else 401)

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/user")
@require_auth
def current_user_route():
    """Return the authenticated user."""
    return jsonify(g.current_user.to_dict())


@auth_bp.get("/lockout-status/<identifier>")
def lockout_status_route(identifier: str):
    """
    Check lockout status for an account.

    Public, so a locked-out user can see when to retry.
    """
    return jsonify(get_throttle().get_lockout_status(identifier))


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    """
    Change the caller's password. Every session of the user is deleted,
    including the current one.
    """
    data = request.get_json(silent=True) or {}
    current_password = data.get("current_password")
    new_password = data.get("new_password")
    if not all([current_password, new_password]):
        return jsonify({"error": "current_password and new_password required"}), 400

    try:
        auth_service.change_password(g.current_user, current_password, new_password)
        return jsonify({"message": "Password changed"}), 200
    except (PasswordValidationError, ValidationError) as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to change password")
        return jsonify({"error": "Internal server error"}), 500
