# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, request, jsonify, g

from .services import session_service


def extract_token() -> str | None:
    """Bearer token from the Authorization header, else the auth cookie."""
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1].strip()
        if token:
            return token

    cookie_name = current_app.config.get("AUTH_COOKIE_NAME", "auth_token")
    return request.cookies.get(cookie_name) or None


def require_auth(f):
    """
    Require authentication.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header or auth cookie
    - Invalid or expired token
    - User account suspended (the session rows are deleted as a side effect)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = extract_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.resolve_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_admin(f):
    """Require an authenticated user with admin access. Use after @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = getattr(g, "current_user", None)
        if user is None:
            return jsonify({"error": "Authentication required"}), 401
        if not user.has_admin_access:
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, **kwargs)

    return decorated_function
