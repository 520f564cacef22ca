# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/puantaj/routes/admin.py
"""
Admin routes for user management.

Provides endpoints for:
- Listing users
- Activating and suspending users (suspension deletes their sessions)
- Changing roles

All endpoints require an authenticated admin.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..services import auth_service
from ..validation import ConflictError, NotFoundError, ValidationError
from ..decorators import require_auth, require_admin

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_admin
def list_users():
    users = auth_service.list_users()
    return jsonify({"users": [u.to_dict() for u in users], "count": len(users)})


@admin_bp.patch("/users/<user_id>/status")
@require_auth
@require_admin
def set_user_status(user_id: str):
    """
    Activate or suspend a user.

    Request body: {"status": "ACTIVE" | "SUSPENDED"}

    A suspended user's sessions are deleted immediately; the next request
    with any of their tokens gets 401.
    """
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().upper()
    if not status:
        return jsonify({"error": "status is required"}), 400

    try:
        user = auth_service.set_user_status(user_id, status, actor=g.current_user)
        return jsonify({"user": user.to_dict()})
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update user status")
        return jsonify({"error": "Internal server error"}), 500


@admin_bp.patch("/users/<user_id>/role")
@require_auth
@require_admin
def set_user_role(user_id: str):
    """Request body: {"role": "USER" | "ADMIN" | "SUPER_ADMIN"}"""
    data = request.get_json(silent=True) or {}
    role = (data.get("role") or "").strip().upper()
    if not role:
        return jsonify({"error": "role is required"}), 400

    try:
        user = auth_service.set_user_role(user_id, role)
        return jsonify({"user": user.to_dict()})
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update user role")
        return jsonify({"error": "Internal server error"}), 500
