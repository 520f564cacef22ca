# Overview: Flask API routes for personnel and timesheets; parses input and returns JSON responses.

"""
Personnel & Timesheet Routes

Timesheet total_hours is computed from start_time/end_time ("HH:MM")
unless the payload sets it. Shifts ending before they start wrap past
midnight.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Personnel, Timesheet
from ..services import personnel_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_non_negative,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth

PERSONNEL_POLICY = ModelValidationPolicy(
    writable_fields={"name", "position", "start_date", "phone", "email", "salary", "is_active"},
    required_on_create={"name", "position", "start_date"},
)

TIMESHEET_POLICY = ModelValidationPolicy(
    writable_fields={"personnel_id", "date", "start_time", "end_time", "total_hours", "notes"},
    required_on_create={"personnel_id", "date", "start_time", "end_time"},
)

personnel_bp = Blueprint("personnel", __name__, url_prefix="/api/personnel")
timesheets_bp = Blueprint("timesheets", __name__, url_prefix="/api/timesheets")


# =============================================================================
# PERSONNEL
# =============================================================================

@personnel_bp.get("")
@require_auth
def list_personnel_route():
    """Query params: active_only=true to hide people who left."""
    active_only = request.args.get("active_only", "false").lower() == "true"
    people = personnel_service.list_personnel(g.current_user.id, active_only=active_only)
    return jsonify([p.to_dict() for p in people])


@personnel_bp.post("")
@require_auth
def create_personnel_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Personnel, payload=payload, policy=PERSONNEL_POLICY, partial=False)
        require_non_negative(patch, "salary")
        person = personnel_service.create_personnel(g.current_user.id, patch)
        return jsonify(person.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create personnel")
        return jsonify({"error": "Internal server error"}), 500


@personnel_bp.get("/<personnel_id>")
@require_auth
def get_personnel_route(personnel_id: str):
    try:
        person = personnel_service.get_personnel(g.current_user.id, personnel_id)
        return jsonify(person.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@personnel_bp.put("/<personnel_id>")
@require_auth
def update_personnel_route(personnel_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Personnel, payload=payload, policy=PERSONNEL_POLICY, partial=True)
        require_non_negative(patch, "salary")
        person = personnel_service.update_personnel(g.current_user.id, personnel_id, patch)
        return jsonify(person.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update personnel")
        return jsonify({"error": "Internal server error"}), 500


@personnel_bp.delete("/<personnel_id>")
@require_auth
def delete_personnel_route(personnel_id: str):
    try:
        personnel_service.delete_personnel(g.current_user.id, personnel_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete personnel")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# TIMESHEETS
# =============================================================================

@timesheets_bp.get("")
@require_auth
def list_timesheets_route():
    sheets = personnel_service.list_timesheets(g.current_user.id)
    return jsonify([s.to_dict() for s in sheets])


@timesheets_bp.get("/personnel/<personnel_id>")
@require_auth
def list_personnel_timesheets_route(personnel_id: str):
    try:
        personnel_service.get_personnel(g.current_user.id, personnel_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    sheets = personnel_service.list_timesheets(g.current_user.id, personnel_id=personnel_id)
    return jsonify([s.to_dict() for s in sheets])


@timesheets_bp.post("")
@require_auth
def create_timesheet_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Timesheet, payload=payload, policy=TIMESHEET_POLICY, partial=False)
        require_non_negative(patch, "total_hours")
        sheet = personnel_service.create_timesheet(g.current_user.id, patch)
        return jsonify(sheet.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create timesheet")
        return jsonify({"error": "Internal server error"}), 500


@timesheets_bp.put("/<timesheet_id>")
@require_auth
def update_timesheet_route(timesheet_id: str):
    payload = request.get_json(silent=True) or {}
    payload.pop("personnel_id", None)

    try:
        patch = validate_payload(model=Timesheet, payload=payload, policy=TIMESHEET_POLICY, partial=True)
        require_non_negative(patch, "total_hours")
        sheet = personnel_service.update_timesheet(g.current_user.id, timesheet_id, patch)
        return jsonify(sheet.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update timesheet")
        return jsonify({"error": "Internal server error"}), 500


@timesheets_bp.delete("/<timesheet_id>")
@require_auth
def delete_timesheet_route(timesheet_id: str):
    try:
        personnel_service.delete_timesheet(g.current_user.id, timesheet_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete timesheet")
        return jsonify({"error": "Internal server error"}), 500
