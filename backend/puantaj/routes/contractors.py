# Overview: Flask API routes for contractors; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Contractor
from ..models.contractors import CONTRACTOR_STATUSES
from ..services import contractor_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_non_negative,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth

CONTRACTOR_POLICY = ModelValidationPolicy(
    writable_fields={"name", "company", "phone", "email", "status", "total_amount"},
    required_on_create={"name"},
    choices={"status": CONTRACTOR_STATUSES},
)

contractors_bp = Blueprint("contractors", __name__, url_prefix="/api/contractors")


@contractors_bp.get("")
@require_auth
def list_contractors_route():
    contractors = contractor_service.list_contractors(g.current_user.id, status=request.args.get("status"))
    return jsonify([c.to_dict() for c in contractors])


@contractors_bp.post("")
@require_auth
def create_contractor_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Contractor, payload=payload, policy=CONTRACTOR_POLICY, partial=False)
        require_non_negative(patch, "total_amount")
        contractor = contractor_service.create_contractor(g.current_user.id, patch)
        return jsonify(contractor.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create contractor")
        return jsonify({"error": "Internal server error"}), 500


@contractors_bp.get("/<contractor_id>")
@require_auth
def get_contractor_route(contractor_id: str):
    try:
        contractor = contractor_service.get_contractor(g.current_user.id, contractor_id)
        return jsonify(contractor.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@contractors_bp.put("/<contractor_id>")
@require_auth
def update_contractor_route(contractor_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Contractor, payload=payload, policy=CONTRACTOR_POLICY, partial=True)
        require_non_negative(patch, "total_amount")
        contractor = contractor_service.update_contractor(g.current_user.id, contractor_id, patch)
        return jsonify(contractor.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update contractor")
        return jsonify({"error": "Internal server error"}), 500


@contractors_bp.delete("/<contractor_id>")
@require_auth
def delete_contractor_route(contractor_id: str):
    try:
        contractor_service.delete_contractor(g.current_user.id, contractor_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete contractor")
        return jsonify({"error": "Internal server error"}), 500
