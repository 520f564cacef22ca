# Overview: Flask API routes for projects; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Project
from ..models.projects import PROJECT_STATUSES, PROJECT_TYPES
from ..services import project_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_non_negative,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_auth

PROJECT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "type", "amount", "status", "description", "client_name", "start_date", "end_date"},
    required_on_create={"name", "type", "amount", "start_date"},
    choices={"type": PROJECT_TYPES, "status": PROJECT_STATUSES},
)

projects_bp = Blueprint("projects", __name__, url_prefix="/api/projects")


@projects_bp.get("")
@require_auth
def list_projects_route():
    """
    Query params:
    - type: given | received (optional)
    - status: active | passive | completed (optional)
    """
    projects = project_service.list_projects(
        g.current_user.id,
        type=request.args.get("type"),
        status=request.args.get("status"),
    )
    return jsonify([p.to_dict() for p in projects])


@projects_bp.post("")
@require_auth
def create_project_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Project, payload=payload, policy=PROJECT_POLICY, partial=False)
        require_non_negative(patch, "amount")
        project = project_service.create_project(g.current_user.id, patch)
        return jsonify(project.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create project")
        return jsonify({"error": "Internal server error"}), 500


@projects_bp.get("/<project_id>")
@require_auth
def get_project_route(project_id: str):
    try:
        project = project_service.get_project(g.current_user.id, project_id)
        return jsonify(project.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@projects_bp.put("/<project_id>")
@require_auth
def update_project_route(project_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Project, payload=payload, policy=PROJECT_POLICY, partial=True)
        require_non_negative(patch, "amount")
        project = project_service.update_project(g.current_user.id, project_id, patch)
        return jsonify(project.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update project")
        return jsonify({"error": "Internal server error"}), 500


@projects_bp.delete("/<project_id>")
@require_auth
def delete_project_route(project_id: str):
    try:
        project_service.delete_project(g.current_user.id, project_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete project")
        return jsonify({"error": "Internal server error"}), 500
