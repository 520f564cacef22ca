# Overview: Flask API routes for notes.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Note
from ..services import note_service
from ..validation import ModelValidationPolicy, validate_payload, ValidationError, NotFoundError
from ..decorators import require_auth

NOTE_POLICY = ModelValidationPolicy(
    writable_fields={"content"},
    required_on_create={"content"},
)

notes_bp = Blueprint("notes", __name__, url_prefix="/api/notes")


@notes_bp.get("")
@require_auth
def list_notes_route():
    notes = note_service.list_notes(g.current_user.id)
    return jsonify([n.to_dict() for n in notes])


@notes_bp.post("")
@require_auth
def create_note_route():
    """
    Request body:
    {
        "content": "Pazartesi malzeme siparişi"
    }
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Note, payload=payload, policy=NOTE_POLICY, partial=False)
        note = note_service.create_note(g.current_user.id, patch)
        return jsonify(note.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create note")
        return jsonify({"error": "Internal server error"}), 500


@notes_bp.delete("/<note_id>")
@require_auth
def delete_note_route(note_id: str):
    try:
        note_service.delete_note(g.current_user.id, note_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete note")
        return jsonify({"error": "Internal server error"}), 500
