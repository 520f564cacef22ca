# Overview: Flask API routes for the income/expense ledger; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..models import Transaction
from ..models.ledger import TRANSACTION_TYPES
from ..services import ledger_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_positive,
    ValidationError,
    NotFoundError,
)
from puantaj.time_utils import parse_iso_datetime
from ..decorators import require_auth

TRANSACTION_POLICY = ModelValidationPolicy(
    writable_fields={"type", "amount", "description", "category", "date"},
    required_on_create={"type", "amount", "description", "date"},
    choices={"type": TRANSACTION_TYPES},
)

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api/transactions")


@ledger_bp.get("")
@require_auth
def list_transactions_route():
    """
    Query params:
    - type: income | expense (optional)
    - start, end: ISO-8601 dates, inclusive (optional)
    """
    try:
        start = parse_iso_datetime(request.args.get("start"))
        end = parse_iso_datetime(request.args.get("end"))
    except ValueError:
        return jsonify({"error": "start/end must be ISO-8601 datetimes"}), 400

    transactions = ledger_service.list_transactions(
        g.current_user.id,
        type=request.args.get("type"),
        start=start,
        end=end,
    )
    return jsonify([t.to_dict() for t in transactions])


@ledger_bp.post("")
@require_auth
def create_transaction_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_POLICY, partial=False)
        require_positive(patch, "amount")
        tx = ledger_service.create_transaction(g.current_user.id, patch)
        return jsonify(tx.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create transaction")
        return jsonify({"error": "Internal server error"}), 500


@ledger_bp.put("/<transaction_id>")
@require_auth
def update_transaction_route(transaction_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Transaction, payload=payload, policy=TRANSACTION_POLICY, partial=True)
        require_positive(patch, "amount")
        tx = ledger_service.update_transaction(g.current_user.id, transaction_id, patch)
        return jsonify(tx.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update transaction")
        return jsonify({"error": "Internal server error"}), 500


@ledger_bp.delete("/<transaction_id>")
@require_auth
def delete_transaction_route(transaction_id: str):
    try:
        ledger_service.delete_transaction(g.current_user.id, transaction_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete transaction")
        return jsonify({"error": "Internal server error"}), 500
