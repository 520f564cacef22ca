# Overview: Flask API routes for customer quotes and quote items; parses input and returns JSON responses.

# backend/puantaj/routes/quotes.py
"""
Customer quote routes.

APPROVAL: PUT /api/customer-quotes/<id> with BOTH
{"status": "approved", "is_approved": true} derives one pending task
for the customer. The response is the updated quote; task derivation
never turns a successful update into an error.

TOTALS: Item create/update/delete recompute the parent quote's totals
before responding.

SECURITY: All routes require authentication.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..models import CustomerQuote, CustomerQuoteItem
from ..models.customers import QUOTE_STATUSES
from ..services import quote_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_non_negative,
    require_positive,
    enforce_rules_vat_rate,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_auth

QUOTE_POLICY = ModelValidationPolicy(
    writable_fields={
        "customer_id", "title", "description", "total_amount", "has_vat", "vat_rate",
        "status", "is_approved", "quote_date", "valid_until",
    },
    required_on_create={"customer_id", "title"},
    choices={"status": QUOTE_STATUSES},
)

QUOTE_ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "quote_id", "title", "description", "quantity", "unit", "unit_price", "total_price",
        "status", "is_approved",
    },
    required_on_create={"quote_id", "title"},
    choices={"status": QUOTE_STATUSES},
)

quotes_bp = Blueprint("customer_quotes", __name__, url_prefix="/api/customer-quotes")
quote_items_bp = Blueprint("customer_quote_items", __name__, url_prefix="/api/customer-quote-items")


def _validate_quote_patch(payload: dict, partial: bool) -> dict:
    patch = validate_payload(model=CustomerQuote, payload=payload, policy=QUOTE_POLICY, partial=partial)
    require_non_negative(patch, "total_amount")
    enforce_rules_vat_rate(patch)
    return patch


def _validate_item_patch(payload: dict, partial: bool) -> dict:
    patch = validate_payload(model=CustomerQuoteItem, payload=payload, policy=QUOTE_ITEM_POLICY, partial=partial)
    require_positive(patch, "quantity")
    require_non_negative(patch, "unit_price", "total_price")
    return patch


# =============================================================================
# QUOTES
# =============================================================================

@quotes_bp.get("")
@require_auth
def list_quotes_route():
    """
    Query params:
    - customer_id (optional)
    - status: pending | approved | rejected (optional)
    """
    quotes = quote_service.list_quotes(
        g.current_user.id,
        customer_id=request.args.get("customer_id"),
        status=request.args.get("status"),
    )
    return jsonify([q.to_dict() for q in quotes])


@quotes_bp.post("")
@require_auth
def create_quote_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = _validate_quote_patch(payload, partial=False)
        quote = quote_service.create_quote(g.current_user.id, patch)
        return jsonify(quote.to_dict(include_items=True)), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create customer quote")
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.get("/<quote_id>")
@require_auth
def get_quote_route(quote_id: str):
    try:
        quote = quote_service.get_quote(g.current_user.id, quote_id)
        return jsonify(quote.to_dict(include_items=True))
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to fetch customer quote")
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.put("/<quote_id>")
@require_auth
def update_quote_route(quote_id: str):
    """
    Update a quote; runs the approval pipeline.

    Request body (all fields optional):
    {
        "title": "...",
        "total_amount": "1500.00",
        "has_vat": true,
        "vat_rate": "20",
        "status": "approved",
        "is_approved": true
    }
    """
    payload = request.get_json(silent=True) or {}
    payload.pop("customer_id", None)

    try:
        patch = _validate_quote_patch(payload, partial=True)
        quote = quote_service.update_quote(g.current_user.id, quote_id, patch)
        return jsonify(quote.to_dict(include_items=True))
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update customer quote")
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.delete("/<quote_id>")
@require_auth
def delete_quote_route(quote_id: str):
    try:
        quote_service.delete_quote(g.current_user.id, quote_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete customer quote")
        return jsonify({"error": "Internal server error"}), 500


@quotes_bp.get("/<quote_id>/items")
@require_auth
def list_quote_items_route(quote_id: str):
    try:
        items = quote_service.list_items(g.current_user.id, quote_id)
        return jsonify([i.to_dict() for i in items])
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to list quote items")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# QUOTE ITEMS
# =============================================================================

@quote_items_bp.post("")
@require_auth
def create_quote_item_route():
    """
    Add a line item.

    total_price defaults to quantity * unit_price when omitted.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = _validate_item_patch(payload, partial=False)
        item = quote_service.create_item(g.current_user.id, patch)
        return jsonify(item.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create quote item")
        return jsonify({"error": "Internal server error"}), 500


@quote_items_bp.put("/<item_id>")
@require_auth
def update_quote_item_route(item_id: str):
    payload = request.get_json(silent=True) or {}
    payload.pop("quote_id", None)

    try:
        patch = _validate_item_patch(payload, partial=True)
        item = quote_service.update_item(g.current_user.id, item_id, patch)
        return jsonify(item.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update quote item")
        return jsonify({"error": "Internal server error"}), 500


@quote_items_bp.delete("/<item_id>")
@require_auth
def delete_quote_item_route(item_id: str):
    try:
        quote_service.delete_item(g.current_user.id, item_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete quote item")
        return jsonify({"error": "Internal server error"}), 500
