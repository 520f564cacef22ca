# Overview: Flask API routes for customers and customer tasks; parses input and returns JSON responses.

# backend/puantaj/routes/customers.py
"""
Customer and customer task routes.

OWNERSHIP: Every customer belongs to the caller (g.current_user). Rows of
other users are reported as 404.

SECURITY: All routes require authentication.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..models import Customer, CustomerTask
from ..models.customers import CUSTOMER_STATUSES, TASK_STATUSES
from ..services import customer_service, quote_service, payment_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_non_negative,
    require_positive,
    enforce_rules_vat_rate,
    ValidationError,
    ConflictError,
    NotFoundError,
)
from ..decorators import require_auth

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"name", "company", "phone", "email", "address", "tax_number", "status"},
    required_on_create={"name"},
    choices={"status": CUSTOMER_STATUSES},
)

TASK_POLICY = ModelValidationPolicy(
    writable_fields={
        "customer_id", "title", "description", "quantity", "unit", "unit_price", "amount",
        "has_vat", "vat_rate", "status", "due_date",
    },
    required_on_create={"customer_id", "title"},
    choices={"status": TASK_STATUSES},
)

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")
customer_tasks_bp = Blueprint("customer_tasks", __name__, url_prefix="/api/customer-tasks")


def _validate_task_patch(payload: dict, partial: bool) -> dict:
    patch = validate_payload(model=CustomerTask, payload=payload, policy=TASK_POLICY, partial=partial)
    require_positive(patch, "quantity")
    require_non_negative(patch, "unit_price", "amount")
    enforce_rules_vat_rate(patch)
    return patch


# =============================================================================
# CUSTOMERS
# =============================================================================

@customers_bp.get("")
@require_auth
def list_customers_route():
    """
    Query params:
    - status: active | inactive (optional)
    """
    customers = customer_service.list_customers(g.current_user.id, status=request.args.get("status"))
    return jsonify([c.to_dict() for c in customers])


@customers_bp.post("")
@require_auth
def create_customer_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=False)
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    try:
        customer = customer_service.create_customer(g.current_user.id, patch)
        return jsonify(customer.to_dict()), 201
    except Exception:
        current_app.logger.exception("Failed to create customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<customer_id>")
@require_auth
def get_customer_route(customer_id: str):
    try:
        customer = customer_service.get_customer(g.current_user.id, customer_id)
        return jsonify(customer.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@customers_bp.put("/<customer_id>")
@require_auth
def update_customer_route(customer_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Customer, payload=payload, policy=CUSTOMER_POLICY, partial=True)
        customer = customer_service.update_customer(g.current_user.id, customer_id, patch)
        return jsonify(customer.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.delete("/<customer_id>")
@require_auth
def delete_customer_route(customer_id: str):
    """
    Delete a customer.

    Returns 409 while the customer still has tasks, quotes or payments.
    """
    try:
        customer_service.delete_customer(g.current_user.id, customer_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to delete customer")
        return jsonify({"error": "Internal server error"}), 500


@customers_bp.get("/<customer_id>/tasks")
@require_auth
def list_customer_tasks_route(customer_id: str):
    try:
        customer_service.get_customer(g.current_user.id, customer_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    tasks = customer_service.list_tasks(g.current_user.id, customer_id=customer_id)
    return jsonify([t.to_dict() for t in tasks])


@customers_bp.get("/<customer_id>/quotes")
@require_auth
def list_customer_quotes_route(customer_id: str):
    try:
        customer_service.get_customer(g.current_user.id, customer_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    quotes = quote_service.list_quotes(g.current_user.id, customer_id=customer_id)
    return jsonify([q.to_dict() for q in quotes])


@customers_bp.get("/<customer_id>/payments")
@require_auth
def list_customer_payments_route(customer_id: str):
    try:
        customer_service.get_customer(g.current_user.id, customer_id)
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    payments = payment_service.list_customer_payments(g.current_user.id, customer_id=customer_id)
    return jsonify([p.to_dict() for p in payments])


# =============================================================================
# CUSTOMER TASKS
# =============================================================================

@customer_tasks_bp.get("")
@require_auth
def list_tasks_route():
    """
    Query params:
    - customer_id (optional)
    - status: pending | in_progress | completed (optional)
    """
    tasks = customer_service.list_tasks(
        g.current_user.id,
        customer_id=request.args.get("customer_id"),
        status=request.args.get("status"),
    )
    return jsonify([t.to_dict() for t in tasks])


@customer_tasks_bp.post("")
@require_auth
def create_task_route():
    """
    Create a task.

    amount defaults to quantity * unit_price; vat_amount and total_with_vat
    are always computed server-side.
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = _validate_task_patch(payload, partial=False)
        task = customer_service.create_task(g.current_user.id, patch)
        return jsonify(task.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to create customer task")
        return jsonify({"error": "Internal server error"}), 500


@customer_tasks_bp.get("/<task_id>")
@require_auth
def get_task_route(task_id: str):
    try:
        task = customer_service.get_task(g.current_user.id, task_id)
        return jsonify(task.to_dict())
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@customer_tasks_bp.put("/<task_id>")
@require_auth
def update_task_route(task_id: str):
    payload = request.get_json(silent=True) or {}

    try:
        patch = _validate_task_patch(payload, partial=True)
        task = customer_service.update_task(g.current_user.id, task_id, patch)
        return jsonify(task.to_dict())
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to update customer task")
        return jsonify({"error": "Internal server error"}), 500


@customer_tasks_bp.delete("/<task_id>")
@require_auth
def delete_task_route(task_id: str):
    try:
        customer_service.delete_task(g.current_user.id, task_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete customer task")
        return jsonify({"error": "Internal server error"}), 500
