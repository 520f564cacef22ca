# Overview: Flask API routes for customer, contractor and personnel payments; parses input and returns JSON responses.

"""
Payment Routes

Recording a payment also writes its mirrored ledger entry; deleting it
removes that entry. Deletion succeeds even when the entry is already gone.

SECURITY: All routes require authentication.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..models import ContractorPayment, CustomerPayment, PersonnelPayment
from ..models.personnel import PERSONNEL_PAYMENT_TYPES
from ..services import payment_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    require_positive,
    ValidationError,
    NotFoundError,
)
from ..decorators import require_auth


CUSTOMER_PAYMENT_POLICY = ModelValidationPolicy(
    writable_fields={"customer_id", "amount", "description", "payment_date", "payment_method"},
    required_on_create={"customer_id", "amount", "description", "payment_date"},
)

CONTRACTOR_PAYMENT_POLICY = ModelValidationPolicy(
    writable_fields={"contractor_id", "amount", "description", "payment_date", "payment_method"},
    required_on_create={"contractor_id", "amount", "description", "payment_date"},
)

PERSONNEL_PAYMENT_POLICY = ModelValidationPolicy(
    writable_fields={"personnel_id", "amount", "description", "payment_date", "payment_type"},
    required_on_create={"personnel_id", "amount", "description", "payment_date"},
    choices={"payment_type": PERSONNEL_PAYMENT_TYPES},
)

customer_payments_bp = Blueprint("customer_payments", __name__, url_prefix="/api/customer-payments")
contractor_payments_bp = Blueprint("contractor_payments", __name__, url_prefix="/api/contractor-payments")
personnel_payments_bp = Blueprint("personnel_payments", __name__, url_prefix="/api/personnel-payments")


# =============================================================================
# CUSTOMER PAYMENTS
# =============================================================================

@customer_payments_bp.get("")
@require_auth
def list_customer_payments_route():
    payments = payment_service.list_customer_payments(
        g.current_user.id, customer_id=request.args.get("customer_id")
    )
    return jsonify([p.to_dict() for p in payments])


@customer_payments_bp.post("")
@require_auth
def create_customer_payment_route():
    """
    Record a customer payment.

    Request body:
    {
        "customer_id": "...",          // required
        "amount": "500.00",            // required, > 0
        "description": "...",          // required
        "payment_date": "2024-05-01",  // required
        "payment_method": "cash"       // optional
    }

    Also writes the income entry "{customer} - Müşteri Ödemesi: {description}".
    """
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=CustomerPayment, payload=payload, policy=CUSTOMER_PAYMENT_POLICY, partial=False
        )
        require_positive(patch, "amount")
        payment = payment_service.record_customer_payment(g.current_user.id, patch)
        return jsonify(payment.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to record customer payment")
        return jsonify({"error": "Internal server error"}), 500


@customer_payments_bp.delete("/<payment_id>")
@require_auth
def delete_customer_payment_route(payment_id: str):
    try:
        payment_service.delete_customer_payment(g.current_user.id, payment_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete customer payment")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# CONTRACTOR PAYMENTS
# =============================================================================

@contractor_payments_bp.get("")
@require_auth
def list_contractor_payments_route():
    payments = payment_service.list_contractor_payments(
        g.current_user.id, contractor_id=request.args.get("contractor_id")
    )
    return jsonify([p.to_dict() for p in payments])


@contractor_payments_bp.post("")
@require_auth
def create_contractor_payment_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=ContractorPayment, payload=payload, policy=CONTRACTOR_PAYMENT_POLICY, partial=False
        )
        require_positive(patch, "amount")
        payment = payment_service.record_contractor_payment(g.current_user.id, patch)
        return jsonify(payment.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to record contractor payment")
        return jsonify({"error": "Internal server error"}), 500


@contractor_payments_bp.delete("/<payment_id>")
@require_auth
def delete_contractor_payment_route(payment_id: str):
    try:
        payment_service.delete_contractor_payment(g.current_user.id, payment_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete contractor payment")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# PERSONNEL PAYMENTS
# =============================================================================

@personnel_payments_bp.get("")
@require_auth
def list_personnel_payments_route():
    payments = payment_service.list_personnel_payments(
        g.current_user.id, personnel_id=request.args.get("personnel_id")
    )
    return jsonify([p.to_dict() for p in payments])


@personnel_payments_bp.post("")
@require_auth
def create_personnel_payment_route():
    """payment_type: salary (default) | advance | bonus"""
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(
            model=PersonnelPayment, payload=payload, policy=PERSONNEL_PAYMENT_POLICY, partial=False
        )
        require_positive(patch, "amount")
        payment = payment_service.record_personnel_payment(g.current_user.id, patch)
        return jsonify(payment.to_dict()), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to record personnel payment")
        return jsonify({"error": "Internal server error"}), 500


@personnel_payments_bp.delete("/<payment_id>")
@require_auth
def delete_personnel_payment_route(payment_id: str):
    try:
        payment_service.delete_personnel_payment(g.current_user.id, payment_id)
        return "", 204
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete personnel payment")
        return jsonify({"error": "Internal server error"}), 500
