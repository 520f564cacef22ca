# Overview: Flask API route for the dashboard financial summary.

from flask import Blueprint, jsonify, g, current_app

from ..services import summary_service
from ..decorators import require_auth

summary_bp = Blueprint("summary", __name__, url_prefix="/api/financial-summary")


@summary_bp.get("")
@require_auth
def financial_summary_route():
    """
    Totals across the caller's ledger, customers, contractors, personnel
    and projects. Money values are fixed-precision strings.
    """
    try:
        return jsonify(summary_service.get_financial_summary(g.current_user.id))
    except Exception:
        current_app.logger.exception("Failed to build financial summary")
        return jsonify({"error": "Internal server error"}), 500
