# backend/puantaj/routes/system.py
"""
System health endpoint.

Reports database reachability and the session sweeper state for
deployment debugging.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import User, SessionToken
from puantaj.time_utils import utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        session_count = db.session.query(SessionToken).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "sessions": session_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    database_health = check_database_health()
    sweeper = current_app.extensions.get("session_sweeper")

    http_status = 200 if database_health["status"] == "healthy" else 503

    return {
        "status": database_health["status"],
        "timestamp": utcnow().isoformat() + "Z",
        "checks": {
            "database": database_health,
            "session_sweeper": {
                "enabled": bool(sweeper and sweeper.enabled),
                "running": bool(sweeper and sweeper.running),
            },
        }
    }, http_status
