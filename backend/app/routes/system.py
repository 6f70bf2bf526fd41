# backend/app/routes/system.py
"""
System health endpoint.

Reports database reachability and whether the identity provider is
configured. The service-role key itself is never included.
"""

import time
from flask import Blueprint, current_app, jsonify
from ..extensions import db
from ..models import Profile, Stall
from app.date_filters import civil_today_str
from app.time_utils import utcnow, to_utc_z

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        profile_count = db.session.query(Profile).count()
        stall_count = db.session.query(Stall).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "profiles": profile_count,
                "stalls": stall_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    return jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "civil_date": civil_today_str(),
        "civil_timezone": current_app.config["CIVIL_TIMEZONE"],
        "checks": {
            "database": database,
            "identity_provider": {"configured": bool(current_app.config.get("SUPABASE_URL"))},
        },
    }), 200 if healthy else 503
