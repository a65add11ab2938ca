# backend/homestock/routes/system.py
"""
System health endpoint.

Checks database connectivity and that the rule presets are seeded.
"""

import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Household, HierarchyRule
from ..services.hierarchy_service import default_engine
from homestock.time_utils import utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")


def check_database_health() -> dict:
    start_time = time.time()
    try:
        household_count = db.session.query(Household).count()
        rule_count = db.session.query(HierarchyRule).count()

        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "households": household_count,
                "hierarchy_rules": rule_count,
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


def check_presets_health() -> dict:
    """Degraded (not unhealthy) when a preset has never been seeded under its own name."""
    try:
        seeded = {
            name for (name,) in db.session.query(HierarchyRule.rule_set_name).distinct()
        }
        missing = sorted(set(default_engine.presets) - seeded)
        if missing:
            return {"status": "degraded", "warning": f"Presets not seeded: {', '.join(missing)}"}
        return {"status": "healthy"}
    except Exception:
        current_app.logger.exception("Preset health check failed")
        return {"status": "unhealthy", "error": "Preset check error"}


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: healthy or degraded
    - 503: database unreachable
    """
    start_time = time.time()

    database_health = check_database_health()
    presets_health = check_presets_health()

    all_checks = [database_health, presets_health]
    if any(check["status"] == "unhealthy" for check in all_checks):
        overall_status, http_status = "unhealthy", 503
    elif any(check["status"] == "degraded" for check in all_checks):
        overall_status, http_status = "degraded", 200
    else:
        overall_status, http_status = "healthy", 200

    response = {
        "status": overall_status,
        "timestamp": utcnow().isoformat() + "Z",
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "database": database_health,
            "presets": presets_health,
        }
    }
    return response, http_status
