# Overview: Unauthenticated health check endpoint.

import time

from flask import Blueprint, current_app
from sqlalchemy import text

from ..extensions import db


system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "latency_ms": round((time.time() - start_time) * 1000, 2)}
    except Exception:
        current_app.logger.exception("Database health check failed")
        db.session.rollback()
        return {
            "status": "unhealthy",
            "latency_ms": round((time.time() - start_time) * 1000, 2),
            "error": "Database error",
        }


@system_bp.get("/v1/healthcheck")
def healthcheck():
    """
    Report availability, environment and version.

    503 when the database cannot be reached.
    """
    from .. import __version__

    database = check_database_health()
    available = database["status"] == "healthy"

    response = {
        "status": "available" if available else "unavailable",
        "system_info": {
            "environment": current_app.config["ENV"],
            "version": __version__,
        },
        "checks": {"database": database},
    }
    return response, 200 if available else 503
