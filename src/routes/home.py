import logging

from flask import Blueprint, g, jsonify, redirect, render_template, url_for
from sqlalchemy import text

from extensions import db
from src.routes.helpers import clinic_required


home_bp = Blueprint("home", __name__)
logger = logging.getLogger("routes.home")


@home_bp.route("/", methods=["GET"])
def root():
    return redirect(url_for("home.dashboard"))


@home_bp.route("/home/dashboard", methods=["GET"])
@clinic_required
def dashboard():
    """
    Clinic overview: stat cards, today's schedule and recent activity.
    """
    # Local import to avoid circular dependency during app startup.
    from src.services.clinic_service import local_now
    from src.services.dashboard_service import get_home_snapshot

    context = get_home_snapshot(g.clinic.id, local_now())
    return render_template("home/dashboard.html", **context)


@home_bp.route("/home/reports", methods=["GET"])
@clinic_required
def reports():
    from src.services.dashboard_service import get_clinic_report

    return render_template("home/reports.html", report=get_clinic_report(g.clinic.id))


@home_bp.route("/health", methods=["GET"])
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.exception(f"[health] Database check failed: {e}")
        database = "unavailable"
    status = 200 if database == "ok" else 503
    return jsonify(status="ok" if status == 200 else "degraded", database=database), status
