from datetime import datetime
import logging

import pytz
from flask import current_app, g

from src.models import Clinic, User
from src.services.db_context import db_context


logger = logging.getLogger("clinic_service")


def clinic_timezone():
    name = current_app.config.get("CLINIC_TIMEZONE") or "UTC"
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"[clinic_timezone] Unknown timezone {name!r}, falling back to UTC")
        return pytz.UTC


def local_now() -> datetime:
    """Current wall-clock time in the clinic timezone, as a naive datetime."""
    return datetime.now(clinic_timezone()).replace(tzinfo=None)


def get_current_clinic():
    """
    Resolve the tenant for this request:
    - CLINIC_SUBDOMAIN from config when set
    - otherwise the first active clinic
    Cached on `g` for the lifetime of the request.
    """
    if "clinic" in g:
        return g.clinic

    clinic = None
    try:
        with db_context():
            subdomain = current_app.config.get("CLINIC_SUBDOMAIN")
            query = Clinic.query.filter_by(is_active=True)
            if subdomain:
                clinic = query.filter_by(subdomain=subdomain).first()
            else:
                clinic = query.order_by(Clinic.id.asc()).first()
    except Exception as e:
        logger.exception(f"[get_current_clinic] Failed to resolve clinic: {e}")

    g.clinic = clinic
    return clinic


def list_doctors(clinic_id: int):
    """Active doctors of a clinic as (id, display name) pairs, sorted by name."""
    try:
        with db_context():
            doctors = (
                User.query
                .filter_by(clinic_id=clinic_id, type="doctor", is_active=True)
                .order_by(User.name.asc())
                .all()
            )
            return [(d.id, d.display_name) for d in doctors]
    except Exception as e:
        logger.exception(f"[list_doctors] Failed for clinic_id={clinic_id}: {e}")
        return []
