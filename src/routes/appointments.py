import logging

from flask import Blueprint, flash, g, redirect, render_template, request, url_for
from pydantic import ValidationError

from src.models import APPOINTMENT_STATUSES, APPOINTMENT_TYPES
from src.routes.forms import AppointmentForm, describe_errors, form_data
from src.routes.helpers import clinic_required, parse_date
from src.ui.calendar_view import (
    CALENDAR_VIEWS,
    MONTH,
    build_month_grid,
    build_time_grid,
    header_label,
    navigate_date,
    parse_view,
    subtitle,
    visible_range,
)


appointments_bp = Blueprint("appointments", __name__, url_prefix="/appointments")
logger = logging.getLogger("routes.appointments")


@appointments_bp.route("/dashboard", methods=["GET"])
@clinic_required
def dashboard():
    """
    Calendar with month / week / day views driven by ?view=&date=.
    """
    from src.services.appointment_service import list_calendar_events
    from src.services.clinic_service import list_doctors, local_now
    from src.services.patient_service import list_patient_rows

    view = parse_view(request.args.get("view"))
    today = local_now().date()
    current = parse_date(request.args.get("date")) or today

    first, last = visible_range(view, current)
    events = list_calendar_events(g.clinic.id, first, last)

    if view == MONTH:
        grid = build_month_grid(events, current, today)
    else:
        grid = build_time_grid(events, view, current, today)

    return render_template(
        "appointments/dashboard.html",
        view=view,
        views=CALENDAR_VIEWS,
        current_date=current,
        today=today,
        header_label=header_label(view, current),
        subtitle=subtitle(view, current),
        previous_date=navigate_date(view, current, -1),
        next_date=navigate_date(view, current, 1),
        grid=grid,
        patients=list_patient_rows(g.clinic.id),
        doctors=list_doctors(g.clinic.id),
        appointment_types=APPOINTMENT_TYPES,
        appointment_statuses=APPOINTMENT_STATUSES,
    )


@appointments_bp.route("/save", methods=["POST"])
@clinic_required
def save_appointment():
    """
    Create or update an appointment from the dashboard form.
    """
    from src.services.appointment_service import upsert_appointment  # local import to avoid cycles

    appt_id_raw = request.form.get("appointment_id") or None
    appointment_id = int(appt_id_raw) if appt_id_raw and appt_id_raw.isdigit() else None

    data = form_data(request.form)
    data.pop("appointment_id", None)
    try:
        form = AppointmentForm(**data)
    except ValidationError as e:
        logger.warning(f"[save_appointment] validation_failed error={e}")
        flash(describe_errors(e), "error")
        return redirect(request.referrer or url_for("appointments.dashboard"))

    appt = upsert_appointment(g.clinic.id, appointment_id=appointment_id, **form.to_fields())
    if appt is None:
        flash("Could not save appointment.", "error")
    else:
        flash("Appointment saved.", "success")

    return redirect(url_for("appointments.dashboard", view="day", date=form.day.isoformat()))


@appointments_bp.route("/<int:appointment_id>/delete", methods=["POST"])
@clinic_required
def delete_appointment_route(appointment_id: int):
    """
    Delete an appointment from the dashboard.
    """
    from src.services.appointment_service import delete_appointment  # local import to avoid cycles

    if delete_appointment(g.clinic.id, appointment_id):
        flash("Appointment removed.", "success")
    else:
        flash("Appointment not found.", "error")
    return redirect(request.referrer or url_for("appointments.dashboard"))


@appointments_bp.route("/reports", methods=["GET"])
@clinic_required
def reports():
    from src.services.dashboard_service import get_appointment_report

    return render_template("appointments/reports.html", report=get_appointment_report(g.clinic.id))
