import logging

from flask import Blueprint, abort, current_app, flash, g, redirect, render_template, request, url_for
from pydantic import ValidationError

from src.models import PATIENT_STATUSES
from src.routes.forms import PatientForm, describe_errors, form_data
from src.routes.helpers import clinic_required, filter_removal_urls
from src.ui.badges import status_style
from src.ui.cards import LogEvent
from src.ui.pagination import paginate, parse_page
from src.ui.tables import (
    ColumnDef,
    FilterColumn,
    FilterOption,
    apply_filters,
    build_table,
    parse_filters,
    parse_sort,
    search_rows,
    sort_rows,
)


patients_bp = Blueprint("patients", __name__, url_prefix="/patients")
logger = logging.getLogger("routes.patients")

# ─── Column definitions ───────────────────────────────────────────────────────

PATIENT_COLUMNS = [
    ColumnDef("name", "Patient", cell="patient_cell"),
    ColumnDef("chart_id", "Chart ID", cell="chart_cell"),
    ColumnDef("last_visit", "Last Visit", accessor="last_visit_human"),
    ColumnDef("assigned_doctor", "Assigned Dr."),
    ColumnDef("status", "Status", cell="status_cell"),
]

SEARCH_FIELDS = ("name", "chart_id", "phone")


def patient_filter_columns(doctors):
    """Filter schema for the patients table; the filter bar itself is generic."""
    return [
        FilterColumn(
            key="status",
            label="Status",
            type="select",
            options=[FilterOption(status_style(s).label, s) for s in PATIENT_STATUSES],
        ),
        FilterColumn(
            key="assigned_doctor",
            label="Assigned Doctor",
            type="select",
            options=[FilterOption(name, name) for _, name in doctors],
        ),
        FilterColumn(key="name", label="Name", type="text"),
    ]


def filter_patient_rows(rows, search, filters, filter_columns):
    """Search across name/chart id/phone, then AND the active filters."""
    return apply_filters(search_rows(rows, search, SEARCH_FIELDS), filters, filter_columns)


def history_events(appointments, now):
    return [
        LogEvent(
            title=f"{a['title']} · {status_style(a['status']).label}",
            body=" — ".join(part for part in (a["doctor"], a["notes"]) if part) or None,
            time=a["date"].strftime("%b %d, %Y %H:%M"),
            unread=a["date"] >= now,
        )
        for a in appointments
    ]


@patients_bp.route("/dashboard", methods=["GET"])
@clinic_required
def dashboard():
    """
    Patients directory: search + filter bar, sortable table and pagination.
    """
    from src.services.clinic_service import list_doctors
    from src.services.patient_service import list_patient_rows

    doctors = list_doctors(g.clinic.id)
    filter_columns = patient_filter_columns(doctors)

    search = request.args.get("q", "").strip()
    filters = parse_filters(request.args, filter_columns)
    sort_key, sort_dir = parse_sort(request.args, PATIENT_COLUMNS)

    rows = filter_patient_rows(list_patient_rows(g.clinic.id), search, filters, filter_columns)
    rows = sort_rows(rows, sort_key, sort_dir)
    page = paginate(
        rows,
        parse_page(request.args.get("page")),
        current_app.config["PAGE_SIZE"],
        current_app.config["MAX_PAGE_CHIPS"],
    )

    return render_template(
        "patients/dashboard.html",
        table=build_table(PATIENT_COLUMNS, page.items, sort_key, sort_dir),
        page=page,
        search=search,
        filter_columns=filter_columns,
        filters=filters,
        filter_removal_urls=filter_removal_urls(filters),
        doctors=doctors,
    )


@patients_bp.route("/<int:patient_id>", methods=["GET"])
@clinic_required
def detail(patient_id: int):
    from src.services.clinic_service import list_doctors, local_now
    from src.services.patient_service import get_patient_detail

    record = get_patient_detail(g.clinic.id, patient_id)
    if record is None:
        abort(404)

    return render_template(
        "patients/detail.html",
        history=history_events(record["appointments"], local_now()),
        doctors=list_doctors(g.clinic.id),
        **record,
    )


@patients_bp.route("/save", methods=["POST"])
@clinic_required
def save_patient():
    """
    Create or update a patient from the dashboard form.
    """
    from src.services.patient_service import upsert_patient  # local import to avoid cycles

    patient_id_raw = request.form.get("patient_id") or None
    patient_id = int(patient_id_raw) if patient_id_raw and patient_id_raw.isdigit() else None

    data = form_data(request.form)
    data.pop("patient_id", None)
    try:
        form = PatientForm(**data)
    except ValidationError as e:
        logger.warning(f"[save_patient] validation_failed error={e}")
        flash(describe_errors(e), "error")
        return redirect(request.referrer or url_for("patients.dashboard"))

    patient = upsert_patient(g.clinic.id, patient_id=patient_id, **form.model_dump())
    if patient is None:
        flash("Could not save patient. The chart ID may already be in use.", "error")
        return redirect(request.referrer or url_for("patients.dashboard"))

    flash(f"Saved {patient.full_name}.", "success")
    return redirect(url_for("patients.detail", patient_id=patient.id))


@patients_bp.route("/<int:patient_id>/delete", methods=["POST"])
@clinic_required
def delete_patient_route(patient_id: int):
    """
    Delete a patient from the dashboard.
    """
    from src.services.patient_service import delete_patient  # local import to avoid cycles

    if delete_patient(g.clinic.id, patient_id):
        flash("Patient removed.", "success")
    else:
        flash("Patient not found.", "error")
    return redirect(url_for("patients.dashboard"))


@patients_bp.route("/reports", methods=["GET"])
@clinic_required
def reports():
    from src.services.clinic_service import local_now
    from src.services.dashboard_service import get_patient_report

    return render_template("patients/reports.html", report=get_patient_report(g.clinic.id, local_now()))
