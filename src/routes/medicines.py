import logging

from flask import Blueprint, current_app, flash, g, redirect, render_template, request, url_for
from pydantic import ValidationError

from src.routes.forms import MedicineForm, describe_errors, form_data
from src.routes.helpers import clinic_required, filter_removal_urls
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


medicines_bp = Blueprint("medicines", __name__, url_prefix="/medicines")
logger = logging.getLogger("routes.medicines")

MEDICINE_COLUMNS = [
    ColumnDef("name", "Medicine"),
    ColumnDef("brand", "Brand"),
    ColumnDef("form", "Form"),
    ColumnDef("last_prescribed", "Last Prescribed", accessor="last_prescribed_human"),
    ColumnDef("actions", "", cell="medicine_actions_cell", sortable=False),
]

SEARCH_FIELDS = ("name", "brand")


def medicine_filter_columns(forms):
    return [
        FilterColumn(
            key="form",
            label="Form",
            type="select",
            options=[FilterOption(f, f) for f in forms],
        ),
        FilterColumn(key="brand", label="Brand", type="text"),
    ]


@medicines_bp.route("/dashboard", methods=["GET"])
@clinic_required
def dashboard():
    from src.services.medicine_service import list_medicine_forms, list_medicine_rows

    filter_columns = medicine_filter_columns(list_medicine_forms(g.clinic.id))
    search = request.args.get("q", "").strip()
    filters = parse_filters(request.args, filter_columns)
    sort_key, sort_dir = parse_sort(request.args, MEDICINE_COLUMNS)

    rows = search_rows(list_medicine_rows(g.clinic.id), search, SEARCH_FIELDS)
    rows = sort_rows(apply_filters(rows, filters, filter_columns), sort_key, sort_dir)
    page = paginate(
        rows,
        parse_page(request.args.get("page")),
        current_app.config["PAGE_SIZE"],
        current_app.config["MAX_PAGE_CHIPS"],
    )

    return render_template(
        "medicines/dashboard.html",
        table=build_table(MEDICINE_COLUMNS, page.items, sort_key, sort_dir),
        page=page,
        search=search,
        filter_columns=filter_columns,
        filters=filters,
        filter_removal_urls=filter_removal_urls(filters),
    )


@medicines_bp.route("/save", methods=["POST"])
@clinic_required
def save_medicine():
    from src.services.medicine_service import upsert_medicine  # local import to avoid cycles

    medicine_id_raw = request.form.get("medicine_id") or None
    medicine_id = int(medicine_id_raw) if medicine_id_raw and medicine_id_raw.isdigit() else None

    data = form_data(request.form)
    data.pop("medicine_id", None)
    try:
        form = MedicineForm(**data)
    except ValidationError as e:
        logger.warning(f"[save_medicine] validation_failed error={e}")
        flash(describe_errors(e), "error")
        return redirect(url_for("medicines.dashboard"))

    if upsert_medicine(g.clinic.id, medicine_id=medicine_id, **form.to_fields()) is None:
        flash("Could not save medicine.", "error")
    else:
        flash(f"Saved {form.name}.", "success")
    return redirect(url_for("medicines.dashboard"))


@medicines_bp.route("/<int:medicine_id>/delete", methods=["POST"])
@clinic_required
def delete_medicine_route(medicine_id: int):
    from src.services.medicine_service import delete_medicine  # local import to avoid cycles

    if delete_medicine(g.clinic.id, medicine_id):
        flash("Medicine removed.", "success")
    else:
        flash("Medicine not found.", "error")
    return redirect(url_for("medicines.dashboard"))


@medicines_bp.route("/reports", methods=["GET"])
@clinic_required
def reports():
    from src.services.dashboard_service import get_medicine_report

    return render_template("medicines/reports.html", report=get_medicine_report(g.clinic.id))
