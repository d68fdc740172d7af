from datetime import datetime, timedelta
import logging

from sqlalchemy import func

from extensions import db
from src.models import (
    Appointment,
    Medicine,
    Patient,
    User,
    APPOINTMENT_STATUSES,
    APPOINTMENT_TYPES,
    PATIENT_STATUSES,
)
from src.services.activity_service import list_recent_activity
from src.services.appointment_service import list_day_schedule
from src.services.db_context import db_context
from src.ui.calendar_view import add_months, start_of_month, type_label
from src.ui.cards import StatCard, percent_delta


logger = logging.getLogger("dashboard_service")


def _count_by(column, clinic_id: int, model, *criteria) -> dict:
    rows = (
        db.session.query(column, func.count(model.id))
        .filter(model.clinic_id == clinic_id, *criteria)
        .group_by(column)
        .all()
    )
    return {key: count for key, count in rows}


def _patients_created_between(clinic_id: int, start: datetime, stop: datetime) -> int:
    return (
        Patient.query
        .filter(Patient.clinic_id == clinic_id)
        .filter(Patient.created_at >= start, Patient.created_at < stop)
        .count()
    )


def _month_bounds(now: datetime, offset: int = 0):
    first = add_months(start_of_month(now.date()), offset)
    start = datetime.combine(first, datetime.min.time())
    stop = datetime.combine(add_months(first, 1), datetime.min.time())
    return start, stop


def get_home_snapshot(clinic_id: int, now: datetime):
    """
    Aggregate data for the home dashboard:
    - Stat cards (patients, today's appointments, pending, new this month)
    - Today's schedule
    - Recent activity from the Redis feed
    """
    try:
        today = now.date()
        with db_context():
            total_patients = Patient.query.filter_by(clinic_id=clinic_id, is_active=True).count()

            this_month = _patients_created_between(clinic_id, *_month_bounds(now))
            last_month = _patients_created_between(clinic_id, *_month_bounds(now, -1))

            schedule = list_day_schedule(clinic_id, today)
            yesterday_count = len(list_day_schedule(clinic_id, today - timedelta(days=1)))

            pending = (
                Appointment.query
                .filter(Appointment.clinic_id == clinic_id)
                .filter(Appointment.status == "pending")
                .filter(Appointment.date >= datetime.combine(today, datetime.min.time()))
                .count()
            )

        growth_delta, growth_positive = percent_delta(this_month, last_month)
        appt_delta, appt_positive = percent_delta(len(schedule), yesterday_count)

        stat_cards = [
            StatCard("Total Patients", f"{total_patients:,}", growth_delta, growth_positive, "users"),
            StatCard("Appointments Today", len(schedule), appt_delta, appt_positive, "calendar"),
            StatCard("Pending Appointments", pending, None, True, "clipboard"),
            StatCard("New This Month", this_month, growth_delta, growth_positive, "trending-up"),
        ]

        return {
            "stat_cards": stat_cards,
            "today_appointments": schedule,
            "activity": list_recent_activity(clinic_id),
            "today_label": now.strftime("%A, %b %d"),
            "as_of_human": now.strftime("%b %d, %Y %I:%M %p"),
        }

    except Exception as e:
        logger.exception(f"[get_home_snapshot] Failed: {e}")
        # In case of failure, return safe empty structures so UI still loads.
        return {
            "stat_cards": [],
            "today_appointments": [],
            "activity": [],
            "today_label": "",
            "as_of_human": "",
        }


# -------------------------------
# 📊 REPORTS
# -------------------------------

def get_clinic_report(clinic_id: int):
    try:
        with db_context():
            return {
                "patients": Patient.query.filter_by(clinic_id=clinic_id, is_active=True).count(),
                "doctors": User.query.filter_by(clinic_id=clinic_id, type="doctor", is_active=True).count(),
                "staff": User.query.filter_by(clinic_id=clinic_id, is_active=True).count(),
                "appointments": Appointment.query.filter_by(clinic_id=clinic_id).count(),
                "medicines": Medicine.query.filter_by(clinic_id=clinic_id, is_active=True).count(),
            }
    except Exception as e:
        logger.exception(f"[get_clinic_report] Failed for clinic_id={clinic_id}: {e}")
        return {"patients": 0, "doctors": 0, "staff": 0, "appointments": 0, "medicines": 0}


def get_patient_report(clinic_id: int, now: datetime, months: int = 6):
    try:
        with db_context():
            active = Patient.is_active.is_(True)
            by_status = _count_by(Patient.status, clinic_id, Patient, active)
            by_gender = _count_by(Patient.gender, clinic_id, Patient, active)
            by_blood_group = _count_by(Patient.blood_group, clinic_id, Patient, active)

            new_per_month = []
            for offset in range(-(months - 1), 1):
                start, stop = _month_bounds(now, offset)
                new_per_month.append(
                    {"label": start.strftime("%b %Y"), "count": _patients_created_between(clinic_id, start, stop)}
                )

        return {
            "by_status": [(s, by_status.get(s, 0)) for s in PATIENT_STATUSES],
            "by_gender": sorted(
                ((g or "unspecified", n) for g, n in by_gender.items()), key=lambda item: item[0]
            ),
            "by_blood_group": sorted(
                ((bg or "unknown", n) for bg, n in by_blood_group.items()), key=lambda item: item[0]
            ),
            "new_per_month": new_per_month,
        }
    except Exception as e:
        logger.exception(f"[get_patient_report] Failed for clinic_id={clinic_id}: {e}")
        return {"by_status": [], "by_gender": [], "by_blood_group": [], "new_per_month": []}


def get_appointment_report(clinic_id: int):
    try:
        with db_context():
            by_status = _count_by(Appointment.status, clinic_id, Appointment)
            by_type = _count_by(Appointment.type, clinic_id, Appointment)

            doctor_rows = (
                db.session.query(User, func.count(Appointment.id))
                .join(Appointment, Appointment.doctor_id == User.id)
                .filter(Appointment.clinic_id == clinic_id)
                .group_by(User.id)
                .order_by(func.count(Appointment.id).desc())
                .all()
            )
            completed_rows = _count_by(
                Appointment.doctor_id, clinic_id, Appointment, Appointment.status == "completed"
            )
            per_doctor = [
                {"doctor": user.display_name, "total": total, "completed": completed_rows.get(user.id, 0)}
                for user, total in doctor_rows
            ]

        attended = by_status.get("completed", 0)
        no_shows = by_status.get("no-show", 0)
        no_show_rate = round(no_shows / (attended + no_shows) * 100, 1) if attended + no_shows else None

        return {
            "by_status": [(s, by_status.get(s, 0)) for s in APPOINTMENT_STATUSES],
            "by_type": [(type_label(t), by_type.get(t, 0)) for t in APPOINTMENT_TYPES],
            "no_show_rate": no_show_rate,
            "per_doctor": per_doctor,
            "total": sum(by_status.values()),
        }
    except Exception as e:
        logger.exception(f"[get_appointment_report] Failed for clinic_id={clinic_id}: {e}")
        return {"by_status": [], "by_type": [], "no_show_rate": None, "per_doctor": [], "total": 0}


def get_medicine_report(clinic_id: int, limit: int = 10):
    try:
        with db_context():
            by_form = _count_by(Medicine.form, clinic_id, Medicine, Medicine.is_active.is_(True))
            recent = (
                Medicine.query
                .filter(Medicine.clinic_id == clinic_id, Medicine.last_prescribed_date.isnot(None))
                .order_by(Medicine.last_prescribed_date.desc())
                .limit(limit)
                .all()
            )
            recently_prescribed = [
                {"name": m.name, "brand": m.brand or "", "date": m.last_prescribed_date.strftime("%b %d, %Y")}
                for m in recent
            ]

        return {
            "by_form": sorted(((f or "Unspecified", n) for f, n in by_form.items()), key=lambda item: -item[1]),
            "recently_prescribed": recently_prescribed,
        }
    except Exception as e:
        logger.exception(f"[get_medicine_report] Failed for clinic_id={clinic_id}: {e}")
        return {"by_form": [], "recently_prescribed": []}
