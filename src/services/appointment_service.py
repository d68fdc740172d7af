from datetime import datetime, timedelta, date
import logging

from extensions import db
from src.models import Appointment, Patient, User
from src.services.activity_service import record_activity
from src.services.db_context import db_context
from src.ui.calendar_view import CalendarEvent, type_label


logger = logging.getLogger("appointment_service")

APPOINTMENT_FIELDS = (
    "patient_id",
    "doctor_id",
    "title",
    "description",
    "status",
    "type",
    "date",
    "duration",
    "notes",
)


# -------------------------------
# 📅 APPOINTMENT HELPERS
# -------------------------------

def to_calendar_event(appt: Appointment) -> CalendarEvent:
    patient = appt.patient
    doctor = appt.doctor
    return CalendarEvent(
        id=appt.id,
        title=patient.full_name if patient else appt.title,
        start=appt.date,
        end=appt.end,
        doctor_name=doctor.display_name if doctor else "",
        type=appt.type,
        status=appt.status,
    )


def list_calendar_events(clinic_id: int, first_day: date, last_day: date):
    """All active appointments starting within [first_day, last_day] as CalendarEvents."""
    try:
        start = datetime.combine(first_day, datetime.min.time())
        stop = datetime.combine(last_day + timedelta(days=1), datetime.min.time())
        with db_context():
            appointments = (
                Appointment.query
                .filter(Appointment.clinic_id == clinic_id)
                .filter(Appointment.is_active.is_(True))
                .filter(Appointment.date >= start)
                .filter(Appointment.date < stop)
                .order_by(Appointment.date.asc())
                .all()
            )
            return [to_calendar_event(a) for a in appointments]
    except Exception as e:
        logger.exception(
            f"[list_calendar_events] Failed for clinic_id={clinic_id}, range={first_day}..{last_day}: {e}"
        )
        return []


def list_day_schedule(clinic_id: int, day: date):
    """Rows for the "Today's Schedule" table, ordered by time."""
    rows = []
    for event in list_calendar_events(clinic_id, day, day):
        rows.append(
            {
                "id": event.id,
                "time": event.start.strftime("%I:%M %p"),
                "patient_name": event.title,
                "visit_type": type_label(event.type),
                "doctor": event.doctor_name,
                "status": event.status,
            }
        )
    return rows


def get_appointment(clinic_id: int, appointment_id: int):
    try:
        with db_context():
            return Appointment.query.filter_by(clinic_id=clinic_id, id=appointment_id).first()
    except Exception as e:
        logger.exception(f"[get_appointment] Failed for appointment_id={appointment_id}: {e}")
        return None


def upsert_appointment(clinic_id: int, appointment_id: int | None = None, **fields):
    """
    Create or update an appointment for dashboard/manual control.
    - If appointment_id is provided, update that appointment.
    - Otherwise, create a new one.
    Patient and doctor must both belong to the clinic.
    """
    try:
        with db_context():
            patient = Patient.query.filter_by(clinic_id=clinic_id, id=fields.get("patient_id")).first()
            doctor = User.query.filter_by(clinic_id=clinic_id, id=fields.get("doctor_id")).first()
            if not patient or not doctor:
                logger.warning(
                    f"[upsert_appointment] Unknown patient/doctor for clinic_id={clinic_id}: "
                    f"patient_id={fields.get('patient_id')} doctor_id={fields.get('doctor_id')}"
                )
                return None

            if appointment_id:
                appt = Appointment.query.filter_by(clinic_id=clinic_id, id=appointment_id).first()
                if not appt:
                    return None
                previous_date = appt.date
            else:
                appt = Appointment(clinic_id=clinic_id, created_at=datetime.utcnow())
                previous_date = None

            for name in APPOINTMENT_FIELDS:
                if name in fields and fields[name] is not None:
                    setattr(appt, name, fields[name])
            if not appt.title:
                appt.title = f"{appt.type or 'general'} visit".capitalize()

            # Moving an existing booking marks it as rescheduled unless the form set a status.
            if previous_date and previous_date != appt.date and not fields.get("status"):
                appt.status = "rescheduled"

            db.session.add(appt)
            db.session.commit()

            record_activity(
                clinic_id,
                "Appointment booked" if previous_date is None else "Appointment updated",
                f"{patient.full_name} with {doctor.display_name} on {appt.date:%b %d, %H:%M}.",
            )
            return appt
    except Exception as e:
        db.session.rollback()
        logger.exception(
            f"[upsert_appointment] Failed for appointment_id={appointment_id}, clinic_id={clinic_id}: {e}"
        )
        return None


def delete_appointment(clinic_id: int, appointment_id: int) -> bool:
    """
    Delete an appointment record safely using db_context.
    Returns True if deleted, False otherwise.
    """
    try:
        with db_context():
            appt = Appointment.query.filter_by(clinic_id=clinic_id, id=appointment_id).first()
            if not appt:
                return False

            label = f"{appt.title} on {appt.date:%b %d}"
            db.session.delete(appt)
            db.session.commit()

            record_activity(clinic_id, "Appointment removed", label)
            return True

    except Exception as e:
        db.session.rollback()
        logger.exception(f"[delete_appointment] Error deleting appointment {appointment_id}: {e}")
        return False
