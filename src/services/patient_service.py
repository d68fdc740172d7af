from datetime import datetime
import logging

from sqlalchemy import func

from extensions import db
from src.models import Appointment, Document, Patient
from src.services.activity_service import record_activity
from src.services.db_context import db_context


logger = logging.getLogger("patient_service")

PATIENT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "address",
    "chart_id",
    "date_of_birth",
    "gender",
    "blood_group",
    "emergency_contact_name",
    "emergency_contact_phone",
    "allergies",
    "notes",
    "status",
    "assigned_doctor_id",
)


# -------------------------------
# 👤 PATIENT HELPERS
# -------------------------------

def next_chart_id(clinic_id: int) -> int:
    """Chart ids are clinic-scoped; hand out max + 1."""
    current = (
        db.session.query(func.max(Patient.chart_id))
        .filter(Patient.clinic_id == clinic_id)
        .scalar()
    )
    return (current or 0) + 1


def get_patient(clinic_id: int, patient_id: int):
    try:
        with db_context():
            return Patient.query.filter_by(clinic_id=clinic_id, id=patient_id).first()
    except Exception as e:
        logger.exception(f"[get_patient] Failed for patient_id={patient_id}: {e}")
        return None


def _last_visits(clinic_id: int) -> dict:
    rows = (
        db.session.query(Appointment.patient_id, func.max(Appointment.date))
        .filter(Appointment.clinic_id == clinic_id)
        .filter(Appointment.status == "completed")
        .group_by(Appointment.patient_id)
        .all()
    )
    return {patient_id: last for patient_id, last in rows}


def list_patient_rows(clinic_id: int):
    """
    Directory rows for the patients table. Filtering, sorting and paging
    happen on these dicts in the UI layer.
    """
    try:
        with db_context():
            patients = (
                Patient.query
                .filter_by(clinic_id=clinic_id, is_active=True)
                .order_by(Patient.last_name.asc(), Patient.first_name.asc())
                .all()
            )
            last_visits = _last_visits(clinic_id)

            rows = []
            for p in patients:
                last_visit = last_visits.get(p.id)
                # Touch the relationship while the session is still active.
                doctor = p.assigned_doctor
                rows.append(
                    {
                        "id": p.id,
                        "chart_id": p.chart_id,
                        "first_name": p.first_name,
                        "last_name": p.last_name,
                        "name": p.full_name,
                        "email": p.email or "",
                        "phone": p.phone or "",
                        "last_visit": last_visit,
                        "last_visit_human": last_visit.strftime("%b %d, %Y") if last_visit else "—",
                        "assigned_doctor": doctor.display_name if doctor else "",
                        "status": p.status,
                    }
                )
            return rows
    except Exception as e:
        logger.exception(f"[list_patient_rows] Failed for clinic_id={clinic_id}: {e}")
        return []


def upsert_patient(clinic_id: int, patient_id: int | None = None, **fields):
    """
    Create or update a patient record.
    - If patient_id is provided, update that patient.
    - Otherwise create one; a missing chart_id gets the next free number.
    Returns None when the row could not be written (e.g. duplicate chart id).
    """
    try:
        with db_context():
            target = None
            if patient_id is not None:
                target = Patient.query.filter_by(clinic_id=clinic_id, id=patient_id).first()
                if target is None:
                    return None

            if target is None:
                target = Patient(clinic_id=clinic_id, created_at=datetime.utcnow())
                if not fields.get("chart_id"):
                    fields["chart_id"] = next_chart_id(clinic_id)
            elif not fields.get("chart_id"):
                fields.pop("chart_id", None)

            for name in PATIENT_FIELDS:
                if name in fields:
                    setattr(target, name, fields[name])

            created = target.id is None
            db.session.add(target)
            db.session.commit()

            record_activity(
                clinic_id,
                "New patient" if created else "Patient updated",
                f"{target.full_name} (chart #{target.chart_id})",
            )
            return target
    except Exception as e:
        db.session.rollback()
        logger.exception(f"[upsert_patient] Failed for patient_id={patient_id}, clinic_id={clinic_id}: {e}")
        return None


def delete_patient(clinic_id: int, patient_id: int) -> bool:
    """
    Remove a patient from the directory. Patients with appointments are
    kept for the record and only deactivated.
    """
    try:
        with db_context():
            p = Patient.query.filter_by(clinic_id=clinic_id, id=patient_id).first()
            if not p:
                return False

            name = p.full_name
            if Appointment.query.filter_by(patient_id=p.id).count():
                p.is_active = False
                p.status = "inactive"
                db.session.add(p)
            else:
                db.session.delete(p)
            db.session.commit()

            record_activity(clinic_id, "Patient removed", f"{name} removed from the directory.")
            return True
    except Exception as e:
        db.session.rollback()
        logger.exception(f"[delete_patient] Error deleting patient {patient_id}: {e}")
        return False


def get_patient_detail(clinic_id: int, patient_id: int):
    """Profile, appointment history (newest first) and documents for one patient."""
    try:
        with db_context():
            p = Patient.query.filter_by(clinic_id=clinic_id, id=patient_id).first()
            if not p:
                return None

            history = (
                Appointment.query
                .filter_by(clinic_id=clinic_id, patient_id=p.id)
                .order_by(Appointment.date.desc())
                .all()
            )
            documents = (
                Document.query
                .filter_by(clinic_id=clinic_id, assigned_to_type="patient", assigned_to_id=p.id)
                .order_by(Document.created_at.desc())
                .all()
            )
            doctor = p.assigned_doctor

            return {
                "patient": p,
                "assigned_doctor": doctor.display_name if doctor else "",
                "appointments": [
                    {
                        "id": a.id,
                        "title": a.title,
                        "date": a.date,
                        "status": a.status,
                        "type": a.type,
                        "doctor": a.doctor.display_name if a.doctor else "",
                        "notes": a.notes,
                    }
                    for a in history
                ],
                "documents": [
                    {
                        "id": d.id,
                        "title": d.title,
                        "type": d.type,
                        "file_name": d.file_name,
                        "file_size": d.file_size,
                        "mime_type": d.mime_type,
                        "created_at": d.created_at,
                    }
                    for d in documents
                ],
            }
    except Exception as e:
        logger.exception(f"[get_patient_detail] Failed for patient_id={patient_id}: {e}")
        return None

