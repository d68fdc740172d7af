from datetime import datetime
import logging

from extensions import db
from src.models import Medicine
from src.services.activity_service import record_activity
from src.services.db_context import db_context


logger = logging.getLogger("medicine_service")

MEDICINE_FIELDS = ("name", "description", "brand", "form", "last_prescribed_date")


def list_medicine_rows(clinic_id: int):
    try:
        with db_context():
            medicines = (
                Medicine.query
                .filter_by(clinic_id=clinic_id, is_active=True)
                .order_by(Medicine.name.asc())
                .all()
            )
            return [
                {
                    "id": m.id,
                    "name": m.name,
                    "brand": m.brand or "",
                    "form": m.form or "",
                    "description": m.description or "",
                    "last_prescribed": m.last_prescribed_date,
                    "last_prescribed_human": (
                        m.last_prescribed_date.strftime("%b %d, %Y") if m.last_prescribed_date else "—"
                    ),
                }
                for m in medicines
            ]
    except Exception as e:
        logger.exception(f"[list_medicine_rows] Failed for clinic_id={clinic_id}: {e}")
        return []


def list_medicine_forms(clinic_id: int):
    """Distinct dosage forms in use, for the filter bar options."""
    try:
        with db_context():
            rows = (
                db.session.query(Medicine.form)
                .filter(Medicine.clinic_id == clinic_id, Medicine.form.isnot(None))
                .distinct()
                .order_by(Medicine.form.asc())
                .all()
            )
            return [form for (form,) in rows if form]
    except Exception as e:
        logger.exception(f"[list_medicine_forms] Failed for clinic_id={clinic_id}: {e}")
        return []


def upsert_medicine(clinic_id: int, medicine_id: int | None = None, **fields):
    try:
        with db_context():
            if medicine_id:
                med = Medicine.query.filter_by(clinic_id=clinic_id, id=medicine_id).first()
                if not med:
                    return None
            else:
                med = Medicine(clinic_id=clinic_id, created_at=datetime.utcnow())

            created = med.id is None
            for name in MEDICINE_FIELDS:
                if name in fields:
                    setattr(med, name, fields[name])

            db.session.add(med)
            db.session.commit()

            record_activity(clinic_id, "Medicine added" if created else "Medicine updated", med.name)
            return med
    except Exception as e:
        db.session.rollback()
        logger.exception(f"[upsert_medicine] Failed for medicine_id={medicine_id}, clinic_id={clinic_id}: {e}")
        return None


def delete_medicine(clinic_id: int, medicine_id: int) -> bool:
    """Medicines stay referenced by history, so removal only deactivates."""
    try:
        with db_context():
            med = Medicine.query.filter_by(clinic_id=clinic_id, id=medicine_id).first()
            if not med:
                return False
            med.is_active = False
            db.session.add(med)
            db.session.commit()
            record_activity(clinic_id, "Medicine removed", med.name)
            return True
    except Exception as e:
        db.session.rollback()
        logger.exception(f"[delete_medicine] Error deleting medicine {medicine_id}: {e}")
        return False
