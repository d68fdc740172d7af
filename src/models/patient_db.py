from extensions import db
from datetime import datetime

GENDERS = ("male", "female", "other")
PATIENT_STATUSES = ("active", "inactive", "critical")


class Patient(db.Model):
    __tablename__ = "patients"
    __table_args__ = (
        db.UniqueConstraint("clinic_id", "chart_id", name="patients_clinic_chartid_unique"),
        db.Index("idx_patient_name", "clinic_id", "last_name", "first_name"),
    )

    id = db.Column(db.Integer, primary_key=True)
    clinic_id = db.Column(db.Integer, db.ForeignKey("clinics.id", ondelete="RESTRICT"), nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255))
    phone = db.Column(db.String(20))
    address = db.Column(db.Text)
    chart_id = db.Column(db.Integer, nullable=False)
    date_of_birth = db.Column(db.Date)
    gender = db.Column(db.Enum(*GENDERS, name="gender"))
    blood_group = db.Column(db.String(10))
    emergency_contact_name = db.Column(db.String(255))
    emergency_contact_phone = db.Column(db.String(20))
    allergies = db.Column(db.Text)
    notes = db.Column(db.Text)
    status = db.Column(db.Enum(*PATIENT_STATUSES, name="patient_status"), nullable=False, default="active")
    assigned_doctor_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    assigned_doctor = db.relationship("User", foreign_keys=[assigned_doctor_id])

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"
