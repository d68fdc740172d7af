from extensions import db
from datetime import datetime, timedelta

APPOINTMENT_STATUSES = ("pending", "confirmed", "completed", "cancelled", "no-show", "rescheduled")
APPOINTMENT_TYPES = ("general", "follow-up", "emergency")


class Appointment(db.Model):
    """Records of clinical consultations or procedures."""
    __tablename__ = "appointments"
    __table_args__ = (
        db.Index("idx_appointment_date", "clinic_id", "date"),
        db.Index("idx_appointment_status", "clinic_id", "status"),
    )

    id = db.Column(db.Integer, primary_key=True)
    clinic_id = db.Column(db.Integer, db.ForeignKey("clinics.id", ondelete="RESTRICT"), nullable=False)
    patient_id = db.Column(db.Integer, db.ForeignKey("patients.id", ondelete="RESTRICT"), nullable=False)
    doctor_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    status = db.Column(db.Enum(*APPOINTMENT_STATUSES, name="appointment_status"), nullable=False, default="pending")
    type = db.Column(db.Enum(*APPOINTMENT_TYPES, name="appointment_type"), nullable=False, default="general")
    date = db.Column(db.DateTime, nullable=False)
    duration = db.Column(db.Integer, nullable=False, default=30)  # minutes
    notes = db.Column(db.Text)
    actual_check_in = db.Column(db.DateTime)
    actual_check_out = db.Column(db.DateTime)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships back to Patient / User
    patient = db.relationship("Patient", backref=db.backref("appointments", lazy=True))
    doctor = db.relationship("User", foreign_keys=[doctor_id])

    @property
    def end(self):
        return self.date + timedelta(minutes=self.duration or 30)
