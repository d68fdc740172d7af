from extensions import db
from datetime import datetime

DOCUMENT_TYPES = (
    "prescription",
    "lab-report",
    "x-ray",
    "scan",
    "identification",
    "insurance",
    "consent-form",
    "other",
)
ASSIGNED_TO_TYPES = ("patient", "user")


class Document(db.Model):
    """
    File metadata for clinical documents. The bytes live in object storage
    under `file_key`; only the reference is kept here.
    """
    __tablename__ = "documents"
    __table_args__ = (
        db.Index("idx_document_assignment", "assigned_to_id", "assigned_to_type"),
    )

    id = db.Column(db.Integer, primary_key=True)
    clinic_id = db.Column(db.Integer, db.ForeignKey("clinics.id", ondelete="RESTRICT"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    type = db.Column(db.Enum(*DOCUMENT_TYPES, name="document_type"), nullable=False, default="other")
    # Polymorphic owner: a patient or a user
    assigned_to_id = db.Column(db.Integer, nullable=False)
    assigned_to_type = db.Column(db.Enum(*ASSIGNED_TO_TYPES, name="assigned_to_type"), nullable=False)
    appointment_id = db.Column(db.Integer, db.ForeignKey("appointments.id", ondelete="SET NULL"))
    file_key = db.Column(db.Text, nullable=False)
    file_name = db.Column(db.Text, nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    mime_type = db.Column(db.Text, nullable=False)
    uploaded_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
