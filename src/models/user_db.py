from extensions import db
from datetime import datetime

USER_TYPES = ("admin", "doctor", "staff")


class User(db.Model):
    """Clinic staff. Sign-in itself is handled by the external auth provider."""
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("clinic_id", "email", name="users_clinic_email_unique"),
        db.UniqueConstraint("clinic_id", "chart_id", name="users_clinic_chartid_unique"),
    )

    id = db.Column(db.Integer, primary_key=True)
    clinic_id = db.Column(db.Integer, db.ForeignKey("clinics.id", ondelete="RESTRICT"))
    name = db.Column(db.Text, nullable=False)
    email = db.Column(db.String(255), nullable=False)
    email_verified = db.Column(db.Boolean, nullable=False, default=False)
    image = db.Column(db.Text)
    first_name = db.Column(db.Text)
    last_name = db.Column(db.Text)
    phone = db.Column(db.Text)
    address = db.Column(db.Text)
    chart_id = db.Column(db.Integer)
    type = db.Column(db.Enum(*USER_TYPES, name="user_type"), nullable=False, default="staff")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    clinic = db.relationship("Clinic", backref=db.backref("users", lazy=True))

    @property
    def display_name(self):
        if self.type == "doctor" and not self.name.startswith("Dr."):
            return f"Dr. {self.name}"
        return self.name
